"""
Загрузчик конфигурации из config.yaml.

Предоставляет доступ к настройкам через точку:
    config.netbox.url
    config.defaults.site
    config.filters.exclude_interfaces

Порядок слоёв: значения по умолчанию → YAML → переменные окружения.
"""

import os
import copy
import logging
from typing import Any, Optional

import yaml

from .core.constants import DEFAULT_EXCLUDE_INTERFACES, DEFAULT_ROLE_COLOR
from .core.models import ModuleCategory

logger = logging.getLogger(__name__)

# Путь к файлу конфигурации рядом с пакетом
CONFIG_FILE = os.path.join(os.path.dirname(__file__), "config.yaml")


class ConfigSection:
    """Секция конфигурации с доступом через точку."""

    def __init__(self, data: dict = None):
        self._data = data if data is not None else {}

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattribute__(name)
        value = self._data.get(name)
        if isinstance(value, dict):
            return ConfigSection(value)
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            super().__setattr__(name, value)
        else:
            self._data[name] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Получить значение с дефолтом."""
        return self._data.get(key, default)

    def to_dict(self) -> dict:
        """Сырые данные секции."""
        return self._data

    def __repr__(self) -> str:
        return f"ConfigSection({self._data})"


class Config:
    """
    Главный класс конфигурации.

    Пример:
        config.netbox.url            # "http://localhost:8000/"
        config.defaults.role         # "Server"
        config.blades                # {"PowerEdge M640": "PowerEdge M1000e"}
    """

    def __init__(self, config_file: Optional[str] = None):
        self._data = self._get_defaults()
        self._source: Optional[str] = None
        self._load_yaml(config_file)
        self._load_env()

    def _get_defaults(self) -> dict:
        """Значения по умолчанию."""
        return {
            "netbox": {
                "url": "http://localhost:8000/",
                "token": "",
                "verify_ssl": True,
                "timeout": 30,
            },
            "defaults": {
                "site": "office",
                "role": "Server",
                "status": "active",
                "device_type": "",
            },
            "roles": {
                "server": "Server",
                "blade": "Blade",
                "chassis": "Chassis",
                "color": DEFAULT_ROLE_COLOR,
            },
            # Модель блейда → модель шасси
            "blades": {},
            "filters": {
                "exclude_interfaces": list(DEFAULT_EXCLUDE_INTERFACES),
            },
            "modules": {
                "enabled": True,
                "categories": [c.value for c in ModuleCategory],
                # Категория → имя module-type-profile в NetBox
                "profiles": {
                    "CPU": "CPU",
                    "Memory": "Memory",
                    "Disk": "Hard disk",
                    "GPU": "GPU",
                    "Controller": "Controller",
                    "NIC": "NIC",
                    "PSU": "Power supply",
                },
                "sync_attributes": True,
            },
            "ip": {
                "create_prefixes": True,
            },
            "device": {
                "update_mode": "patch",
            },
            "logging": {
                "level": "INFO",
                "json_format": False,
                "console": True,
                "file_path": None,
                "rotation": "size",
            },
        }

    def _load_yaml(self, config_file: Optional[str] = None) -> None:
        """Загружает настройки из YAML файла."""
        if not config_file:
            search_paths = [
                CONFIG_FILE,
                "config.yaml",
                "config.yml",
                ".server_registrar.yaml",
            ]
            for path in search_paths:
                if os.path.exists(path):
                    config_file = path
                    break

        if not config_file or not os.path.exists(config_file):
            return

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Ошибка чтения {config_file}: {e}")
            return

        self._merge_dict(self._data, yaml_data)
        self._source = config_file
        logger.debug(f"Конфигурация загружена из {config_file}")

    def _load_env(self) -> None:
        """Загружает настройки из переменных окружения."""
        if os.getenv("NETBOX_URL"):
            self._data["netbox"]["url"] = os.getenv("NETBOX_URL")
        if os.getenv("NETBOX_TOKEN"):
            self._data["netbox"]["token"] = os.getenv("NETBOX_TOKEN")

    def _merge_dict(self, base: dict, override: dict) -> None:
        """Рекурсивно мержит словари."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_dict(base[key], value)
            else:
                base[key] = value

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            return super().__getattribute__(name)
        value = self._data.get(name)
        if isinstance(value, dict):
            return ConfigSection(value)
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Сырое значение верхнего уровня (dict для секций)."""
        return self._data.get(key, default)

    @property
    def source(self) -> Optional[str]:
        """Путь к загруженному YAML (None если только дефолты)."""
        return self._source

    def to_dict(self) -> dict:
        """Копия итоговой конфигурации."""
        return copy.deepcopy(self._data)

    def reload(self, config_file: Optional[str] = None) -> None:
        """Перезагружает конфигурацию."""
        self._data = self._get_defaults()
        self._source = None
        self._load_yaml(config_file)
        self._load_env()


# Глобальный экземпляр
config = Config()


def load_config(config_file: Optional[str] = None) -> Config:
    """
    Загружает конфигурацию из файла.

    Args:
        config_file: Путь к YAML файлу (опционально)

    Returns:
        Config: Объект конфигурации
    """
    config.reload(config_file)
    return config
