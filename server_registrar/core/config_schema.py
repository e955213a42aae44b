"""
Pydantic схемы для валидации config.yaml.

Ошибки валидации выбрасывают ConfigError.

Пример использования:
    from server_registrar.core.config_schema import validate_config

    validated = validate_config(config.to_dict())  # raises ConfigError on failure
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from .exceptions import ConfigError
from .models import ModuleCategory
from .constants import DEFAULT_EXCLUDE_INTERFACES, DEFAULT_ROLE_COLOR


class NetBoxConfig(BaseModel):
    """Настройки NetBox."""
    url: str = "http://localhost:8000/"
    token: str = ""
    verify_ssl: bool = True
    timeout: int = Field(default=30, ge=1, le=300)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Проверяет что URL валидный."""
        if v and not v.startswith(("http://", "https://")):
            raise PydanticCustomError(
                "invalid_url",
                "NetBox URL должен начинаться с http:// или https://",
            )
        return v.rstrip("/") + "/"


class DefaultsConfig(BaseModel):
    """Значения по умолчанию для регистрируемого устройства."""
    site: str = Field(default="office", min_length=1)
    role: str = Field(default="Server", min_length=1)
    status: str = Field(default="active", pattern="^(active|planned|staged|failed|inventory|decommissioning|offline)$")
    device_type: str = ""


class RolesConfig(BaseModel):
    """Имена ролей и цвет для автосоздания."""
    server: str = "Server"
    blade: str = "Blade"
    chassis: str = "Chassis"
    color: str = Field(default=DEFAULT_ROLE_COLOR, pattern="^[0-9a-fA-F]{6}$")


class FiltersConfig(BaseModel):
    """Настройки фильтрации интерфейсов."""
    exclude_interfaces: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_INTERFACES))


class ModulesConfig(BaseModel):
    """Настройки регистрации модулей."""
    enabled: bool = True
    categories: List[str] = Field(default_factory=lambda: [c.value for c in ModuleCategory])
    profiles: Dict[str, str] = Field(default_factory=dict)
    sync_attributes: bool = True

    @field_validator("categories")
    @classmethod
    def validate_categories(cls, v: List[str]) -> List[str]:
        """Проверяет что категории известны."""
        result = []
        for item in v:
            try:
                result.append(ModuleCategory.parse(item).value)
            except ValueError:
                raise PydanticCustomError(
                    "invalid_category",
                    "Неизвестная категория модулей: {category}",
                    {"category": item},
                )
        return result


class IPConfig(BaseModel):
    """Настройки IP-адресов."""
    create_prefixes: bool = True


class DeviceConfig(BaseModel):
    """Настройки обновления устройства."""
    update_mode: str = Field(default="patch", pattern="^(patch|replace)$")


class LoggingConfig(BaseModel):
    """Настройки логирования."""
    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    json_format: bool = False
    console: bool = True
    file_path: Optional[str] = None
    rotation: str = Field(default="size", pattern="^(size|time|none)$")
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)
    backup_count: int = Field(default=5, ge=1, le=100)
    when: str = "midnight"
    interval: int = Field(default=1, ge=1)


class AppConfig(BaseModel):
    """Полная конфигурация приложения."""
    netbox: NetBoxConfig = Field(default_factory=NetBoxConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    roles: RolesConfig = Field(default_factory=RolesConfig)
    blades: Dict[str, str] = Field(default_factory=dict)
    filters: FiltersConfig = Field(default_factory=FiltersConfig)
    modules: ModulesConfig = Field(default_factory=ModulesConfig)
    ip: IPConfig = Field(default_factory=IPConfig)
    device: DeviceConfig = Field(default_factory=DeviceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def validate_config(config_dict: dict, config_file: Optional[str] = None) -> AppConfig:
    """
    Валидирует словарь конфигурации.

    Args:
        config_dict: Словарь из YAML (после слияния с дефолтами)
        config_file: Путь к файлу для сообщения об ошибке

    Returns:
        AppConfig: Валидированная конфигурация

    Raises:
        ConfigError: При ошибке валидации
    """
    try:
        return AppConfig(**config_dict)
    except ValidationError as e:
        errors = e.errors()
        key = None
        error_msg = str(e)
        if errors:
            first_error = errors[0]
            key = ".".join(str(x) for x in first_error.get("loc", []))
            msg = first_error.get("msg", "Unknown error")
            error_msg = f"{key}: {msg}"

        raise ConfigError(
            message=f"Ошибка валидации конфигурации: {error_msg}",
            config_file=config_file or "config.yaml",
            key=key,
        ) from e


def get_default_config() -> AppConfig:
    """Возвращает конфигурацию по умолчанию."""
    return AppConfig()
