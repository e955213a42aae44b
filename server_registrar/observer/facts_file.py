"""
Observer, читающий факты из файла.

Формат (YAML или JSON):

    hostname: srv-01
    identity:
      product_name: PowerEdge R640
      serial: ABC1234
    interfaces:
      - {name: eno1, mac: "aa:bb:cc:dd:ee:01", speed: 1000, mtu: 1500, master: bond0}
      - {name: bond0, kind: lag, ipv4: 10.0.0.10/24}
    modules:
      CPU:
        - {bay: CPU1, manufacturer: Intel, model: Xeon Gold 6130, cores: 16}
      Memory:
        - {bay: DIMM-A1, manufacturer: Samsung, model: M393A2K40, serial: S1, size: 16}
    unavailable: [GPU]
    ipmi:
      mac: "aa:bb:cc:dd:ee:ff"
      ipv4: 10.0.100.10
"""

import json
import socket
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .base import HardwareObserver
from ..core.models import DeviceIdentity, RawInterface, ModuleSpec, ModuleCategory, IpmiFacts
from ..core.exceptions import ObserverError, ObserverUnavailableError

logger = logging.getLogger(__name__)


class FactsFileObserver(HardwareObserver):
    """
    Факты из YAML/JSON файла.

    Категории из списка unavailable считаются недоступными
    (утилита не найдена на сервере).

    Example:
        observer = FactsFileObserver("/var/lib/server_registrar/facts.yaml")
        interfaces = observer.list_interfaces()
    """

    def __init__(self, path: Union[str, Path, None] = None, data: Optional[Dict[str, Any]] = None):
        """
        Args:
            path: Путь к файлу фактов
            data: Уже загруженные факты (вместо файла)

        Raises:
            ObserverError: Файл не найден или не разбирается
        """
        if data is None:
            if path is None:
                raise ObserverError("Не указан файл фактов")
            data = self._load(Path(path))
        if not isinstance(data, dict):
            raise ObserverError(f"Файл фактов должен содержать словарь, получено {type(data).__name__}")
        self._data = data
        try:
            self._unavailable = {
                ModuleCategory.parse(c) for c in (data.get("unavailable") or [])
            }
        except ValueError as e:
            raise ObserverError(f"Некорректный список unavailable: {e}") from e

    @staticmethod
    def _load(path: Path) -> Dict[str, Any]:
        """Загружает YAML или JSON."""
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ObserverError(f"Не удалось прочитать файл фактов {path}: {e}") from e

        try:
            if path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (ValueError, yaml.YAMLError) as e:
            raise ObserverError(f"Файл фактов {path} не разбирается: {e}") from e

        logger.debug(f"Факты загружены из {path}")
        return data or {}

    def hostname(self) -> str:
        name = self._data.get("hostname") or socket.gethostname()
        return str(name).split(".")[0]

    def device_identity(self) -> DeviceIdentity:
        return DeviceIdentity.from_dict(self._data.get("identity") or {})

    def list_interfaces(self) -> List[RawInterface]:
        return RawInterface.ensure_list(self._data.get("interfaces") or [])

    def list_modules(self, category: ModuleCategory) -> List[ModuleSpec]:
        if category in self._unavailable:
            raise ObserverUnavailableError(
                f"Сбор категории {category.value} недоступен",
                category=category.value,
            )

        modules = self._data.get("modules") or {}
        items = None
        for key, value in modules.items():
            if str(key).lower() == category.value.lower():
                items = value
                break

        return [ModuleSpec.from_dict(category, item) for item in (items or [])]

    def ipmi_facts(self) -> Optional[IpmiFacts]:
        ipmi = self._data.get("ipmi")
        if not ipmi:
            return None
        facts = IpmiFacts.from_dict(ipmi)
        if not facts.mac and not facts.ipv4:
            return None
        return facts
