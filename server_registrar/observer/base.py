"""
Контракт сборщика фактов о сервере.

Observer опрашивает локальные утилиты (dmidecode, ip, ethtool, smartctl,
ipmitool ...) и возвращает структурированные факты. Регистрация в NetBox
зависит только от этого контракта.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.models import DeviceIdentity, RawInterface, ModuleSpec, ModuleCategory, IpmiFacts


class HardwareObserver(ABC):
    """
    Абстрактный сборщик фактов.

    Реализации:
    - FactsFileObserver: факты из YAML/JSON файла, собранного внешним агентом
    """

    @abstractmethod
    def hostname(self) -> str:
        """Короткое имя хоста."""

    @abstractmethod
    def device_identity(self) -> DeviceIdentity:
        """Модель и серийный номер платформы."""

    @abstractmethod
    def list_interfaces(self) -> List[RawInterface]:
        """Сетевые интерфейсы с master, скоростью, MTU, MAC и адресами."""

    @abstractmethod
    def list_modules(self, category: ModuleCategory) -> List[ModuleSpec]:
        """
        Модули одной категории.

        Raises:
            ObserverUnavailableError: Утилита для категории недоступна
        """

    @abstractmethod
    def ipmi_facts(self) -> Optional[IpmiFacts]:
        """MAC и IPv4 BMC или None, если BMC нет."""
