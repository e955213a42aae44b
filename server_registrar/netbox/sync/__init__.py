"""
Модуль синхронизации с NetBox.

Разбит на логические части:
- base: Базовые методы и утилиты
- references: Справочные объекты
- devices: Устройство, шасси, device-bay
- modules: Модули по категориям
- interfaces: Интерфейсы
- mac_addresses: MAC-адреса
- ip_addresses: IP-адреса и префиксы

    from server_registrar.netbox.sync import NetBoxSync
"""

from .base import SyncOptions, SyncStats, PlannedAction
from .main import NetBoxSync

__all__ = ["NetBoxSync", "SyncOptions", "SyncStats", "PlannedAction"]
