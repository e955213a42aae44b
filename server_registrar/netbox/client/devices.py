"""
Mixin для поиска устройств и интерфейсов NetBox.

Работает поверх общего get() базового клиента, поэтому подходит
и для тестового клиента в памяти.
"""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class DevicesMixin:
    """Методы для работы с устройствами и интерфейсами."""

    def get_device_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Находит устройство по точному имени.

        Результаты с другим именем игнорируются.

        Args:
            name: Имя устройства

        Returns:
            dict или None
        """
        for device in self.get("devices", name=name)["results"]:
            if device.get("name") == name:
                return device
        return None

    def get_interfaces(self, device_id: int) -> List[Dict[str, Any]]:
        """
        Получает интерфейсы устройства.

        Args:
            device_id: ID устройства

        Returns:
            List[dict]: Интерфейсы
        """
        interfaces = self.get("interfaces", device_id=device_id)["results"]
        logger.debug(f"Получено интерфейсов: {len(interfaces)}")
        return interfaces

    def get_interface(self, interface_id: int) -> Optional[Dict[str, Any]]:
        """
        Получает интерфейс по ID.

        Returns:
            dict или None
        """
        for interface in self.get("interfaces", id=interface_id)["results"]:
            if interface.get("id") == interface_id:
                return interface
        return None
