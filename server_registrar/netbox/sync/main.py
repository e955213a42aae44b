"""
Главный класс NetBoxSync, объединяющий все шаги регистрации.

Использует mixin-классы для организации кода по доменам:
- ReferencesSyncMixin: site, role, device-type, manufacturer, module-type-profile
- DevicesSyncMixin: устройство, шасси, device-bay
- ModulesSyncMixin: module-type → module-bay → module
- InterfacesSyncMixin: интерфейсы и иерархия
- MacAddressesSyncMixin: MAC-адреса с приоритетом владельца
- IPAddressesSyncMixin: IP-адреса и префиксы
"""

import logging
from typing import Any, Dict, Optional

from .base import SyncBase, SyncOptions
from .references import ReferencesSyncMixin
from .devices import DevicesSyncMixin
from .modules import ModulesSyncMixin
from .interfaces import InterfacesSyncMixin
from .mac_addresses import MacAddressesSyncMixin
from .ip_addresses import IPAddressesSyncMixin
from ...core.context import RunContext
from ...core.domain.mac import MacPriorityPolicy
from ...core.models import DeviceSnapshot

logger = logging.getLogger(__name__)


class NetBoxSync(
    ReferencesSyncMixin,
    DevicesSyncMixin,
    ModulesSyncMixin,
    InterfacesSyncMixin,
    MacAddressesSyncMixin,
    IPAddressesSyncMixin,
    SyncBase,
):
    """
    Регистрация сервера в NetBox.

    ВАЖНО: Только добавляет и обновляет объекты NetBox.
    Ничего не удаляется и не переименовывается.

    Attributes:
        client: NetBox клиент
        dry_run: Режим симуляции (без изменений)
        options: Параметры регистрации
        actions: Запланированные изменения (в dry-run)

    Example:
        # Проверить что будет изменено
        sync = NetBoxSync(client, dry_run=True)
        result = sync.register(snapshot)
        for action in sync.actions:
            print(action.description)

    Доступные методы:
        - register(snapshot)
        - sync_device(snapshot)
        - sync_modules(device_id, modules)
        - sync_interfaces(device_id, interfaces)
        - sync_mac_addresses(interfaces, interface_ids)
        - sync_ip_addresses(interfaces, interface_ids)
    """

    def __init__(
        self,
        client,
        dry_run: bool = False,
        context: Optional[RunContext] = None,
        options: Optional[SyncOptions] = None,
        mac_priority: Optional[MacPriorityPolicy] = None,
    ):
        """
        Инициализация синхронизатора.

        Args:
            client: NetBox клиент
            dry_run: Режим симуляции (ничего не меняет)
            context: Контекст выполнения
            options: Параметры регистрации
            mac_priority: Политика приоритетов владельца MAC
        """
        super().__init__(
            client=client,
            dry_run=dry_run,
            context=context,
            options=options,
            mac_priority=mac_priority,
        )

    def register(self, snapshot: DeviceSnapshot) -> Dict[str, Any]:
        """
        Приводит NetBox к состоянию снимка.

        Порядок фиксирован: справочники и устройство → модули →
        интерфейсы → MAC → IP. Каждый следующий шаг использует ID,
        полученные на предыдущих.

        Args:
            snapshot: Снимок сервера

        Returns:
            dict: Статистика по разделам + device_id, dry_run, actions

        Raises:
            ReconcileError: Фатальная ошибка (нет справочника, имя блейда, bays)
        """
        mode = " [DRY-RUN]" if self.dry_run else ""
        logger.info(f"{self._log_prefix()}Регистрация {snapshot.name}{mode}")

        device = self.sync_device(snapshot)
        device_id = device.pop("device_id")

        modules = self.sync_modules(device_id, list(snapshot.modules))

        all_interfaces = snapshot.all_interfaces()
        interfaces = self.sync_interfaces(device_id, all_interfaces)
        interface_ids = interfaces.pop("ids")

        mac_addresses = self.sync_mac_addresses(all_interfaces, interface_ids)
        ip_addresses = self.sync_ip_addresses(all_interfaces, interface_ids)

        result = {
            "device": device,
            "modules": modules,
            "interfaces": interfaces,
            "mac_addresses": mac_addresses,
            "ip_addresses": ip_addresses,
            "device_id": device_id,
            "dry_run": self.dry_run,
            "actions": len(self.actions),
        }

        failed = sum(
            section.get("failed", 0)
            for section in (device, modules, interfaces, mac_addresses, ip_addresses)
        )
        if failed:
            logger.warning(f"{self._log_prefix()}Регистрация {snapshot.name} завершена, ошибок: {failed}")
        else:
            logger.info(f"{self._log_prefix()}Регистрация {snapshot.name} завершена")
        return result
