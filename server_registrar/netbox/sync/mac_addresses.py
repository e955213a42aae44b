"""
Синхронизация MAC-адресов.

Один MAC в NetBox принадлежит одному интерфейсу. Если адрес сообщают
несколько интерфейсов (порт и его bond/bridge), владелец выбирается
по политике приоритетов (core.domain.mac):

1. MAC уже привязан к нужному интерфейсу → ничего не делаем
2. MAC есть, но у другого интерфейса → переносим, только если
   приоритет нового владельца строго выше текущего
3. MAC нет → создаём с привязкой
"""

import logging
from typing import Any, Dict, List, Optional

from .base import SyncStats
from ..payloads import MacAddressPayload
from ...core.models import InterfaceSpec
from ...core.constants import INTERFACE_OBJECT_TYPE, macs_equal
from ...core.domain.mac import (
    MacCandidate,
    UNASSIGNED_PRIORITY,
    collect_mac_candidates,
    select_mac_owners,
)

logger = logging.getLogger(__name__)


class MacAddressesSyncMixin:
    """Mixin для MAC-адресов интерфейсов."""

    def _current_owner_priority(self, mac_row: Dict[str, Any]) -> int:
        """
        Приоритет интерфейса, которому сейчас принадлежит MAC-объект.

        Владелец оценивается той же политикой, даже если он на другом
        устройстве: MAC переезжает, только если новый владелец строго важнее.
        MAC-объект без привязки имеет приоритет UNASSIGNED_PRIORITY (0) и
        забирается любым кандидатом.
        """
        owner_id = mac_row.get("assigned_object_id")
        if not owner_id or mac_row.get("assigned_object_type") not in (None, INTERFACE_OBJECT_TYPE):
            return UNASSIGNED_PRIORITY

        owner = self.client.get_interface(owner_id)
        if owner is None:
            return UNASSIGNED_PRIORITY
        return self.mac_priority(self._choice_value(owner.get("type")) or "", owner.get("name") or "")

    def _sync_mac(self, candidate: MacCandidate, interface_id: int) -> str:
        """
        Приводит MAC-объект к нужному владельцу.

        Returns:
            str: created / updated / skipped
        """
        mac = candidate.mac
        existing = self._find(
            "mac-addresses",
            lambda r: macs_equal(r.get("mac_address"), mac),
            mac_address=mac,
        )

        if existing is None:
            self._create(
                MacAddressPayload.assign(interface_id, mac_address=mac),
                f"Создание MAC {mac} на {candidate.interface_name}",
            )
            return "created"

        if existing.get("assigned_object_id") == interface_id:
            return "skipped"

        current_priority = self._current_owner_priority(existing)
        if candidate.priority <= current_priority:
            logger.debug(
                f"{self._log_prefix()}MAC {mac} остаётся у текущего владельца "
                f"(приоритет {current_priority} >= {candidate.priority})"
            )
            return "skipped"

        self._update(
            existing["id"],
            MacAddressPayload.assign(interface_id),
            f"Перенос MAC {mac} на {candidate.interface_name} "
            f"(приоритет {candidate.priority} > {current_priority})",
        )
        return "updated"

    def sync_mac_addresses(
        self,
        interfaces: List[InterfaceSpec],
        interface_ids: Dict[str, int],
    ) -> Dict[str, Any]:
        """
        Синхронизирует MAC-адреса интерфейсов.

        Args:
            interfaces: Интерфейсы снимка
            interface_ids: Имя → ID интерфейса в NetBox

        Returns:
            dict: stats
        """
        stats = SyncStats("created", "updated", "skipped", "failed")

        candidates = collect_mac_candidates(interfaces, self.mac_priority)
        for owner in select_mac_owners(candidates):
            interface_id: Optional[int] = interface_ids.get(owner.interface_name)
            if interface_id is None:
                logger.warning(
                    f"{self._log_prefix()}MAC {owner.mac}: интерфейс {owner.interface_name} "
                    f"не синхронизирован, пропуск"
                )
                stats.add("failed")
                continue

            status = self._safe_netbox_call(
                f"MAC {owner.mac}",
                self._sync_mac,
                owner,
                interface_id,
                default="failed",
            )
            stats.add(status, f"{owner.mac}:{owner.interface_name}")

        return stats.result()
