"""
Синхронизация интерфейсов устройства.

Интерфейсы создаются от родителей к детям: bond/bridge раньше своих портов,
чтобы ID родителя был известен при создании порта. Перед каждым интерфейсом
список интерфейсов устройства перечитывается из NetBox: ID родителя берётся
из NetBox, а не из памяти.
Родитель записывается в поле по его классу:
    lag    → InterfacePayload.lag
    bridge → InterfacePayload.bridge
    прочие → InterfacePayload.parent
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .base import SyncStats
from ..payloads import InterfacePayload
from ...core.models import InterfaceSpec, InterfaceKind
from ...core.constants import IPMI_INTERFACE_NAME

logger = logging.getLogger(__name__)


def order_parents_first(interfaces: List[InterfaceSpec]) -> List[InterfaceSpec]:
    """
    Упорядочивает интерфейсы так, чтобы родитель шёл раньше детей.

    Внутри одного уровня исходный порядок сохраняется.
    Родитель, которого нет в списке, не учитывается.
    """
    names = {intf.name for intf in interfaces}
    ordered: List[InterfaceSpec] = []
    placed = set()
    pending = list(interfaces)

    while pending:
        rest = []
        for intf in pending:
            if not intf.parent or intf.parent not in names or intf.parent in placed:
                ordered.append(intf)
                placed.add(intf.name)
            else:
                rest.append(intf)
        if len(rest) == len(pending):
            # Цикл: иерархия уже очищена в TopologyBuilder, сюда не попадаем
            ordered.extend(rest)
            break
        pending = rest

    return ordered


class InterfacesSyncMixin:
    """Mixin для интерфейсов устройства."""

    def _interface_payload(
        self,
        device_id: int,
        intf: InterfaceSpec,
        parent: Optional[Tuple[int, InterfaceKind]],
    ) -> InterfacePayload:
        """Тело интерфейса. Скорость переводится из Mbps в Kbps."""
        payload = InterfacePayload(
            device=device_id,
            name=intf.name,
            type=intf.type,
            speed=intf.speed * 1000 if intf.speed else None,
            mtu=intf.mtu,
            enabled=intf.enabled,
        )
        if intf.name == IPMI_INTERFACE_NAME:
            payload.mgmt_only = True

        if parent is not None:
            parent_id, parent_kind = parent
            if parent_kind == InterfaceKind.LAG:
                payload.lag = parent_id
            elif parent_kind == InterfaceKind.BRIDGE:
                payload.bridge = parent_id
            else:
                payload.parent = parent_id
        return payload

    def _interface_changes(self, existing: Dict[str, Any], payload: InterfacePayload) -> Dict[str, Any]:
        """Поля payload, отличающиеся от интерфейса в NetBox (device и name не сравниваются)."""
        changes = {}
        for field_name, value in payload.to_dict().items():
            if field_name in ("device", "name"):
                continue
            current = existing.get(field_name)
            if field_name == "type":
                current = self._choice_value(current)
            elif field_name in ("lag", "bridge", "parent"):
                current = self._ref_id(current)
            if current != value:
                changes[field_name] = value
        return changes

    def _sync_interface(
        self,
        device_id: int,
        intf: InterfaceSpec,
        existing: Optional[Dict[str, Any]],
        parent: Optional[Tuple[int, InterfaceKind]],
    ) -> Tuple[str, int]:
        """
        Создаёт или обновляет один интерфейс.

        Returns:
            Tuple[str, int]: (created/updated/skipped, ID интерфейса)
        """
        payload = self._interface_payload(device_id, intf, parent)

        if existing is None:
            created = self._create(payload, f"Создание интерфейса {intf.name} ({intf.type})")
            return "created", created["id"]

        changes = self._interface_changes(existing, payload)
        if not changes:
            return "skipped", existing["id"]

        self._update(
            existing["id"],
            InterfacePayload(**changes),
            f"Обновление интерфейса {intf.name}: {', '.join(sorted(changes))}",
        )
        return "updated", existing["id"]

    def _remote_interfaces(self, device_id: int) -> Dict[str, Dict[str, Any]]:
        """Интерфейсы устройства в NetBox: имя → строка."""
        if self._is_planned(device_id):
            return {}
        by_name: Dict[str, Dict[str, Any]] = {}
        for row in self.client.get_interfaces(device_id):
            by_name.setdefault(row.get("name"), row)
        return by_name

    def sync_interfaces(self, device_id: int, interfaces: List[InterfaceSpec]) -> Dict[str, Any]:
        """
        Синхронизирует интерфейсы устройства.

        Args:
            device_id: ID устройства
            interfaces: Интерфейсы снимка (включая IPMI)

        Returns:
            dict: stats + "ids" (имя → ID интерфейса для MAC и IP)
        """
        stats = SyncStats("created", "updated", "skipped", "failed")

        ids: Dict[str, int] = {}
        kinds = {intf.name: intf.kind for intf in interfaces}

        for intf in order_parents_first(interfaces):
            remote = self._safe_netbox_call(
                f"чтения интерфейсов устройства (id={device_id})",
                self._remote_interfaces,
                device_id,
            )
            if remote is None:
                # Интерфейс не синхронизируется без списка из NetBox
                stats.add("failed")
                continue

            parent = None
            if intf.parent:
                parent_row = remote.get(intf.parent)
                parent_id = parent_row["id"] if parent_row else ids.get(intf.parent)
                if parent_id is None:
                    logger.warning(
                        f"{self._log_prefix()}Интерфейс {intf.name}: родитель {intf.parent} "
                        f"не синхронизирован, создаём без родителя"
                    )
                else:
                    parent = (parent_id, kinds[intf.parent])

            result = self._safe_netbox_call(
                f"интерфейса {intf.name}",
                self._sync_interface,
                device_id,
                intf,
                remote.get(intf.name),
                parent,
            )
            if result is None:
                stats.add("failed")
                continue

            status, interface_id = result
            ids[intf.name] = interface_id
            stats.add(status, intf.name)

        logger.info(
            f"{self._log_prefix()}Интерфейсы: создано {stats.stats['created']}, "
            f"обновлено {stats.stats['updated']}, без изменений {stats.stats['skipped']}"
        )
        result = stats.result()
        result["ids"] = ids
        return result
