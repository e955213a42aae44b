"""
Синхронизация IP-адресов и префиксов.

Адрес ищется по строке в форме NetBox (10.0.0.5/24, IPv6 сжатый
в нижнем регистре). Найденный адрес, привязанный к другому
интерфейсу, переносится на нужный.
Адреса и префиксы никогда не удаляются.
"""

import ipaddress
import logging
from typing import Any, Dict, List, Optional

from .base import SyncStats
from ..payloads import IpAddressPayload, PrefixPayload
from ...core.models import InterfaceSpec
from ...core.constants import normalize_address

logger = logging.getLogger(__name__)


def network_for(address: str) -> Optional[str]:
    """
    Префикс, содержащий адрес.

    Адреса хоста (/32, /128) префикса не дают.

    Raises:
        ValueError: Строка не является адресом с маской
    """
    iface = ipaddress.ip_interface(address)
    network = iface.network
    if network.prefixlen == network.max_prefixlen:
        return None
    return str(network)


class IPAddressesSyncMixin:
    """Mixin для IP-адресов и префиксов."""

    def _ensure_prefix(self, prefix: str) -> str:
        """Находит или создаёт префикс. Returns: created / skipped."""
        existing = self._find("prefixes", lambda r: r.get("prefix") == prefix, prefix=prefix)
        if existing is not None:
            return "skipped"
        self._create(PrefixPayload(prefix=prefix, status="active"), f"Создание префикса {prefix}")
        return "created"

    def _sync_ip(self, address: str, interface_id: int, interface_name: str) -> str:
        """
        Создаёт IP или переносит его на интерфейс.

        Returns:
            str: created / updated / skipped
        """
        address = normalize_address(address)
        existing = self._find(
            "ip-addresses",
            lambda r: normalize_address(r.get("address")) == address,
            address=address,
        )

        if existing is None:
            payload = IpAddressPayload.assign(interface_id, address=address)
            payload.status = "active"
            self._create(payload, f"Создание IP {address} на {interface_name}")
            return "created"

        if existing.get("assigned_object_id") == interface_id:
            return "skipped"

        self._update(
            existing["id"],
            IpAddressPayload.assign(interface_id),
            f"Перенос IP {address} на {interface_name} "
            f"(был на id={existing.get('assigned_object_id')})",
        )
        return "updated"

    def sync_ip_addresses(
        self,
        interfaces: List[InterfaceSpec],
        interface_ids: Dict[str, int],
    ) -> Dict[str, Any]:
        """
        Синхронизирует IP-адреса интерфейсов.

        Args:
            interfaces: Интерфейсы снимка
            interface_ids: Имя → ID интерфейса в NetBox

        Returns:
            dict: stats + prefixes_created
        """
        stats = SyncStats("created", "updated", "skipped", "failed", "prefixes_created")
        seen_prefixes = set()

        for intf in interfaces:
            if not intf.addresses:
                continue
            interface_id = interface_ids.get(intf.name)
            if interface_id is None:
                logger.warning(
                    f"{self._log_prefix()}IP интерфейса {intf.name} пропущены: интерфейс не синхронизирован"
                )
                for _ in intf.addresses:
                    stats.add("failed")
                continue

            for address in intf.addresses:
                try:
                    prefix = network_for(address)
                except ValueError:
                    logger.warning(f"{self._log_prefix()}Некорректный адрес {address!r} на {intf.name}, пропуск")
                    stats.add("failed")
                    continue

                if self.options.create_prefixes and prefix and prefix not in seen_prefixes:
                    seen_prefixes.add(prefix)
                    prefix_status = self._safe_netbox_call(
                        f"префикса {prefix}",
                        self._ensure_prefix,
                        prefix,
                    )
                    if prefix_status == "created":
                        stats.add("prefixes_created")

                status = self._safe_netbox_call(
                    f"IP {address}",
                    self._sync_ip,
                    address,
                    interface_id,
                    intf.name,
                    default="failed",
                )
                stats.add(status, f"{address}:{intf.name}")

        return stats.result()
