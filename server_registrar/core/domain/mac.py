"""
Domain logic для владения MAC-адресами.

Один MAC может принадлежать нескольким интерфейсам сразу:
физический порт в bond/bridge сообщает тот же адрес, что и сам bond/bridge.
В NetBox MAC-объект один, поэтому выбирается владелец с наибольшим приоритетом.

Приоритет по умолчанию:
    bridge / vmbr*  → 100
    lag / bond*     → 90
    остальные       → 10

Политика подключаемая: любой callable (type, name) -> int.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..models import InterfaceSpec, InterfaceKind
from ..constants import BRIDGE_TYPE, LAG_TYPE

logger = logging.getLogger(__name__)

MacPriorityPolicy = Callable[[str, str], int]

BRIDGE_PRIORITY = 100
LAG_PRIORITY = 90
DEFAULT_PRIORITY = 10
# Приоритет MAC-объекта без привязки к интерфейсу
UNASSIGNED_PRIORITY = 0


def default_mac_priority(interface_type: str, interface_name: str) -> int:
    """
    Приоритет интерфейса как владельца MAC.

    Args:
        interface_type: Тип NetBox (bridge, lag, 1000base-t ...)
        interface_name: Имя интерфейса

    Returns:
        int: 100 для bridge, 90 для lag, 10 для остальных
    """
    name = interface_name or ""
    if interface_type == BRIDGE_TYPE or name.startswith("vmbr"):
        return BRIDGE_PRIORITY
    if interface_type == LAG_TYPE or name.startswith("bond"):
        return LAG_PRIORITY
    return DEFAULT_PRIORITY


@dataclass(frozen=True)
class MacCandidate:
    """
    Претендент на MAC-адрес.

    Attributes:
        mac: MAC в формате aa:bb:cc:dd:ee:ff
        interface_name: Имя интерфейса-претендента
        interface_type: Тип NetBox интерфейса
        priority: Приоритет по политике
    """
    mac: str
    interface_name: str
    interface_type: str
    priority: int


def collect_mac_candidates(
    interfaces: List[InterfaceSpec],
    policy: Optional[MacPriorityPolicy] = None,
) -> List[MacCandidate]:
    """
    Собирает всех претендентов на MAC-адреса.

    Интерфейс со своим MAC претендует на него. LAG/bridge без своего MAC
    претендует на MAC первого дочернего интерфейса: ядро выдаёт bond/bridge
    адрес первого подчинённого порта.

    Args:
        interfaces: Интерфейсы снимка
        policy: Политика приоритетов (по умолчанию default_mac_priority)

    Returns:
        List[MacCandidate]: Претенденты в порядке интерфейсов
    """
    policy = policy or default_mac_priority

    first_child_mac: Dict[str, str] = {}
    for intf in interfaces:
        if intf.parent and intf.mac and intf.parent not in first_child_mac:
            first_child_mac[intf.parent] = intf.mac

    candidates = []
    for intf in interfaces:
        mac = intf.mac
        if not mac and intf.kind in (InterfaceKind.LAG, InterfaceKind.BRIDGE):
            mac = first_child_mac.get(intf.name)
        if not mac:
            continue
        candidates.append(MacCandidate(
            mac=mac,
            interface_name=intf.name,
            interface_type=intf.type,
            priority=policy(intf.type, intf.name),
        ))
    return candidates


def select_mac_owners(candidates: List[MacCandidate]) -> List[MacCandidate]:
    """
    Выбирает по одному владельцу на каждый MAC.

    Побеждает наибольший приоритет; при равенстве остаётся первый встреченный.

    Args:
        candidates: Все претенденты

    Returns:
        List[MacCandidate]: Победители в порядке первого появления MAC
    """
    owners: Dict[str, MacCandidate] = {}
    for candidate in candidates:
        current = owners.get(candidate.mac)
        if current is None:
            owners[candidate.mac] = candidate
        elif candidate.priority > current.priority:
            logger.debug(
                f"MAC {candidate.mac}: {candidate.interface_name} ({candidate.priority}) "
                f"вытесняет {current.interface_name} ({current.priority})"
            )
            owners[candidate.mac] = candidate
    return list(owners.values())
