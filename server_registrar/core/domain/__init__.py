"""
Domain Layer для Server Registrar.

Логика, не зависящая ни от NetBox, ни от способа сбора фактов:
- topology: типы интерфейсов, иерархия, размещение блейда
- mac: приоритеты владения MAC-адресом

Использование:
    from server_registrar.core.domain import TopologyBuilder

    specs = TopologyBuilder(exclude_interfaces=[r"^lo$"]).build(raw_interfaces)
"""

from .topology import (
    TopologyBuilder,
    infer_interface_type,
    kind_from_name,
    resolve_parents,
    parse_blade_hostname,
    build_chassis_hint,
)
from .mac import (
    MacCandidate,
    MacPriorityPolicy,
    default_mac_priority,
    collect_mac_candidates,
    select_mac_owners,
)

__all__ = [
    "TopologyBuilder",
    "infer_interface_type",
    "kind_from_name",
    "resolve_parents",
    "parse_blade_hostname",
    "build_chassis_hint",
    "MacCandidate",
    "MacPriorityPolicy",
    "default_mac_priority",
    "collect_mac_candidates",
    "select_mac_owners",
]
