"""
Константы и маппинги для Server Registrar.

Импорт:
    from server_registrar.core.constants import normalize_mac, slugify
    from server_registrar.core.constants.netbox import SPEED_TYPE_MAP
"""

from .mac import (
    ZERO_MAC,
    normalize_mac_raw,
    normalize_mac,
    macs_equal,
)

from .netbox import (
    SPEED_TYPE_MAP,
    TRANSCEIVER_TYPE_MAP,
    NAME_PREFIX_TYPES,
    LAG_TYPE,
    BRIDGE_TYPE,
    OTHER_TYPE,
    INTERFACE_OBJECT_TYPE,
    DEFAULT_DEVICE_TYPE,
    DEFAULT_ROLE_COLOR,
    DEFAULT_STATUS,
    IPMI_INTERFACE_NAME,
    DEVICE_BAY_NAME_TEMPLATE,
    DEFAULT_EXCLUDE_INTERFACES,
)

from .utils import (
    PLACEHOLDER_VALUES,
    slugify,
    is_placeholder,
    clean_value,
    normalize_address,
)

__all__ = [
    "ZERO_MAC",
    "normalize_mac_raw",
    "normalize_mac",
    "macs_equal",
    "SPEED_TYPE_MAP",
    "TRANSCEIVER_TYPE_MAP",
    "NAME_PREFIX_TYPES",
    "LAG_TYPE",
    "BRIDGE_TYPE",
    "OTHER_TYPE",
    "INTERFACE_OBJECT_TYPE",
    "DEFAULT_DEVICE_TYPE",
    "DEFAULT_ROLE_COLOR",
    "DEFAULT_STATUS",
    "IPMI_INTERFACE_NAME",
    "DEVICE_BAY_NAME_TEMPLATE",
    "DEFAULT_EXCLUDE_INTERFACES",
    "PLACEHOLDER_VALUES",
    "slugify",
    "is_placeholder",
    "clean_value",
    "normalize_address",
]
