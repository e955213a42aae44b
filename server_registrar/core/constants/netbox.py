"""
Константы NetBox: типы интерфейсов, значения по умолчанию.
"""

# Скорость линка (Mbps) → тип интерфейса NetBox
SPEED_TYPE_MAP = {
    10: "10base-t",
    100: "100base-tx",
    1000: "1000base-t",
    10000: "10gbase-t",
    25000: "25gbase-x-sfp28",
    40000: "40gbase-x-qsfpp",
    100000: "100gbase-x-qsfp28",
}

# Тип трансивера (форм-фактор модуля) → тип интерфейса NetBox
TRANSCEIVER_TYPE_MAP = {
    "sfp": "1000base-x-sfp",
    "sfp+": "10gbase-x-sfpp",
    "sfp28": "25gbase-x-sfp28",
    "qsfp+": "40gbase-x-qsfpp",
    "qsfp28": "100gbase-x-qsfp28",
    "qsfp56": "200gbase-x-qsfp56",
}

# Префикс имени → тип интерфейса NetBox (последняя эвристика перед "other")
NAME_PREFIX_TYPES = (
    ("eth", "1000base-t"),
    ("en", "1000base-t"),
    ("em", "1000base-t"),
    ("wlan", "ieee802.11a"),
    ("wlp", "ieee802.11a"),
    ("wifi", "ieee802.11a"),
)

LAG_TYPE = "lag"
BRIDGE_TYPE = "bridge"
OTHER_TYPE = "other"

# Объект, к которому привязываются MAC и IP
INTERFACE_OBJECT_TYPE = "dcim.interface"

DEFAULT_DEVICE_TYPE = "Generic Server"
DEFAULT_ROLE_COLOR = "0080ff"
DEFAULT_STATUS = "active"

IPMI_INTERFACE_NAME = "IPMI"

# Шаблон имени bay на шасси
DEVICE_BAY_NAME_TEMPLATE = "Bay-{number}"

# Исключаемые интерфейсы по умолчанию (loopback, контейнерные и libvirt мосты)
DEFAULT_EXCLUDE_INTERFACES = [
    r"^lo$",
    r"^docker",
    r"^veth",
    r"^br-",
    r"^virbr",
]
