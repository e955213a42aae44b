"""
Data Models для Server Registrar.

Два слоя:
- Сырые факты от observer (DeviceIdentity, RawInterface, IpmiFacts):
  как их вернул сборщик, без нормализации.
- Снимок для регистрации (DeviceSnapshot, InterfaceSpec, ModuleSpec, ChassisHint):
  нормализованный, неизменяемый, создаётся один раз за запуск.

Использование:
    from server_registrar.core.models import RawInterface, InterfaceSpec

    raw = RawInterface.from_dict({"name": "eno1", "speed": 1000, "master": "bond0"})
    spec = InterfaceSpec(name="eno1", type="1000base-t", parent="bond0")
"""

from dataclasses import dataclass, field
from typing import Optional, List, Any, Dict, Tuple, Union
from enum import Enum

from .constants import DEVICE_BAY_NAME_TEMPLATE


class InterfaceKind(str, Enum):
    """Класс интерфейса в иерархии."""
    PHYSICAL = "physical"
    LAG = "lag"
    BRIDGE = "bridge"
    OTHER = "other"


class ModuleCategory(str, Enum):
    """Категория оборудования (порядок определяет порядок регистрации)."""
    CPU = "CPU"
    MEMORY = "Memory"
    DISK = "Disk"
    GPU = "GPU"
    CONTROLLER = "Controller"
    NIC = "NIC"
    PSU = "PSU"

    @classmethod
    def parse(cls, value: Union[str, "ModuleCategory"]) -> "ModuleCategory":
        """Находит категорию по значению без учёта регистра."""
        if isinstance(value, cls):
            return value
        for item in cls:
            if item.value.lower() == str(value).strip().lower():
                return item
        raise ValueError(f"Неизвестная категория модулей: {value!r}")


def _to_int(value: Any) -> Optional[int]:
    """Приводит значение к int, пустые и некорректные значения → None."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# =============================================================================
# СЫРЫЕ ФАКТЫ (вход от observer)
# =============================================================================

@dataclass
class DeviceIdentity:
    """
    Идентификация сервера из DMI.

    Attributes:
        product_name: Модель (dmidecode -s system-product-name)
        serial: Серийный номер
        manufacturer: Производитель платформы
    """
    product_name: str = ""
    serial: str = ""
    manufacturer: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeviceIdentity":
        """Создаёт DeviceIdentity из словаря."""
        return cls(
            product_name=str(data.get("product_name") or data.get("productName") or ""),
            serial=str(data.get("serial") or ""),
            manufacturer=str(data.get("manufacturer") or ""),
        )


@dataclass
class RawInterface:
    """
    Интерфейс как его видит ОС.

    Attributes:
        name: Имя интерфейса (eno1, bond0, vmbr0)
        mac: MAC-адрес (permaddr если есть)
        speed: Скорость линка в Mbps
        mtu: MTU
        master: Имя master-интерфейса (bond/bridge), если есть
        state: Состояние линка (up/down)
        ipv4: Первый глобальный IPv4 в формате CIDR
        ipv6: Первый глобальный IPv6 в формате CIDR
        transceiver: Форм-фактор модуля (SFP+, QSFP28), если порт оптический
        kind: Явный класс интерфейса от observer (lag/bridge), если известен
    """
    name: str
    mac: str = ""
    speed: Optional[int] = None
    mtu: Optional[int] = None
    master: str = ""
    state: str = "up"
    ipv4: str = ""
    ipv6: str = ""
    transceiver: str = ""
    kind: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RawInterface":
        """Создаёт RawInterface из словаря."""
        return cls(
            name=str(data.get("name") or data.get("interface") or ""),
            mac=str(data.get("mac") or data.get("mac_address") or ""),
            speed=_to_int(data.get("speed")),
            mtu=_to_int(data.get("mtu")),
            master=str(data.get("master") or ""),
            state=str(data.get("state") or "up").lower(),
            ipv4=str(data.get("ipv4") or ""),
            ipv6=str(data.get("ipv6") or ""),
            transceiver=str(data.get("transceiver") or ""),
            kind=str(data.get("kind") or data.get("type") or ""),
        )

    @classmethod
    def ensure_list(cls, data: Union[List[Dict[str, Any]], List["RawInterface"]]) -> List["RawInterface"]:
        """Конвертирует List[Dict] в List[RawInterface] если нужно."""
        if not data:
            return []
        return [cls.from_dict(d) if isinstance(d, dict) else d for d in data]


@dataclass
class IpmiFacts:
    """
    Факты о BMC (ipmitool lan print 1).

    Attributes:
        mac: MAC-адрес BMC
        ipv4: IPv4 адрес BMC (с маской или без)
    """
    mac: str = ""
    ipv4: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IpmiFacts":
        """Создаёт IpmiFacts из словаря."""
        return cls(
            mac=str(data.get("mac") or data.get("mac_address") or ""),
            ipv4=str(data.get("ipv4") or data.get("ip") or ""),
        )


# =============================================================================
# СНИМОК ДЛЯ РЕГИСТРАЦИИ
# =============================================================================

@dataclass(frozen=True)
class InterfaceSpec:
    """
    Интерфейс, который должен существовать в NetBox.

    Attributes:
        name: Имя (уникально в снимке)
        kind: Класс интерфейса (physical/lag/bridge/other)
        type: Конкретный тип NetBox (1000base-t, lag, bridge, other)
        mac: MAC в формате aa:bb:cc:dd:ee:ff
        speed: Скорость в Mbps
        mtu: MTU
        parent: Имя родительского интерфейса из этого же снимка
        enabled: Линк поднят
        ipv4: IPv4 в формате CIDR
        ipv6: IPv6 в формате CIDR
    """
    name: str
    kind: InterfaceKind = InterfaceKind.PHYSICAL
    type: str = "other"
    mac: Optional[str] = None
    speed: Optional[int] = None
    mtu: Optional[int] = None
    parent: Optional[str] = None
    enabled: bool = True
    ipv4: Optional[str] = None
    ipv6: Optional[str] = None

    @property
    def addresses(self) -> List[str]:
        """Адреса интерфейса (IPv4, затем IPv6)."""
        return [addr for addr in (self.ipv4, self.ipv6) if addr]


@dataclass(frozen=True)
class ModuleSpec:
    """
    Установленный компонент (CPU, DIMM, диск ...).

    Attributes:
        category: Категория оборудования
        bay_name: Имя слота (CPU1, DIMM-A1, DISK-sda, PCIe-0000:01:00.0)
        manufacturer: Производитель
        model: Модель / part number
        serial: Серийный номер
        attributes: Атрибуты категории (cores, size, speed ...)
    """
    category: ModuleCategory
    bay_name: str
    manufacturer: str
    model: str
    serial: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def type_key(self) -> Tuple[str, str]:
        """Ключ шаблона module-type: (manufacturer, model)."""
        return (self.manufacturer, self.model)

    @classmethod
    def from_dict(cls, category: Union[str, ModuleCategory], data: Dict[str, Any]) -> "ModuleSpec":
        """Создаёт ModuleSpec из словаря observer."""
        reserved = {"bay", "bay_name", "manufacturer", "vendor", "model", "part_number", "serial", "attributes"}
        attributes = dict(data.get("attributes") or {})
        for key, value in data.items():
            if key not in reserved and value not in (None, ""):
                attributes.setdefault(key, value)
        serial = data.get("serial")
        return cls(
            category=ModuleCategory.parse(category),
            bay_name=str(data.get("bay_name") or data.get("bay") or ""),
            manufacturer=str(data.get("manufacturer") or data.get("vendor") or ""),
            model=str(data.get("model") or data.get("part_number") or ""),
            serial=str(serial) if serial not in (None, "") else None,
            attributes=attributes,
        )


@dataclass(frozen=True)
class ChassisHint:
    """
    Размещение блейда в шасси.

    Attributes:
        chassis_name: Имя устройства-шасси (blade03)
        bay_number: Номер слота (5)
        device_type: Модель device-type шасси
    """
    chassis_name: str
    bay_number: int
    device_type: str

    @property
    def bay_name(self) -> str:
        """Имя device-bay на шасси (Bay-5)."""
        return DEVICE_BAY_NAME_TEMPLATE.format(number=self.bay_number)


@dataclass(frozen=True)
class DeviceSnapshot:
    """
    Всё, что известно о сервере локально. Создаётся один раз за запуск.

    Attributes:
        name: Имя устройства
        device_type: Модель device-type
        site: Сайт (имя или slug)
        role: Роль устройства
        status: Статус (active, planned, ...)
        serial: Серийный номер
        asset_tag: Инвентарный номер
        comments: Комментарий
        chassis: Размещение в шасси (только для блейдов)
        interfaces: Интерфейсы
        modules: Модули всех категорий
        ipmi: Интерфейс BMC
    """
    name: str
    device_type: str
    site: str
    role: str
    status: str = "active"
    serial: Optional[str] = None
    asset_tag: Optional[str] = None
    comments: Optional[str] = None
    chassis: Optional[ChassisHint] = None
    interfaces: Tuple[InterfaceSpec, ...] = ()
    modules: Tuple[ModuleSpec, ...] = ()
    ipmi: Optional[InterfaceSpec] = None

    @property
    def is_blade(self) -> bool:
        """Сервер установлен в шасси."""
        return self.chassis is not None

    def all_interfaces(self) -> List[InterfaceSpec]:
        """Интерфейсы ОС и интерфейс BMC (если есть)."""
        result = list(self.interfaces)
        if self.ipmi:
            result.append(self.ipmi)
        return result
