"""
Типизированные тела запросов к NetBox.

Один dataclass на коллекцию. Поля со значением None в запрос не попадают,
поэтому один и тот же класс подходит и для POST, и для частичного PATCH:

    MacAddressPayload(assigned_object_type="dcim.interface", assigned_object_id=12)
    → {"assigned_object_type": "dcim.interface", "assigned_object_id": 12}

Сериализация происходит один раз, в клиенте (NetBoxClientBase._serialize).
"""

from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Optional

from ..core.constants import INTERFACE_OBJECT_TYPE


@dataclass
class Payload:
    """Базовый класс тела запроса."""

    collection: ClassVar[str] = ""

    def to_dict(self) -> Dict[str, Any]:
        """Поля без None."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                result[f.name] = value
        return result


@dataclass
class RolePayload(Payload):
    collection: ClassVar[str] = "device-roles"

    name: Optional[str] = None
    slug: Optional[str] = None
    color: Optional[str] = None
    vm_role: Optional[bool] = None


@dataclass
class ManufacturerPayload(Payload):
    collection: ClassVar[str] = "manufacturers"

    name: Optional[str] = None
    slug: Optional[str] = None


@dataclass
class ModuleTypeProfilePayload(Payload):
    collection: ClassVar[str] = "module-type-profiles"

    name: Optional[str] = None


@dataclass
class DevicePayload(Payload):
    """Устройство. В режиме replace отправляется целиком."""

    collection: ClassVar[str] = "devices"

    name: Optional[str] = None
    device_type: Optional[int] = None
    role: Optional[int] = None
    site: Optional[int] = None
    status: Optional[str] = None
    serial: Optional[str] = None
    asset_tag: Optional[str] = None
    comments: Optional[str] = None


@dataclass
class DeviceBayPayload(Payload):
    collection: ClassVar[str] = "device-bays"

    device: Optional[int] = None
    name: Optional[str] = None
    installed_device: Optional[int] = None


@dataclass
class ModuleTypePayload(Payload):
    collection: ClassVar[str] = "module-types"

    manufacturer: Optional[int] = None
    model: Optional[str] = None
    profile: Optional[int] = None
    attributes: Optional[Dict[str, Any]] = None


@dataclass
class ModuleBayPayload(Payload):
    collection: ClassVar[str] = "module-bays"

    device: Optional[int] = None
    name: Optional[str] = None
    label: Optional[str] = None


@dataclass
class ModulePayload(Payload):
    collection: ClassVar[str] = "modules"

    device: Optional[int] = None
    module_bay: Optional[int] = None
    module_type: Optional[int] = None
    serial: Optional[str] = None


@dataclass
class InterfacePayload(Payload):
    """
    Интерфейс устройства.

    speed передаётся в Kbps (так хранит NetBox).
    Родитель пишется в lag, bridge или parent в зависимости от его типа.
    """

    collection: ClassVar[str] = "interfaces"

    device: Optional[int] = None
    name: Optional[str] = None
    type: Optional[str] = None
    speed: Optional[int] = None
    mtu: Optional[int] = None
    enabled: Optional[bool] = None
    mgmt_only: Optional[bool] = None
    lag: Optional[int] = None
    bridge: Optional[int] = None
    parent: Optional[int] = None


@dataclass
class MacAddressPayload(Payload):
    collection: ClassVar[str] = "mac-addresses"

    mac_address: Optional[str] = None
    assigned_object_type: Optional[str] = None
    assigned_object_id: Optional[int] = None

    @classmethod
    def assign(cls, interface_id: int, mac_address: Optional[str] = None) -> "MacAddressPayload":
        """Тело с привязкой к интерфейсу."""
        return cls(
            mac_address=mac_address,
            assigned_object_type=INTERFACE_OBJECT_TYPE,
            assigned_object_id=interface_id,
        )


@dataclass
class IpAddressPayload(Payload):
    collection: ClassVar[str] = "ip-addresses"

    address: Optional[str] = None
    assigned_object_type: Optional[str] = None
    assigned_object_id: Optional[int] = None
    status: Optional[str] = None

    @classmethod
    def assign(cls, interface_id: int, address: Optional[str] = None) -> "IpAddressPayload":
        """Тело с привязкой к интерфейсу."""
        return cls(
            address=address,
            assigned_object_type=INTERFACE_OBJECT_TYPE,
            assigned_object_id=interface_id,
        )


@dataclass
class PrefixPayload(Payload):
    collection: ClassVar[str] = "prefixes"

    prefix: Optional[str] = None
    status: Optional[str] = None
