"""
Pytest configuration и общие fixtures для тестов.

Предоставляет переиспользуемые fixtures:
- inventory: NetBox в памяти (FakeInventory) с базовыми справочниками
- make_sync: фабрика NetBoxSync поверх inventory
- facts: словарь фактов сервера для FactsFileObserver
"""

import copy
from typing import Any, Dict, List, Optional

import pytest

from server_registrar.netbox.client.devices import DevicesMixin
from server_registrar.netbox.client.base import COLLECTIONS
from server_registrar.netbox.payloads import Payload
from server_registrar.netbox.sync import NetBoxSync, SyncOptions
from server_registrar.core.models import (
    DeviceSnapshot,
    InterfaceSpec,
    InterfaceKind,
    ModuleSpec,
    ModuleCategory,
    ChassisHint,
)


# Фильтр NetBox → поле записи
FILTER_FIELDS = {
    "device_id": "device",
    "module_bay_id": "module_bay",
    "manufacturer_id": "manufacturer",
}


class FakeInventory(DevicesMixin):
    """
    NetBox в памяти с тем же CRUD, что у NetBoxClientBase.

    Attributes:
        data: коллекция → {id: запись}
        calls: журнал (операция, коллекция, id, тело)
        errors: (операция, коллекция) → исключение для следующих вызовов
        ignored_filters: коллекции, где фильтры игнорируются (отдаётся всё)
    """

    def __init__(self):
        self.data: Dict[str, Dict[int, Dict[str, Any]]] = {name: {} for name in COLLECTIONS}
        self.calls: List[tuple] = []
        self.errors: Dict[tuple, Exception] = {}
        self.ignored_filters = set()
        self._next_id = 1

    # ==================== НАПОЛНЕНИЕ ====================

    def add(self, collection: str, **fields: Any) -> Dict[str, Any]:
        """Добавляет запись в обход журнала вызовов."""
        record = {"id": self._next_id, **fields}
        self._next_id += 1
        self.data[collection][record["id"]] = record
        return copy.deepcopy(record)

    def rows(self, collection: str) -> List[Dict[str, Any]]:
        return [copy.deepcopy(r) for r in self.data[collection].values()]

    def count(self, operation: str, collection: Optional[str] = None) -> int:
        return sum(
            1 for call in self.calls
            if call[0] == operation and (collection is None or call[1] == collection)
        )

    # ==================== CRUD ====================

    def _raise_if_configured(self, operation: str, collection: str) -> None:
        error = self.errors.get((operation, collection))
        if error is not None:
            raise error

    @staticmethod
    def _matches(record: Dict[str, Any], filters: Dict[str, Any]) -> bool:
        for key, value in filters.items():
            field_name = FILTER_FIELDS.get(key, key)
            current = record.get(field_name)
            if isinstance(current, dict):
                current = current.get("id")
            if current != value:
                return False
        return True

    def get(self, collection: str, **filters: Any) -> Dict[str, Any]:
        self._raise_if_configured("get", collection)
        self.calls.append(("get", collection, None, filters))
        if collection in self.ignored_filters:
            results = self.rows(collection)
        else:
            results = [
                copy.deepcopy(r) for r in self.data[collection].values()
                if self._matches(r, filters)
            ]
        return {"count": len(results), "results": results}

    def create(self, collection: str, body: Any) -> Dict[str, Any]:
        self._raise_if_configured("create", collection)
        data = body.to_dict() if isinstance(body, Payload) else dict(body)
        self.calls.append(("create", collection, None, data))
        return self.add(collection, **data)

    def update(self, collection: str, object_id: int, body: Any) -> Dict[str, Any]:
        self._raise_if_configured("update", collection)
        data = body.to_dict() if isinstance(body, Payload) else dict(body)
        self.calls.append(("update", collection, object_id, data))
        self.data[collection][object_id].update(data)
        return copy.deepcopy(self.data[collection][object_id])

    def replace(self, collection: str, object_id: int, body: Any) -> Dict[str, Any]:
        self._raise_if_configured("replace", collection)
        data = body.to_dict() if isinstance(body, Payload) else dict(body)
        self.calls.append(("replace", collection, object_id, data))
        self.data[collection][object_id] = {"id": object_id, **data}
        return copy.deepcopy(self.data[collection][object_id])


@pytest.fixture
def inventory() -> FakeInventory:
    """NetBox с сайтом и device-types (как после первичного наполнения)."""
    nb = FakeInventory()
    nb.add("sites", name="Office", slug="office")
    nb.add("device-types", model="PowerEdge R640")
    nb.add("device-types", model="PowerEdge M640")
    nb.add("device-types", model="PowerEdge M1000e")
    nb.add("device-types", model="Generic Server")
    return nb


@pytest.fixture
def make_sync(inventory):
    """Фабрика NetBoxSync поверх inventory."""
    def _make(dry_run: bool = False, **options: Any) -> NetBoxSync:
        return NetBoxSync(inventory, dry_run=dry_run, options=SyncOptions(**options))
    return _make


@pytest.fixture
def bond_interfaces() -> tuple:
    """eno1 (MAC) в bond0 (lag без своего MAC), сценарий LAG."""
    return (
        InterfaceSpec(
            name="eno1",
            kind=InterfaceKind.PHYSICAL,
            type="1000base-t",
            mac="aa:bb:cc:dd:ee:01",
            speed=1000,
            mtu=1500,
            parent="bond0",
        ),
        InterfaceSpec(
            name="bond0",
            kind=InterfaceKind.LAG,
            type="lag",
            mtu=1500,
            ipv4="10.0.0.10/24",
        ),
    )


@pytest.fixture
def make_snapshot(bond_interfaces):
    """Фабрика DeviceSnapshot с разумными значениями по умолчанию."""
    def _make(**overrides: Any) -> DeviceSnapshot:
        fields = dict(
            name="srv-01",
            device_type="PowerEdge R640",
            site="office",
            role="Server",
            serial="ABC1234",
            interfaces=bond_interfaces,
            modules=(
                ModuleSpec(ModuleCategory.MEMORY, "DIMM-A1", "Samsung", "M393A2K40", serial="S1"),
                ModuleSpec(ModuleCategory.MEMORY, "DIMM-B1", "Samsung", "M393A2K40", serial="S2"),
            ),
        )
        fields.update(overrides)
        return DeviceSnapshot(**fields)
    return _make


@pytest.fixture
def blade_hint() -> ChassisHint:
    return ChassisHint(chassis_name="blade03", bay_number=5, device_type="PowerEdge M1000e")


@pytest.fixture
def facts() -> Dict[str, Any]:
    """Факты сервера в формате FactsFileObserver."""
    return {
        "hostname": "srv-01.example.com",
        "identity": {
            "product_name": "PowerEdge R640",
            "serial": "ABC1234",
            "manufacturer": "Dell Inc.",
        },
        "interfaces": [
            {"name": "lo", "mac": "00:00:00:00:00:00", "mtu": 65536},
            {"name": "eno1", "mac": "AA:BB:CC:DD:EE:01", "speed": 1000, "mtu": 1500, "master": "bond0"},
            {"name": "eno2", "mac": "aa:bb:cc:dd:ee:02", "speed": 1000, "mtu": 1500, "master": "bond0"},
            {"name": "bond0", "kind": "lag", "mtu": 1500, "ipv4": "10.0.0.10/24"},
            {"name": "docker0", "mac": "02:42:ac:11:00:01"},
        ],
        "modules": {
            "cpu": [
                {"bay": "CPU1", "manufacturer": "Intel", "model": "Xeon Gold 6130", "cores": 16},
            ],
            "Memory": [
                {"bay": "DIMM-A1", "manufacturer": "Samsung", "model": "M393A2K40", "serial": "S1", "size": 16},
                {"bay": "DIMM-B1", "manufacturer": "Samsung", "model": "M393A2K40", "serial": "S2", "size": 16},
            ],
        },
        "unavailable": ["GPU"],
        "ipmi": {"mac": "aa:bb:cc:dd:ee:ff", "ipv4": "10.0.100.10"},
    }
