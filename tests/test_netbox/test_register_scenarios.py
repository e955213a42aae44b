"""
Сквозные сценарии регистрации (NetBoxSync.register) на NetBox в памяти.

Покрывает:
- LAG: порт в bond0, MAC у bond0
- два DIMM одной модели: один module-type, два bay, два модуля
- блейд: шасси → Bay-N → блейд → installed_device
- повторный запуск без изменений
- dry-run
"""

import pytest

from server_registrar.core.models import InterfaceSpec, InterfaceKind


def _by_name(rows):
    return {r["name"]: r for r in rows}


class TestLagScenario:
    """Порт eno1 в bond0."""

    def test_port_gets_lag_parent(self, inventory, make_sync, make_snapshot):
        """eno1 создаётся с lag = ID bond0."""
        make_sync().register(make_snapshot())

        interfaces = _by_name(inventory.rows("interfaces"))
        assert interfaces["eno1"]["lag"] == interfaces["bond0"]["id"]
        assert interfaces["bond0"]["type"] == "lag"

    def test_mac_assigned_to_bond(self, inventory, make_sync, make_snapshot):
        """MAC eno1 достаётся bond0 (90 > 10), даже если eno1 идёт первым."""
        make_sync().register(make_snapshot())

        interfaces = _by_name(inventory.rows("interfaces"))
        macs = inventory.rows("mac-addresses")
        assert len(macs) == 1
        assert macs[0]["mac_address"] == "aa:bb:cc:dd:ee:01"
        assert macs[0]["assigned_object_id"] == interfaces["bond0"]["id"]
        assert macs[0]["assigned_object_type"] == "dcim.interface"

    def test_speed_sent_in_kbps(self, inventory, make_sync, make_snapshot):
        """Скорость 1000 Mbps → 1000000 Kbps."""
        make_sync().register(make_snapshot())

        interfaces = _by_name(inventory.rows("interfaces"))
        assert interfaces["eno1"]["speed"] == 1_000_000
        assert "speed" not in interfaces["bond0"]

    def test_mac_moved_from_port_to_bond(self, inventory, make_sync, make_snapshot):
        """MAC, оставшийся на eno1 с прошлого запуска, переносится на bond0."""
        sync = make_sync()
        sync.register(make_snapshot())
        interfaces = _by_name(inventory.rows("interfaces"))
        mac = inventory.rows("mac-addresses")[0]
        inventory.data["mac-addresses"][mac["id"]]["assigned_object_id"] = interfaces["eno1"]["id"]

        result = make_sync().register(make_snapshot())

        assert result["mac_addresses"]["updated"] == 1
        assert inventory.rows("mac-addresses")[0]["assigned_object_id"] == interfaces["bond0"]["id"]


class TestMemoryModulesScenario:
    """Два DIMM одной модели в разных слотах."""

    def test_one_type_two_bays_two_modules(self, inventory, make_sync, make_snapshot):
        result = make_sync().register(make_snapshot())

        assert len(inventory.rows("module-types")) == 1
        assert len(inventory.rows("module-bays")) == 2
        assert len(inventory.rows("modules")) == 2
        assert result["modules"]["created"] == 2
        assert result["modules"]["types_created"] == 1
        assert result["modules"]["bays_created"] == 2

    def test_module_references_captured_bay(self, inventory, make_sync, make_snapshot):
        """Модуль ссылается на bay, созданный в этом же запуске."""
        make_sync().register(make_snapshot())

        bays = {b["id"]: b["name"] for b in inventory.rows("module-bays")}
        modules = {bays[m["module_bay"]]: m for m in inventory.rows("modules")}
        assert modules["DIMM-A1"]["serial"] == "S1"
        assert modules["DIMM-B1"]["serial"] == "S2"

    def test_manufacturer_and_profile_created(self, inventory, make_sync, make_snapshot):
        make_sync(module_profiles={"Memory": "Memory"}).register(make_snapshot())

        assert [m["name"] for m in inventory.rows("manufacturers")] == ["Samsung"]
        profiles = inventory.rows("module-type-profiles")
        assert [p["name"] for p in profiles] == ["Memory"]
        assert inventory.rows("module-types")[0]["profile"] == profiles[0]["id"]


class TestBladeScenario:
    """Блейд blade03b5 в шасси blade03."""

    def test_chassis_bay_blade_install(self, inventory, make_sync, make_snapshot, blade_hint):
        snapshot = make_snapshot(
            name="blade03b5",
            device_type="PowerEdge M640",
            role="Blade",
            chassis=blade_hint,
        )

        result = make_sync().register(snapshot)

        devices = _by_name(inventory.rows("devices"))
        assert set(devices) == {"blade03", "blade03b5"}
        bays = inventory.rows("device-bays")
        assert len(bays) == 1
        assert bays[0]["name"] == "Bay-5"
        assert bays[0]["device"] == devices["blade03"]["id"]
        assert bays[0]["installed_device"] == devices["blade03b5"]["id"]
        assert result["device_id"] == devices["blade03b5"]["id"]

    def test_order_chassis_then_bay_then_blade(self, inventory, make_sync, make_snapshot, blade_hint):
        """Шасси создаётся раньше bay, bay раньше блейда, установка последней."""
        snapshot = make_snapshot(name="blade03b5", device_type="PowerEdge M640", chassis=blade_hint)
        make_sync().register(snapshot)

        writes = [
            (call[0], call[1], call[3].get("name"))
            for call in inventory.calls
            if call[0] in ("create", "update") and call[1] in ("devices", "device-bays")
        ]
        assert writes == [
            ("create", "devices", "blade03"),
            ("create", "device-bays", "Bay-5"),
            ("create", "devices", "blade03b5"),
            ("update", "device-bays", None),
        ]

    def test_chassis_role_and_type(self, inventory, make_sync, make_snapshot, blade_hint):
        snapshot = make_snapshot(name="blade03b5", device_type="PowerEdge M640", chassis=blade_hint)
        make_sync().register(snapshot)

        roles = {r["id"]: r["name"] for r in inventory.rows("device-roles")}
        types = {t["id"]: t["model"] for t in inventory.rows("device-types")}
        chassis = _by_name(inventory.rows("devices"))["blade03"]
        assert roles[chassis["role"]] == "Chassis"
        assert types[chassis["device_type"]] == "PowerEdge M1000e"


class TestIdempotence:
    """Повторный запуск без изменений."""

    def test_second_run_creates_nothing(self, inventory, make_sync, make_snapshot):
        make_sync(module_profiles={"Memory": "Memory"}).register(make_snapshot())
        counts = {name: len(rows) for name, rows in inventory.data.items()}
        creates_before = inventory.count("create")

        result = make_sync(module_profiles={"Memory": "Memory"}).register(make_snapshot())

        assert inventory.count("create") == creates_before
        assert {name: len(rows) for name, rows in inventory.data.items()} == counts
        assert inventory.count("update") == 0
        assert inventory.count("replace") == 0
        for section in ("device", "modules", "interfaces", "mac_addresses", "ip_addresses"):
            assert result[section]["created"] == 0
            assert result[section]["failed"] == 0

    def test_uppercase_ipv6_second_run(self, inventory, make_sync, make_snapshot):
        """IPv6 в верхнем регистре не дублируется при повторном запуске."""
        interfaces = (
            InterfaceSpec(name="eno1", kind=InterfaceKind.PHYSICAL, type="1000base-t", ipv6="2001:DB8::10/64"),
        )
        make_sync().register(make_snapshot(interfaces=interfaces))
        creates_before = inventory.count("create", "ip-addresses")

        result = make_sync().register(make_snapshot(interfaces=interfaces))

        assert inventory.count("create", "ip-addresses") == creates_before
        assert [r["address"] for r in inventory.rows("ip-addresses")] == ["2001:db8::10/64"]
        assert result["ip_addresses"]["created"] == 0
        assert result["ip_addresses"]["skipped"] == 1

    def test_blade_second_run(self, inventory, make_sync, make_snapshot, blade_hint):
        snapshot = make_snapshot(name="blade03b5", device_type="PowerEdge M640", chassis=blade_hint)
        make_sync().register(snapshot)
        writes_before = inventory.count("create") + inventory.count("update")

        make_sync().register(snapshot)

        assert inventory.count("create") + inventory.count("update") == writes_before


class TestDryRun:
    """Режим dry-run: чтения есть, записей нет."""

    def test_no_writes(self, inventory, make_sync, make_snapshot):
        sync = make_sync(dry_run=True)
        result = sync.register(make_snapshot())

        assert inventory.count("create") == 0
        assert inventory.count("update") == 0
        assert inventory.count("replace") == 0
        assert result["dry_run"] is True
        assert result["actions"] == len(sync.actions)
        assert result["device"]["created"] == 1
        assert result["interfaces"]["created"] == 2

    def test_planned_ids_are_not_queried(self, inventory, make_sync, make_snapshot):
        """Поиск по ID из плана в NetBox не уходит."""
        make_sync(dry_run=True).register(make_snapshot())

        for call in inventory.calls:
            if call[0] == "get":
                assert all(not (isinstance(v, int) and v < 0) for v in call[3].values())

    def test_actions_describe_changes(self, make_sync, make_snapshot):
        sync = make_sync(dry_run=True)
        sync.register(make_snapshot())

        collections = [a.collection for a in sync.actions]
        assert "devices" in collections
        assert "mac-addresses" in collections
        assert all(a.operation == "create" for a in sync.actions)


class TestIpmiInterface:
    """Интерфейс BMC регистрируется как mgmt_only."""

    def test_ipmi_registered(self, inventory, make_sync, make_snapshot):
        ipmi = InterfaceSpec(
            name="IPMI",
            kind=InterfaceKind.OTHER,
            type="other",
            mac="aa:bb:cc:dd:ee:ff",
            ipv4="10.0.100.10/32",
        )
        make_sync().register(make_snapshot(ipmi=ipmi))

        interfaces = _by_name(inventory.rows("interfaces"))
        assert interfaces["IPMI"]["mgmt_only"] is True
        addresses = {ip["address"]: ip for ip in inventory.rows("ip-addresses")}
        assert addresses["10.0.100.10/32"]["assigned_object_id"] == interfaces["IPMI"]["id"]
        # /32 не даёт префикса
        assert [p["prefix"] for p in inventory.rows("prefixes")] == ["10.0.0.0/24"]
