"""
Тесты устройства и размещения блейда (netbox/sync/devices.py).
"""

import pytest

from server_registrar.core.exceptions import (
    BayHierarchyError,
    DeviceSyncError,
    MissingReferenceError,
    NetBoxAPIError,
    NetBoxValidationError,
)


class TestSyncDevice:
    """Создание и обновление устройства."""

    def test_create(self, inventory, make_sync, make_snapshot):
        result = make_sync().sync_device(make_snapshot(asset_tag="INV-42", comments="rack 4"))

        device = inventory.rows("devices")[0]
        assert result["created"] == 1
        assert result["device_id"] == device["id"]
        assert device["serial"] == "ABC1234"
        assert device["asset_tag"] == "INV-42"
        assert device["comments"] == "rack 4"
        assert device["status"] == "active"

    def test_roles_ensured(self, inventory, make_sync, make_snapshot):
        make_sync().sync_device(make_snapshot())
        names = sorted(r["name"] for r in inventory.rows("device-roles"))
        assert names == ["Blade", "Chassis", "Server"]

    def test_patch_only_changed_fields(self, inventory, make_sync, make_snapshot):
        make_sync().sync_device(make_snapshot())

        result = make_sync().sync_device(make_snapshot(serial="NEW999"))

        updates = [c for c in inventory.calls if c[0] == "update" and c[1] == "devices"]
        assert len(updates) == 1
        assert updates[0][3] == {"serial": "NEW999"}
        assert result["updated"] == 1
        assert result["details"]["update"][0]["changes"] == ["serial"]

    def test_comments_not_cleared(self, inventory, make_sync, make_snapshot):
        """Пустой comments в снимке не затирает комментарий в NetBox."""
        make_sync().sync_device(make_snapshot(comments="set by hand"))
        make_sync().sync_device(make_snapshot())

        assert inventory.rows("devices")[0]["comments"] == "set by hand"
        assert inventory.count("update", "devices") == 0

    def test_replace_mode_puts_full_body(self, inventory, make_sync, make_snapshot):
        make_sync().sync_device(make_snapshot())

        make_sync(device_update_mode="replace").sync_device(make_snapshot(serial="NEW999"))

        replaces = [c for c in inventory.calls if c[0] == "replace"]
        assert len(replaces) == 1
        body = replaces[0][3]
        assert body["serial"] == "NEW999"
        assert body["name"] == "srv-01"
        assert "device_type" in body and "site" in body and "role" in body

    def test_nested_refs_compared_by_id(self, inventory, make_sync, make_snapshot):
        """Вложенные ссылки NetBox ({"id": N}) и choice-поля не дают ложных изменений."""
        make_sync().sync_device(make_snapshot())
        record = next(iter(inventory.data["devices"].values()))
        record["device_type"] = {"id": record["device_type"], "model": "PowerEdge R640"}
        record["site"] = {"id": record["site"]}
        record["device_role"] = {"id": record.pop("role")}
        record["status"] = {"value": "active", "label": "Active"}

        result = make_sync().sync_device(make_snapshot())

        assert result["skipped"] == 1
        assert inventory.count("update", "devices") == 0

    def test_missing_device_type(self, make_sync, make_snapshot):
        with pytest.raises(MissingReferenceError):
            make_sync().sync_device(make_snapshot(device_type="Unknown Box"))

    def test_create_failure_is_fatal(self, inventory, make_sync, make_snapshot):
        inventory.errors[("create", "devices")] = NetBoxAPIError("boom", status_code=500)
        with pytest.raises(DeviceSyncError) as exc:
            make_sync().sync_device(make_snapshot())
        assert exc.value.device == "srv-01"


class TestBladePlacement:
    """Шасси, device-bay и установка блейда."""

    @pytest.fixture
    def blade_snapshot(self, make_snapshot, blade_hint):
        return make_snapshot(
            name="blade03b5",
            device_type="PowerEdge M640",
            role="Blade",
            chassis=blade_hint,
        )

    def test_chassis_without_bays_support(self, inventory, make_sync, blade_snapshot):
        """NetBox отклонил bay → ошибка называет device type шасси."""
        inventory.errors[("create", "device-bays")] = NetBoxValidationError(
            "bad request", errors={"device": ["does not support device bays"]}
        )

        with pytest.raises(BayHierarchyError) as exc:
            make_sync().sync_device(blade_snapshot)

        assert exc.value.device_type == "PowerEdge M1000e"
        assert "subdevice_role=parent" in exc.value.message
        # Блейд не создаётся, пока нет bay
        assert [d["name"] for d in inventory.rows("devices")] == ["blade03"]

    def test_blade_install_rejected(self, inventory, make_sync, blade_snapshot):
        """NetBox отклонил установку → ошибка называет device type блейда."""
        inventory.errors[("update", "device-bays")] = NetBoxValidationError("bad request")

        with pytest.raises(BayHierarchyError) as exc:
            make_sync().sync_device(blade_snapshot)

        assert exc.value.device_type == "PowerEdge M640"

    def test_existing_chassis_and_bay_reused(self, inventory, make_sync, blade_snapshot):
        make_sync().sync_device(blade_snapshot)
        chassis = [d for d in inventory.rows("devices") if d["name"] == "blade03"][0]
        bay = inventory.rows("device-bays")[0]

        make_sync().sync_device(blade_snapshot)

        assert len(inventory.rows("devices")) == 2
        assert inventory.rows("device-bays") == [bay]
        assert bay["device"] == chassis["id"]

    def test_dry_run_plans_install(self, inventory, make_sync, blade_snapshot):
        sync = make_sync(dry_run=True)
        result = sync.sync_device(blade_snapshot)

        assert inventory.count("create") == 0
        assert inventory.count("update") == 0
        assert result["device_id"] < 0
        install = [a for a in sync.actions if a.collection == "device-bays" and a.operation == "update"]
        assert install[0].payload == {"installed_device": result["device_id"]}
