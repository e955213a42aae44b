"""
Тесты справочных объектов (netbox/sync/references.py).

Покрывает:
- ensure_site: slug / имя / отсутствие
- ensure_role: поиск и автосоздание
- ensure_device_type: точная модель и модель без "+"
- ensure_manufacturer: конфликт slug → существующая строка
- ensure_module_type_profile: ошибка NetBox не фатальна
"""

import pytest

from server_registrar.core.exceptions import (
    MissingReferenceError,
    NetBoxAPIError,
    NetBoxValidationError,
)


class TestEnsureSite:
    """Поиск сайта."""

    def test_by_slug(self, make_sync):
        ref = make_sync().ensure_site("office")
        assert ref.name == "Office"

    def test_by_name(self, inventory, make_sync):
        inventory.add("sites", name="DC 2", slug="dc2")
        ref = make_sync().ensure_site("DC 2")
        assert ref.name == "DC 2"

    def test_missing_is_fatal(self, make_sync):
        with pytest.raises(MissingReferenceError) as exc:
            make_sync().ensure_site("nowhere")
        assert exc.value.kind == "site"
        assert exc.value.key == "nowhere"

    def test_cached(self, inventory, make_sync):
        sync = make_sync()
        sync.ensure_site("office")
        gets = inventory.count("get", "sites")
        sync.ensure_site("office")
        assert inventory.count("get", "sites") == gets

    def test_mismatched_rows_ignored(self, inventory, make_sync):
        """NetBox проигнорировал фильтр и вернул чужой сайт → не найдено."""
        inventory.ignored_filters.add("sites")
        with pytest.raises(MissingReferenceError):
            make_sync().ensure_site("dc9")


class TestEnsureRole:
    """Роли создаются при отсутствии."""

    def test_created_with_slug_and_color(self, inventory, make_sync):
        ref = make_sync(role_color="ff0000").ensure_role("Blade Server")

        role = inventory.rows("device-roles")[0]
        assert ref.id == role["id"]
        assert role["slug"] == "blade-server"
        assert role["color"] == "ff0000"
        assert role["vm_role"] is False

    def test_existing_by_slug(self, inventory, make_sync):
        inventory.add("device-roles", name="server", slug="server")
        ref = make_sync().ensure_role("Server")
        assert ref.name == "server"
        assert inventory.count("create", "device-roles") == 0

    def test_create_failure_is_fatal(self, inventory, make_sync):
        inventory.errors[("create", "device-roles")] = NetBoxAPIError("denied", status_code=403)
        with pytest.raises(MissingReferenceError) as exc:
            make_sync().ensure_role("Server")
        assert exc.value.kind == "role"


class TestEnsureDeviceType:
    """Device-type только ищется."""

    def test_exact(self, make_sync):
        assert make_sync().ensure_device_type("PowerEdge R640").name == "PowerEdge R640"

    def test_plus_suffix_fallback(self, make_sync):
        """Модель с "+" находится без "+"."""
        ref = make_sync().ensure_device_type("PowerEdge R640+")
        assert ref.name == "PowerEdge R640"

    def test_missing(self, make_sync):
        with pytest.raises(MissingReferenceError) as exc:
            make_sync().ensure_device_type("ProLiant DL380")
        assert exc.value.kind == "device-type"


class TestEnsureManufacturer:
    """Производитель создаётся, конфликт slug разрешается."""

    def test_created(self, inventory, make_sync):
        ref = make_sync().ensure_manufacturer("Samsung")
        assert inventory.rows("manufacturers")[0]["slug"] == "samsung"
        assert ref.name == "Samsung"

    def test_slug_collision_adopts_canonical_name(self, inventory, make_sync):
        """"SAMSUNG" конфликтует по slug с "Samsung" → берём "Samsung"."""
        existing = inventory.add("manufacturers", name="Samsung", slug="samsung")
        inventory.errors[("create", "manufacturers")] = NetBoxValidationError(
            "slug exists", errors={"slug": ["already exists"]}
        )

        sync = make_sync()
        ref = sync.ensure_manufacturer("SAMSUNG")

        assert ref.id == existing["id"]
        assert ref.name == "Samsung"
        assert sync.ensure_manufacturer("SAMSUNG") is ref

    def test_failure_without_slug_match_propagates(self, inventory, make_sync):
        inventory.errors[("create", "manufacturers")] = NetBoxAPIError("boom", status_code=500)
        with pytest.raises(NetBoxAPIError):
            make_sync().ensure_manufacturer("Micron")


class TestEnsureModuleTypeProfile:
    """Профиль необязателен."""

    def test_created(self, inventory, make_sync):
        ref = make_sync().ensure_module_type_profile("Memory")
        assert ref.id == inventory.rows("module-type-profiles")[0]["id"]

    def test_error_returns_none(self, inventory, make_sync):
        """Старый NetBox без профилей → None, без исключения."""
        inventory.errors[("get", "module-type-profiles")] = NetBoxAPIError("not found", status_code=404)
        assert make_sync().ensure_module_type_profile("Memory") is None
