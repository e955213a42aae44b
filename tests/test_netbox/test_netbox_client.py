"""
Тесты NetBox клиента (netbox/client/base.py) с замоканным pynetbox.

Покрывает:
- инициализацию (URL, токен, SSL)
- get/create/update/replace
- перевод ошибок pynetbox/requests в NetBoxError
"""

import pytest
import pynetbox
import requests
from unittest.mock import MagicMock, patch

from server_registrar.netbox.client import NetBoxClient
from server_registrar.netbox.payloads import InterfacePayload
from server_registrar.core.exceptions import (
    NetBoxAPIError,
    NetBoxConnectionError,
    NetBoxValidationError,
)


@pytest.fixture
def api():
    """Мок pynetbox.api()."""
    with patch("server_registrar.netbox.client.base.pynetbox.api") as api_factory, \
            patch("server_registrar.netbox.client.base.get_netbox_token", return_value="secret"):
        api = MagicMock()
        api_factory.return_value = api
        yield api


@pytest.fixture
def client(api):
    return NetBoxClient(url="https://netbox.local/", token="secret")


class TestInit:
    """Инициализация клиента."""

    def test_missing_url(self, api, monkeypatch):
        monkeypatch.delenv("NETBOX_URL", raising=False)
        with pytest.raises(ValueError):
            NetBoxClient(url=None, token="secret")

    def test_missing_token(self):
        with patch("server_registrar.netbox.client.base.get_netbox_token", return_value=None):
            with pytest.raises(ValueError):
                NetBoxClient(url="https://netbox.local/")

    def test_ssl_verify_disabled(self, api):
        client = NetBoxClient(url="https://netbox.local/", token="secret", ssl_verify=False)
        assert isinstance(client.api.http_session, requests.Session)
        assert client.api.http_session.verify is False


class TestCrud:
    """CRUD поверх pynetbox."""

    def test_get(self, client, api):
        api.dcim.interfaces.filter.return_value = [{"id": 1, "name": "eno1"}]

        result = client.get("interfaces", device_id=5)

        api.dcim.interfaces.filter.assert_called_once_with(device_id=5)
        assert result == {"count": 1, "results": [{"id": 1, "name": "eno1"}]}

    def test_create_serializes_payload(self, client, api):
        api.dcim.interfaces.create.return_value = {"id": 7, "name": "eno1"}

        result = client.create("interfaces", InterfacePayload(device=5, name="eno1", type="1000base-t"))

        api.dcim.interfaces.create.assert_called_once_with({"device": 5, "name": "eno1", "type": "1000base-t"})
        assert result["id"] == 7

    def test_update_is_bulk_patch(self, client, api):
        api.ipam.ip_addresses.update.return_value = [{"id": 3, "assigned_object_id": 7}]

        result = client.update("ip-addresses", 3, {"assigned_object_id": 7})

        api.ipam.ip_addresses.update.assert_called_once_with([{"id": 3, "assigned_object_id": 7}])
        assert result["assigned_object_id"] == 7

    def test_replace_uses_put(self, client, api):
        api.dcim.devices.url = "https://netbox.local/api/dcim/devices"
        response = MagicMock(status_code=200, ok=True)
        response.json.return_value = {"id": 1, "name": "srv-01"}
        api.http_session.put.return_value = response

        result = client.replace("devices", 1, {"name": "srv-01"})

        args, kwargs = api.http_session.put.call_args
        assert args[0] == "https://netbox.local/api/dcim/devices/1/"
        assert kwargs["json"] == {"name": "srv-01"}
        assert kwargs["headers"]["Authorization"] == "Token secret"
        assert result["name"] == "srv-01"

    def test_unknown_collection(self, client):
        with pytest.raises(ValueError):
            client.get("vlans")


class TestErrors:
    """Перевод ошибок в NetBoxError."""

    def test_validation_error(self, client, api):
        req = MagicMock(status_code=400, text='{"device": ["does not support device bays"]}')
        api.dcim.device_bays.create.side_effect = pynetbox.RequestError(req)

        with pytest.raises(NetBoxValidationError) as exc:
            client.create("device-bays", {"device": 1, "name": "Bay-5"})

        assert exc.value.endpoint == "device-bays"
        assert "device bays" in str(exc.value.errors)

    def test_api_error(self, client, api):
        req = MagicMock(status_code=500, text="Internal Server Error")
        api.dcim.devices.filter.side_effect = pynetbox.RequestError(req)

        with pytest.raises(NetBoxAPIError) as exc:
            client.get("devices", name="srv-01")

        assert exc.value.status_code == 500
        assert not isinstance(exc.value, NetBoxValidationError)

    def test_connection_error(self, client, api):
        api.dcim.sites.filter.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(NetBoxConnectionError):
            client.get("sites", slug="office")

    def test_replace_validation_error(self, client, api):
        api.dcim.devices.url = "https://netbox.local/api/dcim/devices"
        api.http_session.put.return_value = MagicMock(status_code=400, ok=False, text="bad serial")

        with pytest.raises(NetBoxValidationError):
            client.replace("devices", 1, {"name": "srv-01"})


class TestDevicesMixin:
    """Поиск устройств и интерфейсов."""

    def test_device_by_name_exact(self, client, api):
        """Строки с другим именем игнорируются."""
        api.dcim.devices.filter.return_value = [{"id": 1, "name": "srv-010"}, {"id": 2, "name": "srv-01"}]
        assert client.get_device_by_name("srv-01")["id"] == 2

    def test_interface_by_id(self, client, api):
        api.dcim.interfaces.filter.return_value = [{"id": 9, "name": "bond0"}]
        assert client.get_interface(9)["name"] == "bond0"
        assert client.get_interface(10) is None
