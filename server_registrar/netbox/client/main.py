"""
NetBox Client - объединяет все mixins.
"""

from .base import NetBoxClientBase
from .devices import DevicesMixin


class NetBoxClient(
    DevicesMixin,
    NetBoxClientBase,
):
    """
    Клиент для работы с NetBox API через pynetbox.

    Общий CRUD (get/create/update/replace) по коллекциям:
    sites, device-roles, device-types, devices, device-bays, manufacturers,
    module-type-profiles, module-types, module-bays, modules, interfaces,
    mac-addresses, ip-addresses, prefixes.

    Example:
        client = NetBoxClient(url="https://netbox.example.com", token="xxx")

        device = client.get_device_by_name("srv-01")
        client.update("devices", device["id"], {"serial": "ABC123"})
    """

    pass
