"""
NetBox клиент.

Использование:
    from server_registrar.netbox.client import NetBoxClient
"""

from .base import NetBoxClientBase, COLLECTIONS
from .devices import DevicesMixin
from .main import NetBoxClient

__all__ = [
    "NetBoxClient",
    "NetBoxClientBase",
    "DevicesMixin",
    "COLLECTIONS",
]
