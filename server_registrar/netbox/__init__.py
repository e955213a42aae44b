"""
Модуль интеграции с NetBox.

Использует библиотеку pynetbox для работы с NetBox API.

Пример использования:
    from server_registrar.netbox import NetBoxClient, NetBoxSync

    client = NetBoxClient(url="https://netbox.example.com", token="xxx")
    sync = NetBoxSync(client, dry_run=True)
    sync.register(snapshot)
"""

from .client import NetBoxClient
from .sync import NetBoxSync, SyncOptions

__all__ = ["NetBoxClient", "NetBoxSync", "SyncOptions"]
