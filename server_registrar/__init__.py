"""
Server Registrar - регистрация физического сервера в NetBox.

Сводит локально собранные факты о сервере (идентификация, интерфейсы,
модули, BMC) в объектный граф NetBox: device, interfaces, MAC/IP,
module bays и modules, шасси для блейдов.

Примеры использования:
    # CLI
    python -m server_registrar register --facts facts.yaml --dry-run

    # Python API
    from server_registrar.netbox import NetBoxClient, NetBoxSync
    from server_registrar.observer import FactsFileObserver, build_snapshot

    snapshot = build_snapshot(FactsFileObserver("facts.yaml"), SnapshotOptions(name="srv-01"))
    NetBoxSync(NetBoxClient(url, token)).register(snapshot)
"""

__version__ = "1.0.0"
__author__ = "Network Automation Team"
