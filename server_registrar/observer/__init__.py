"""
Сбор фактов о сервере и построение снимка.

Использование:
    from server_registrar.observer import FactsFileObserver, SnapshotOptions, build_snapshot

    observer = FactsFileObserver("facts.yaml")
    snapshot = build_snapshot(observer, SnapshotOptions(site="dc1"))
"""

from .base import HardwareObserver
from .facts_file import FactsFileObserver
from .snapshot import SnapshotOptions, build_snapshot

__all__ = [
    "HardwareObserver",
    "FactsFileObserver",
    "SnapshotOptions",
    "build_snapshot",
]
