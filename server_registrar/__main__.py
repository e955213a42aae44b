"""
Точка входа для запуска модуля.

Позволяет запускать утилиту как:
    python -m server_registrar register [опции]

Примеры:
    python -m server_registrar register --facts /var/lib/facts.yaml
    python -m server_registrar register -n srv-01 -t "PowerEdge R640" --dry-run
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
