"""
Core модули Server Registrar.

- models: снимок сервера и сырые факты
- domain: топология интерфейсов, приоритеты MAC
- exceptions: типизированные ошибки
- context: RunContext для отслеживания запусков
- logging: human/JSON логирование
- constants: константы и маппинги
"""

from .context import (
    RunContext,
    get_current_context,
    set_current_context,
    RunContextFilter,
)
from .logging import (
    LogConfig,
    RotationType,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    "RunContext",
    "get_current_context",
    "set_current_context",
    "RunContextFilter",
    "LogConfig",
    "RotationType",
    "setup_logging",
    "setup_logging_from_config",
]
