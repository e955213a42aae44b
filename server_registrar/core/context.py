"""
Контекст выполнения для отслеживания запусков.

RunContext создаётся один раз в CLI и прокидывается в NetBoxSync.

Предоставляет:
- run_id: уникальный идентификатор запуска
- started_at: время начала
- dry_run: режим симуляции
- triggered_by: источник запуска (cli/cron/test)

Пример использования:
    ctx = RunContext.create(dry_run=True, command="register")
    set_current_context(ctx)
    sync = NetBoxSync(client, dry_run=True, context=ctx)
"""

import uuid
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Literal

logger = logging.getLogger(__name__)

TriggerSource = Literal["cli", "cron", "test"]


@dataclass
class RunContext:
    """
    Контекст выполнения операции.

    Attributes:
        run_id: Уникальный идентификатор запуска (timestamp или короткий UUID)
        started_at: Время начала выполнения
        dry_run: Режим симуляции (без реальных изменений)
        triggered_by: Источник запуска (cli/cron/test)
        command: Команда CLI которая была вызвана
        extra: Дополнительные данные контекста
    """

    run_id: str
    started_at: datetime
    dry_run: bool = False
    triggered_by: TriggerSource = "cli"
    command: str = ""
    extra: dict = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        dry_run: bool = False,
        triggered_by: TriggerSource = "cli",
        command: str = "",
        use_timestamp_id: bool = True,
    ) -> "RunContext":
        """
        Создаёт новый контекст выполнения.

        Args:
            dry_run: Режим симуляции
            triggered_by: Источник запуска
            command: Название команды CLI
            use_timestamp_id: Использовать timestamp вместо UUID

        Returns:
            RunContext: Новый контекст
        """
        started_at = datetime.now()

        if use_timestamp_id:
            # Формат: 2026-03-14T12-30-22
            run_id = started_at.strftime("%Y-%m-%dT%H-%M-%S")
        else:
            run_id = str(uuid.uuid4())[:8]

        ctx = cls(
            run_id=run_id,
            started_at=started_at,
            dry_run=dry_run,
            triggered_by=triggered_by,
            command=command,
        )

        logger.debug(f"Created RunContext: {ctx.run_id} (dry_run={dry_run})")
        return ctx

    @property
    def elapsed_seconds(self) -> float:
        """Время выполнения в секундах."""
        return (datetime.now() - self.started_at).total_seconds()

    @property
    def elapsed_human(self) -> str:
        """Время выполнения в человекочитаемом формате."""
        elapsed = self.elapsed_seconds
        if elapsed < 60:
            return f"{elapsed:.1f}s"
        minutes = int(elapsed // 60)
        seconds = int(elapsed % 60)
        return f"{minutes}m {seconds}s"

    def log_prefix(self) -> str:
        """
        Возвращает префикс для логов.

        Returns:
            str: Префикс вида "[run_id][command]"
        """
        if self.command:
            return f"[{self.run_id}][{self.command}]"
        return f"[{self.run_id}]"

    def to_dict(self) -> dict:
        """Сериализует контекст в словарь для JSON/отчётов."""
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "dry_run": self.dry_run,
            "triggered_by": self.triggered_by,
            "command": self.command,
            "elapsed_seconds": self.elapsed_seconds,
            "extra": self.extra,
        }

    def __str__(self) -> str:
        dry = " [DRY-RUN]" if self.dry_run else ""
        return f"RunContext({self.run_id}{dry})"


# Глобальный контекст для случаев когда нет явного прокидывания
_current_context: Optional[RunContext] = None


def get_current_context() -> Optional[RunContext]:
    """Возвращает текущий глобальный контекст."""
    return _current_context


def set_current_context(ctx: Optional[RunContext]) -> None:
    """Устанавливает текущий глобальный контекст."""
    global _current_context
    _current_context = ctx


class RunContextFilter(logging.Filter):
    """
    Logging filter для добавления run_id в каждую запись.

    Форматтеры (HumanFormatter, JSONFormatter) выводят run_id сами.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = get_current_context()
        record.run_id = ctx.run_id if ctx else "-"
        return True
