"""
CLI модуль server_registrar.

Структура:
- commands/: обработчики команд
  - register.py: register (регистрация сервера в NetBox)

Примеры использования:
    python -m server_registrar register --facts facts.yaml --dry-run
    python -m server_registrar register --facts facts.yaml -n srv-01 -t "PowerEdge R640"
    python -m server_registrar register --facts facts.yaml --no-auto-detect -t "Generic Server"
"""

import argparse
import logging
from typing import List, Optional

from .commands import cmd_register, _print_register_summary
from ..core.exceptions import RegistrarError, format_error_for_log

logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    """
    Создаёт парсер аргументов командной строки.

    Returns:
        ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        prog="server_registrar",
        description="Регистрация сервера в NetBox: устройство, модули, интерфейсы, MAC, IP",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры:
  %(prog)s register --facts facts.yaml --dry-run
  %(prog)s register --facts facts.yaml -n srv-01 -s ABC123 -a INV-42
  %(prog)s register --facts facts.yaml --no-auto-detect -t "Generic Server"
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Команды")

    # === REGISTER ===
    register_parser = subparsers.add_parser("register", help="Регистрация сервера в NetBox")
    register_parser.add_argument(
        "-n",
        "--name",
        help="Имя устройства (default: hostname)",
    )
    register_parser.add_argument(
        "-t",
        "--type",
        dest="device_type",
        help="Модель device-type (отключает автоопределение)",
    )
    register_parser.add_argument(
        "--no-auto-detect",
        dest="auto_detect",
        action="store_false",
        help="Не определять модель по DMI",
    )
    register_parser.add_argument(
        "-s",
        "--serial",
        help="Серийный номер (default: из DMI)",
    )
    register_parser.add_argument(
        "-a",
        "--asset-tag",
        help="Инвентарный номер",
    )
    register_parser.add_argument(
        "-c",
        "--comments",
        help="Комментарий к устройству",
    )
    register_parser.add_argument(
        "--facts",
        required=True,
        help="Файл с фактами о сервере (YAML или JSON)",
    )
    register_parser.add_argument(
        "--site",
        help="Сайт NetBox (default: defaults.site)",
    )
    register_parser.add_argument(
        "--role",
        help="Роль устройства (default: defaults.role)",
    )
    register_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Только показать изменения, ничего не менять",
    )
    register_parser.add_argument(
        "--url",
        help="URL NetBox (default: netbox.url / NETBOX_URL)",
    )
    register_parser.add_argument(
        "--token",
        help="API токен NetBox (используется, если токена нет в NETBOX_TOKEN и keyring)",
    )
    register_parser.add_argument(
        "--config",
        default=None,
        help="Путь к файлу конфигурации YAML (default: config.yaml)",
    )
    register_parser.add_argument(
        "--debug",
        action="store_true",
        help="Подробный вывод (DEBUG)",
    )
    register_parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Логи в формате JSON",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Главная функция CLI.

    Returns:
        int: 0 при успехе, 1 при фатальной ошибке
    """
    from ..config import load_config
    from ..core.config_schema import validate_config
    from ..core.context import RunContext, set_current_context
    from ..core.logging import LogConfig, LogContext, setup_logging_from_config

    parser = setup_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Загружаем конфигурацию из YAML (если есть)
    cfg = load_config(args.config)

    try:
        app_config = validate_config(cfg.to_dict(), cfg.source)
    except RegistrarError as e:
        # Логирование ещё не настроено: пишем с настройками по умолчанию
        setup_logging_from_config(LogConfig())
        logger.error(format_error_for_log(e))
        return 1

    # Создаём контекст выполнения
    dry_run = getattr(args, "dry_run", False)
    ctx = RunContext.create(
        dry_run=dry_run,
        triggered_by="cli",
        command=args.command,
    )
    set_current_context(ctx)

    # Приоритет: --debug / --json-logs > config.yaml
    log_config = LogConfig.from_dict(app_config.logging.model_dump())
    if args.debug:
        log_config.level = logging.DEBUG
    if args.json_logs:
        log_config.json_format = True
    setup_logging_from_config(log_config)

    logger.info(f"Run started (command={args.command}, dry_run={dry_run})")

    log_fields = {"operation": args.command}
    if getattr(args, "name", None):
        log_fields["device"] = args.name

    exit_code = 0
    try:
        with LogContext(**log_fields):
            exit_code = cmd_register(args, ctx)
    except RegistrarError as e:
        logger.error(f"Регистрация прервана: {format_error_for_log(e)}")
        exit_code = 1

    logger.info(f"Run completed: {ctx.run_id} (elapsed={ctx.elapsed_human}, exit={exit_code})")
    set_current_context(None)
    return exit_code


__all__ = [
    "cmd_register",
    "_print_register_summary",
    "setup_parser",
    "main",
]
