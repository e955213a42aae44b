"""
Команда register.

Регистрация сервера в NetBox по фактам observer.
"""

import logging

logger = logging.getLogger(__name__)

SECTION_NAMES = {
    "device": "Устройство",
    "modules": "Модули",
    "interfaces": "Интерфейсы",
    "mac_addresses": "MAC-адреса",
    "ip_addresses": "IP-адреса",
}


def cmd_register(args, ctx=None) -> int:
    """
    Обработчик команды register.

    ВАЖНО: На сервере ничего не меняется, запись идёт только в NetBox.

    Returns:
        int: 0 если регистрация прошла (отдельные ошибки модулей/MAC/IP допустимы)

    Raises:
        RegistrarError: Фатальная ошибка (конфигурация, справочники, bays)
    """
    from ...config import config
    from ...core.exceptions import ConfigError
    from ...netbox import NetBoxClient, NetBoxSync, SyncOptions
    from ...observer import FactsFileObserver, SnapshotOptions, build_snapshot

    observer = FactsFileObserver(args.facts)

    options = SnapshotOptions.from_config(
        config,
        name=args.name,
        device_type=args.device_type,
        serial=args.serial,
        asset_tag=args.asset_tag,
        comments=args.comments,
        site=args.site,
        role=args.role,
    )
    options.auto_detect = args.auto_detect
    snapshot = build_snapshot(observer, options)

    logger.info(
        f"Снимок {snapshot.name}: {snapshot.device_type}, интерфейсов {len(snapshot.all_interfaces())}, "
        f"модулей {len(snapshot.modules)}"
    )

    # Приоритет: CLI аргументы > config.yaml > переменные окружения
    url = args.url or config.netbox.url
    token = args.token or config.netbox.token
    try:
        client = NetBoxClient(
            url=url,
            token=token,
            ssl_verify=bool(config.netbox.verify_ssl),
            timeout=config.netbox.timeout or 30,
        )
    except ValueError as e:
        raise ConfigError(str(e), key="netbox") from e

    sync = NetBoxSync(
        client,
        dry_run=args.dry_run,
        context=ctx,
        options=SyncOptions.from_config(config),
    )
    result = sync.register(snapshot)

    _print_register_summary(result, sync.actions if args.dry_run else None)
    return 0


def _print_register_summary(result: dict, actions=None) -> None:
    """Выводит сводку регистрации в конце."""
    mode = "[DRY-RUN] " if result.get("dry_run") else ""

    if actions:
        print(f"\n{'='*60}")
        print(f"{mode}ЗАПЛАНИРОВАННЫЕ ИЗМЕНЕНИЯ")
        print(f"{'='*60}")
        icons = {"create": "+", "update": "~", "replace": "~"}
        for action in actions:
            print(f"  {icons.get(action.operation, '•')} {action.description}")

    print(f"\n{'='*60}")
    print(f"{mode}СВОДКА РЕГИСТРАЦИИ NetBox (device_id={result.get('device_id')})")
    print(f"{'='*60}")

    totals = {"created": 0, "updated": 0, "skipped": 0, "failed": 0}
    for section, title in SECTION_NAMES.items():
        stats = result.get(section) or {}
        for key in totals:
            totals[key] += stats.get(key, 0)

        parts = []
        if stats.get("created", 0) > 0:
            parts.append(f"+{stats['created']} создано")
        if stats.get("updated", 0) > 0:
            parts.append(f"~{stats['updated']} обновлено")
        if stats.get("skipped", 0) > 0:
            parts.append(f"={stats['skipped']} без изменений")
        if stats.get("failed", 0) > 0:
            parts.append(f"✗{stats['failed']} ошибок")
        print(f"  {title}: {', '.join(parts) if parts else 'нет'}")

    print(f"{'-'*60}")
    if totals["created"] or totals["updated"] or totals["failed"]:
        parts = []
        if totals["created"]:
            parts.append(f"+{totals['created']} создано")
        if totals["updated"]:
            parts.append(f"~{totals['updated']} обновлено")
        if totals["failed"]:
            parts.append(f"✗{totals['failed']} ошибок")
        print(f"  ИТОГО: {', '.join(parts)}")
    else:
        print("  Изменений нет")
    print(f"{'='*60}\n")
