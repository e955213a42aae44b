"""
Построение DeviceSnapshot из фактов observer.

Снимок строится один раз за запуск и дальше не меняется.
Здесь же применяются правила, которые не зависят от NetBox:
- выбор device-type (override → автоопределение → Generic Server)
- фильтрация заглушек DMI
- фильтр интерфейсов, типы и иерархия
- пропуск недоступных категорий модулей
- размещение блейда в шасси
- интерфейс BMC (IPMI)
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .base import HardwareObserver
from ..core.models import (
    DeviceSnapshot,
    InterfaceSpec,
    InterfaceKind,
    ModuleSpec,
    ModuleCategory,
)
from ..core.domain import TopologyBuilder, build_chassis_hint
from ..core.exceptions import ConfigError, ObserverUnavailableError
from ..core.constants import (
    DEFAULT_DEVICE_TYPE,
    DEFAULT_EXCLUDE_INTERFACES,
    DEFAULT_STATUS,
    IPMI_INTERFACE_NAME,
    OTHER_TYPE,
    clean_value,
    normalize_mac,
    normalize_address,
)

logger = logging.getLogger(__name__)


@dataclass
class SnapshotOptions:
    """
    Параметры построения снимка (CLI + config.yaml).

    Attributes:
        name: Имя устройства (по умолчанию hostname от observer)
        device_type: Явная модель device-type (отключает автоопределение)
        auto_detect: Определять модель по DMI
        serial: Явный серийный номер
        asset_tag: Инвентарный номер
        comments: Комментарий
        site: Сайт
        role: Роль обычного сервера
        blade_role: Роль блейда
        status: Статус устройства
        blades: Модель блейда → модель шасси
        exclude_interfaces: Regex паттерны исключаемых интерфейсов
        categories: Категории модулей для сбора
        collect_modules: Собирать модули вообще
    """
    name: str = ""
    device_type: str = ""
    auto_detect: bool = True
    serial: str = ""
    asset_tag: str = ""
    comments: str = ""
    site: str = "office"
    role: str = "Server"
    blade_role: str = "Blade"
    status: str = DEFAULT_STATUS
    blades: Dict[str, str] = field(default_factory=dict)
    exclude_interfaces: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_INTERFACES))
    categories: List[ModuleCategory] = field(default_factory=lambda: list(ModuleCategory))
    collect_modules: bool = True

    @classmethod
    def from_config(cls, cfg, **overrides) -> "SnapshotOptions":
        """
        Создаёт опции из Config и явных значений CLI.

        Пустые значения в overrides (None, "") не перекрывают config.
        """
        options = cls(
            device_type=cfg.defaults.device_type or "",
            site=cfg.defaults.site or "office",
            role=cfg.defaults.role or cfg.roles.server or "Server",
            blade_role=cfg.roles.blade or "Blade",
            status=cfg.defaults.status or DEFAULT_STATUS,
            blades=dict(cfg.get("blades") or {}),
            exclude_interfaces=list(cfg.filters.exclude_interfaces or []),
            categories=[ModuleCategory.parse(c) for c in (cfg.modules.categories or [])],
            collect_modules=bool(cfg.modules.enabled),
        )
        for key, value in overrides.items():
            if value is None or value == "":
                continue
            setattr(options, key, value)
        return options


def resolve_device_type(options: SnapshotOptions, product_name: str) -> str:
    """
    Выбирает модель device-type.

    Raises:
        ConfigError: Автоопределение выключено, а модель не задана
    """
    if options.device_type:
        return options.device_type
    if not options.auto_detect:
        raise ConfigError(
            "Модель устройства не задана: укажите --type или включите автоопределение",
            key="defaults.device_type",
        )
    detected = clean_value(product_name)
    if detected:
        logger.info(f"Определена модель устройства: {detected}")
        return detected
    logger.info(f"Модель не определена, используем {DEFAULT_DEVICE_TYPE}")
    return DEFAULT_DEVICE_TYPE


def collect_modules(observer: HardwareObserver, categories: List[ModuleCategory]) -> List[ModuleSpec]:
    """
    Собирает модули по категориям.

    Недоступная категория пропускается целиком. Модули без bay или модели
    и повторные имена bay отбрасываются с предупреждением.
    """
    result: List[ModuleSpec] = []
    seen_bays = set()

    for category in categories:
        try:
            modules = observer.list_modules(category)
        except ObserverUnavailableError as e:
            logger.warning(f"Категория {category.value} пропущена: {e.message}")
            continue

        for module in modules:
            if not module.bay_name or not module.model:
                logger.warning(f"{category.value}: модуль без bay или модели пропущен ({module.bay_name!r})")
                continue
            if module.bay_name in seen_bays:
                logger.warning(f"{category.value}: повторный bay {module.bay_name} пропущен")
                continue
            seen_bays.add(module.bay_name)
            result.append(module)

        logger.debug(f"{category.value}: модулей {len(modules)}")

    return result


def build_ipmi_interface(observer: HardwareObserver) -> Optional[InterfaceSpec]:
    """Интерфейс BMC с MAC и IPv4 (адрес без маски считается /32)."""
    facts = observer.ipmi_facts()
    if facts is None:
        return None

    ipv4 = facts.ipv4.strip() if facts.ipv4 else ""
    if ipv4 in ("0.0.0.0", ""):
        ipv4 = ""
    elif "/" not in ipv4:
        ipv4 = f"{ipv4}/32"
    ipv4 = normalize_address(ipv4)

    mac = normalize_mac(facts.mac)
    if not mac and not ipv4:
        return None

    return InterfaceSpec(
        name=IPMI_INTERFACE_NAME,
        kind=InterfaceKind.OTHER,
        type=OTHER_TYPE,
        mac=mac or None,
        ipv4=ipv4 or None,
    )


def build_snapshot(observer: HardwareObserver, options: SnapshotOptions) -> DeviceSnapshot:
    """
    Строит снимок сервера.

    Args:
        observer: Источник фактов
        options: Параметры CLI/конфигурации

    Returns:
        DeviceSnapshot: Неизменяемый снимок

    Raises:
        ConfigError: Модель не задана при выключенном автоопределении
        HostnameConventionError: Блейд с именем не по шаблону
    """
    name = options.name or observer.hostname()
    identity = observer.device_identity()

    device_type = resolve_device_type(options, identity.product_name)
    serial = options.serial or clean_value(identity.serial)

    interfaces = TopologyBuilder(options.exclude_interfaces).build(observer.list_interfaces())
    logger.info(f"Интерфейсов после фильтрации: {len(interfaces)}")

    modules: List[ModuleSpec] = []
    if options.collect_modules:
        modules = collect_modules(observer, options.categories)
        logger.info(f"Модулей: {len(modules)}")

    chassis = None
    role = options.role
    chassis_type = options.blades.get(device_type)
    if chassis_type:
        chassis = build_chassis_hint(name, chassis_type)
        role = options.blade_role
        logger.info(
            f"Блейд: шасси {chassis.chassis_name}, слот {chassis.bay_name} ({chassis_type})"
        )

    ipmi = build_ipmi_interface(observer)
    if ipmi and any(intf.name == ipmi.name for intf in interfaces):
        logger.warning(f"Интерфейс {ipmi.name} уже есть среди интерфейсов ОС, BMC пропущен")
        ipmi = None

    return DeviceSnapshot(
        name=name,
        device_type=device_type,
        site=options.site,
        role=role,
        status=options.status,
        serial=serial or None,
        asset_tag=options.asset_tag or None,
        comments=options.comments or None,
        chassis=chassis,
        interfaces=tuple(interfaces),
        modules=tuple(modules),
        ipmi=ipmi,
    )
