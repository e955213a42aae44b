"""
Domain logic для топологии сервера.

- Определение типа интерфейса (lag/bridge/скорость/трансивер/имя)
- Иерархия интерфейсов: физические порты под bond/bridge
- Размещение блейда в шасси по имени хоста

Не зависит от NetBox и от способа сбора фактов.
"""

import re
import logging
from typing import List, Dict, Optional, Tuple

from ..models import RawInterface, InterfaceSpec, InterfaceKind, ChassisHint
from ..exceptions import HostnameConventionError
from ..constants import (
    SPEED_TYPE_MAP,
    TRANSCEIVER_TYPE_MAP,
    NAME_PREFIX_TYPES,
    LAG_TYPE,
    BRIDGE_TYPE,
    OTHER_TYPE,
    normalize_mac,
    normalize_address,
)

logger = logging.getLogger(__name__)

# <alnum-префикс>b<цифры>: blade03b5 → (blade03, 5)
BLADE_HOSTNAME_RE = re.compile(r"^([A-Za-z0-9]+)[bB](\d+)$")


def kind_from_name(name: str) -> Optional[InterfaceKind]:
    """
    Определяет lag/bridge по имени интерфейса.

    Args:
        name: Имя интерфейса

    Returns:
        InterfaceKind.LAG для bond*, InterfaceKind.BRIDGE для *br* и vmbr*, иначе None
    """
    if name.startswith("bond"):
        return InterfaceKind.LAG
    if "br" in name or name.startswith("vmbr"):
        return InterfaceKind.BRIDGE
    return None


def infer_interface_type(
    name: str,
    speed: Optional[int] = None,
    transceiver: str = "",
    kind_hint: str = "",
) -> Tuple[InterfaceKind, str]:
    """
    Определяет класс и тип NetBox для интерфейса.

    Приоритет:
    1. Явный класс от observer (lag/bridge)
    2. Шаблон имени: bond* → lag, *br*/vmbr* → bridge
    3. Скорость линка (1000 → 1000base-t ...)
    4. Трансивер (SFP+ → 10gbase-x-sfpp ...)
    5. Префикс имени: eth/en/em → 1000base-t, wlan/wlp/wifi → ieee802.11a
    6. other

    Скорость без записи в карте (например 2500) даёт тип other:
    трансивер и префикс имени её не перекрывают.

    Args:
        name: Имя интерфейса
        speed: Скорость в Mbps
        transceiver: Форм-фактор модуля
        kind_hint: Класс от observer ("lag", "bridge")

    Returns:
        Tuple[InterfaceKind, str]: (класс, тип NetBox)
    """
    hint = (kind_hint or "").strip().lower()
    if hint == InterfaceKind.LAG.value:
        return InterfaceKind.LAG, LAG_TYPE
    if hint == InterfaceKind.BRIDGE.value:
        return InterfaceKind.BRIDGE, BRIDGE_TYPE

    by_name = kind_from_name(name)
    if by_name == InterfaceKind.LAG:
        return by_name, LAG_TYPE
    if by_name == InterfaceKind.BRIDGE:
        return by_name, BRIDGE_TYPE

    if speed and speed > 0:
        return InterfaceKind.PHYSICAL, SPEED_TYPE_MAP.get(speed, OTHER_TYPE)

    module = (transceiver or "").strip().lower()
    if module in TRANSCEIVER_TYPE_MAP:
        return InterfaceKind.PHYSICAL, TRANSCEIVER_TYPE_MAP[module]

    for prefix, netbox_type in NAME_PREFIX_TYPES:
        if name.startswith(prefix):
            return InterfaceKind.PHYSICAL, netbox_type

    return InterfaceKind.OTHER, OTHER_TYPE


def resolve_parents(interfaces: List[RawInterface]) -> Dict[str, Optional[str]]:
    """
    Строит иерархию интерфейсов по master-связям.

    Правила:
    - master, которого нет в списке, отбрасывается (висячий родитель)
    - ребро, замыкающее цикл, отбрасывается (первое ребро цикла остаётся)

    Args:
        interfaces: Интерфейсы в порядке от observer

    Returns:
        Dict: имя интерфейса → имя родителя или None
    """
    names = {intf.name for intf in interfaces}
    parents: Dict[str, Optional[str]] = {}

    for intf in interfaces:
        master = intf.master or None
        if master is None:
            parents[intf.name] = None
            continue

        if master not in names:
            logger.debug(f"Интерфейс {intf.name}: master {master} не найден, родитель пропущен")
            parents[intf.name] = None
            continue

        # Поднимаемся по уже принятым рёбрам: если дойдём до себя, это цикл
        ancestor: Optional[str] = master
        seen = set()
        while ancestor is not None and ancestor not in seen:
            if ancestor == intf.name:
                break
            seen.add(ancestor)
            ancestor = parents.get(ancestor)

        if ancestor == intf.name:
            logger.warning(
                f"Интерфейс {intf.name}: связь с {master} образует цикл, связь отброшена"
            )
            parents[intf.name] = None
            continue

        parents[intf.name] = master

    return parents


def parse_blade_hostname(hostname: str) -> Optional[Tuple[str, int]]:
    """
    Извлекает имя шасси и номер слота из имени блейда.

    Args:
        hostname: Имя хоста (FQDN допускается)

    Returns:
        Tuple[str, int]: (имя шасси, номер слота) или None

    Examples:
        >>> parse_blade_hostname("blade03b5")
        ('blade03', 5)
        >>> parse_blade_hostname("srv-01") is None
        True
    """
    short_name = (hostname or "").split(".")[0]
    match = BLADE_HOSTNAME_RE.match(short_name)
    if not match:
        return None
    return match.group(1), int(match.group(2))


def build_chassis_hint(hostname: str, chassis_device_type: str) -> ChassisHint:
    """
    Строит ChassisHint для блейда.

    Raises:
        HostnameConventionError: Имя хоста не соответствует <prefix>b<номер>
    """
    parsed = parse_blade_hostname(hostname)
    if parsed is None:
        raise HostnameConventionError(
            f"Имя блейда '{hostname}' должно иметь вид <шасси>b<номер слота>, например blade03b5",
            hostname=hostname,
        )
    chassis_name, bay_number = parsed
    return ChassisHint(
        chassis_name=chassis_name,
        bay_number=bay_number,
        device_type=chassis_device_type,
    )


class TopologyBuilder:
    """
    Преобразует сырые интерфейсы ОС в InterfaceSpec.

    Фильтрует по regex, определяет тип, нормализует MAC
    и разрешает родителей.

    Example:
        builder = TopologyBuilder(exclude_interfaces=[r"^lo$", r"^docker"])
        specs = builder.build([RawInterface(name="eno1", master="bond0"), ...])
    """

    def __init__(self, exclude_interfaces: Optional[List[str]] = None):
        """
        Args:
            exclude_interfaces: Regex паттерны имён для исключения
        """
        self.exclude_interfaces = exclude_interfaces or []
        self._exclude_patterns = [re.compile(p) for p in self.exclude_interfaces]

    def is_excluded(self, name: str) -> bool:
        """Проверяет, исключён ли интерфейс фильтром."""
        return any(p.search(name) for p in self._exclude_patterns)

    def build(self, raw_interfaces: List[RawInterface]) -> List[InterfaceSpec]:
        """
        Строит список InterfaceSpec.

        Args:
            raw_interfaces: Интерфейсы от observer

        Returns:
            List[InterfaceSpec]: Интерфейсы с типом и родителем
        """
        kept: List[RawInterface] = []
        seen = set()
        for intf in raw_interfaces:
            if not intf.name:
                continue
            if self.is_excluded(intf.name):
                logger.debug(f"Интерфейс {intf.name} исключён фильтром")
                continue
            if intf.name in seen:
                logger.warning(f"Дубликат интерфейса {intf.name} пропущен")
                continue
            seen.add(intf.name)
            kept.append(intf)

        parents = resolve_parents(kept)

        specs = []
        for intf in kept:
            kind, netbox_type = infer_interface_type(
                intf.name,
                speed=intf.speed,
                transceiver=intf.transceiver,
                kind_hint=intf.kind,
            )
            specs.append(InterfaceSpec(
                name=intf.name,
                kind=kind,
                type=netbox_type,
                mac=normalize_mac(intf.mac) or None,
                speed=intf.speed if intf.speed and intf.speed > 0 else None,
                mtu=intf.mtu or None,
                parent=parents.get(intf.name),
                enabled=intf.state != "down",
                ipv4=normalize_address(intf.ipv4) or None,
                ipv6=normalize_address(intf.ipv6) or None,
            ))
        return specs
