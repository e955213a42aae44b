"""
Нормализация MAC-адресов.

Внутри проекта MAC хранится в одном формате: aa:bb:cc:dd:ee:ff (IEEE, нижний регистр).
"""

import re

_HEX_RE = re.compile(r"^[0-9a-f]{12}$")

ZERO_MAC = "00:00:00:00:00:00"


def normalize_mac_raw(mac: str) -> str:
    """
    Нормализует MAC-адрес в сырой формат (12 символов, нижний регистр).

    Используется для сравнения MAC-адресов.

    Args:
        mac: MAC-адрес в любом формате

    Returns:
        str: 12 символов в нижнем регистре (aabbccddeeff) или ""
    """
    if not mac:
        return ""
    mac_clean = mac.strip().lower()
    for char in [":", "-", ".", " "]:
        mac_clean = mac_clean.replace(char, "")
    if not _HEX_RE.match(mac_clean):
        return ""
    return mac_clean


def normalize_mac(mac: str) -> str:
    """
    Нормализует MAC-адрес в формат aa:bb:cc:dd:ee:ff.

    Нулевой MAC (у loopback и части виртуальных интерфейсов) считается отсутствующим.

    Args:
        mac: MAC-адрес в любом формате

    Returns:
        str: MAC в формате aa:bb:cc:dd:ee:ff или пустая строка

    Examples:
        >>> normalize_mac("AA-BB-CC-DD-EE-01")
        'aa:bb:cc:dd:ee:01'
        >>> normalize_mac("00:00:00:00:00:00")
        ''
    """
    clean = normalize_mac_raw(mac)
    if not clean:
        return ""
    result = ":".join(clean[i : i + 2] for i in range(0, 12, 2))
    if result == ZERO_MAC:
        return ""
    return result


def macs_equal(left: str, right: str) -> bool:
    """Сравнивает два MAC-адреса независимо от формата и регистра."""
    left_raw = normalize_mac_raw(left)
    return bool(left_raw) and left_raw == normalize_mac_raw(right)
