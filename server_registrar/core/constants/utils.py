"""
Вспомогательные функции для работы со строками.
"""

import ipaddress
import re

_SLUG_INVALID_RE = re.compile(r"[^a-z0-9-]+")
_SLUG_DASHES_RE = re.compile(r"-{2,}")

# Заглушки, которые вендоры оставляют в DMI вместо реальных значений
PLACEHOLDER_VALUES = {
    "",
    "none",
    "to be filled by o.e.m.",
    "default string",
    "not specified",
    "system product name",
    "system serial number",
}


def slugify(name: str) -> str:
    """
    Генерирует slug для NetBox из имени.

    Преобразует:
    - Пробелы, подчёркивания, слэши и прочие символы в дефисы
    - Всё в нижний регистр
    - Повторяющиеся дефисы схлопываются

    Args:
        name: Исходное имя

    Returns:
        str: Slug для NetBox

    Examples:
        >>> slugify("Super Micro Computer")
        'super-micro-computer'
        >>> slugify("Dell Inc.")
        'dell-inc'
    """
    if not name:
        return ""
    slug = _SLUG_INVALID_RE.sub("-", name.strip().lower())
    slug = _SLUG_DASHES_RE.sub("-", slug)
    return slug.strip("-")


def is_placeholder(value: str) -> bool:
    """
    Проверяет, является ли значение из DMI заглушкой производителя.

    Args:
        value: Значение (product name, serial)

    Returns:
        bool: True для пустых значений и заглушек вида "To be filled by O.E.M."
    """
    if value is None:
        return True
    return str(value).strip().lower() in PLACEHOLDER_VALUES


def clean_value(value) -> str:
    """Возвращает значение без пробелов по краям или "" для заглушки."""
    if is_placeholder(value):
        return ""
    return str(value).strip()


def normalize_address(address: str) -> str:
    """
    Приводит IP с маской к форме, в которой его хранит NetBox.

    IPv6 сжимается и переводится в нижний регистр: 2001:DB8:0::10/64 → 2001:db8::10/64.
    Некорректная строка возвращается как есть (без пробелов по краям).

    Examples:
        >>> normalize_address("2001:DB8::10/64")
        '2001:db8::10/64'
        >>> normalize_address("10.0.0.5/24")
        '10.0.0.5/24'
    """
    address = (address or "").strip()
    try:
        return str(ipaddress.ip_interface(address))
    except ValueError:
        return address
