"""
Справочные объекты NetBox: site, role, device-type, manufacturer, module-type-profile.

- site и device-type только ищутся: их отсутствие фатально
- role создаётся, если её нет
- manufacturer создаётся; при конфликте slug принимается существующая строка
  и её каноническое имя используется до конца запуска
- module-type-profile необязателен: при ошибке модули создаются без профиля

Результаты кэшируются на время запуска.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..payloads import RolePayload, ManufacturerPayload, ModuleTypeProfilePayload
from ...core.constants import slugify
from ...core.exceptions import MissingReferenceError, NetBoxError, format_error_for_log

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedRef:
    """
    Найденный или созданный справочный объект.

    Attributes:
        name: Каноническое имя в NetBox (может отличаться от запрошенного)
        id: ID в NetBox
    """
    name: str
    id: int


def _same_text(left: Optional[str], right: Optional[str]) -> bool:
    return (left or "").strip().lower() == (right or "").strip().lower()


class ReferencesSyncMixin:
    """Разрешение справочных объектов."""

    def ensure_site(self, site: str) -> ResolvedRef:
        """
        Находит сайт по slug или имени.

        Raises:
            MissingReferenceError: Сайта нет в NetBox
        """
        cache = self._references
        key = ("site", site)
        if key in cache:
            return cache[key]

        row = self._find("sites", lambda r: _same_text(r.get("slug"), site), slug=site.lower())
        if row is None:
            row = self._find("sites", lambda r: _same_text(r.get("name"), site), name=site)
        if row is None:
            raise MissingReferenceError(
                f"Сайт '{site}' не найден в NetBox",
                kind="site",
                key=site,
            )

        ref = ResolvedRef(name=row["name"], id=row["id"])
        cache[key] = ref
        logger.debug(f"{self._log_prefix()}Сайт {ref.name} (id={ref.id})")
        return ref

    def ensure_role(self, name: str) -> ResolvedRef:
        """
        Находит роль устройства, создаёт при отсутствии.

        Raises:
            MissingReferenceError: Роли нет и создать её не удалось
        """
        cache = self._references
        key = ("role", name)
        if key in cache:
            return cache[key]

        slug = slugify(name)
        row = self._find("device-roles", lambda r: _same_text(r.get("name"), name), name=name)
        if row is None:
            row = self._find("device-roles", lambda r: r.get("slug") == slug, slug=slug)

        if row is None:
            payload = RolePayload(
                name=name,
                slug=slug,
                color=self.options.role_color,
                vm_role=False,
            )
            try:
                row = self._create(payload, f"Создание роли {name}")
            except NetBoxError as e:
                raise MissingReferenceError(
                    f"Роль '{name}' не найдена и не создана: {format_error_for_log(e)}",
                    kind="role",
                    key=name,
                ) from e

        ref = ResolvedRef(name=row.get("name") or name, id=row["id"])
        cache[key] = ref
        return ref

    def ensure_device_type(self, model: str) -> ResolvedRef:
        """
        Находит device-type по модели.

        Если точного совпадения нет и модель заканчивается на "+",
        повторяет поиск без "+" (DMI пишет "PowerEdge R640+" для части ревизий).

        Raises:
            MissingReferenceError: Device-type нет в NetBox
        """
        cache = self._references
        key = ("device-type", model)
        if key in cache:
            return cache[key]

        candidates = [model]
        if model.endswith("+"):
            candidates.append(model.rstrip("+").rstrip())

        row = None
        for candidate in candidates:
            row = self._find("device-types", lambda r, c=candidate: r.get("model") == c, model=candidate)
            if row is not None:
                break

        if row is None:
            raise MissingReferenceError(
                f"Device type '{model}' не найден в NetBox",
                kind="device-type",
                key=model,
            )

        ref = ResolvedRef(name=row["model"], id=row["id"])
        cache[key] = ref
        return ref

    def ensure_manufacturer(self, name: str) -> ResolvedRef:
        """
        Находит или создаёт производителя.

        Если создание отклонено (slug уже занят производителем с другим
        написанием), берётся строка по slug и её имя.

        Raises:
            NetBoxError: Не удалось ни найти, ни создать
        """
        cache = self._references
        key = ("manufacturer", name)
        if key in cache:
            return cache[key]

        slug = slugify(name)
        row = self._find("manufacturers", lambda r: r.get("name") == name, name=name)

        if row is None:
            try:
                row = self._create(
                    ManufacturerPayload(name=name, slug=slug),
                    f"Создание производителя {name}",
                )
            except NetBoxError as e:
                row = self._find("manufacturers", lambda r: r.get("slug") == slug, slug=slug)
                if row is None:
                    raise
                logger.info(
                    f"{self._log_prefix()}Производитель '{name}' совпал по slug '{slug}' "
                    f"с '{row.get('name')}', используем его ({format_error_for_log(e)})"
                )

        ref = ResolvedRef(name=row.get("name") or name, id=row["id"])
        cache[key] = ref
        return ref

    def ensure_module_type_profile(self, name: str) -> Optional[ResolvedRef]:
        """
        Находит или создаёт module-type-profile.

        Профиль необязателен: при ошибке NetBox возвращает None.
        """
        cache = self._references
        key = ("module-type-profile", name)
        if key in cache:
            return cache[key]

        def _resolve() -> ResolvedRef:
            row = self._find("module-type-profiles", lambda r: r.get("name") == name, name=name)
            if row is None:
                row = self._create(
                    ModuleTypeProfilePayload(name=name),
                    f"Создание профиля модулей {name}",
                )
            return ResolvedRef(name=row.get("name") or name, id=row["id"])

        ref = self._safe_netbox_call(f"профиля модулей {name}", _resolve)
        cache[key] = ref
        return ref
