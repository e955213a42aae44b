"""
Синхронизация модулей (CPU, DIMM, диски, GPU, контроллеры, NIC, PSU).

Для каждой категории три фазы:
1. module-type: по одному на (производитель, модель), только создание
2. module-bay: по одному на слот устройства
3. module: связывает bay и type, серийный номер обновляется при расхождении

Ошибка на отдельном модуле не прерывает регистрацию.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .base import SyncStats
from ..payloads import ModuleTypePayload, ModuleBayPayload, ModulePayload
from ...core.models import ModuleCategory, ModuleSpec

logger = logging.getLogger(__name__)

UNKNOWN_MANUFACTURER = "Unknown"


class ModulesSyncMixin:
    """Mixin для модулей устройства."""

    # ==================== MODULE TYPES ====================

    def _module_type_profile_id(self, category: ModuleCategory) -> Optional[int]:
        """ID профиля для категории (если задан в config.yaml и доступен)."""
        profile_name = self.options.module_profiles.get(category.value)
        if not profile_name:
            return None
        profile = self.ensure_module_type_profile(profile_name)
        return profile.id if profile else None

    def _ensure_module_type(self, module: ModuleSpec, profile_id: Optional[int]) -> Tuple[int, bool]:
        """
        Находит или создаёт module-type.

        Существующий шаблон не меняется.

        Returns:
            Tuple[int, bool]: (ID, создан ли)
        """
        manufacturer = self.ensure_manufacturer(module.manufacturer or UNKNOWN_MANUFACTURER)
        existing = self._find(
            "module-types",
            lambda r: r.get("model") == module.model
            and self._ref_id(r.get("manufacturer")) == manufacturer.id,
            manufacturer_id=manufacturer.id,
            model=module.model,
        )
        if existing is not None:
            return existing["id"], False

        payload = ModuleTypePayload(manufacturer=manufacturer.id, model=module.model)
        if profile_id is not None:
            payload.profile = profile_id
            if self.options.sync_module_attributes and module.attributes:
                payload.attributes = dict(module.attributes)

        created = self._create(
            payload,
            f"Создание module-type {manufacturer.name} {module.model} ({module.category.value})",
        )
        return created["id"], True

    def _sync_module_types(
        self,
        category: ModuleCategory,
        modules: List[ModuleSpec],
        stats: SyncStats,
    ) -> Dict[Tuple[str, str], int]:
        """Фаза 1: module-type для каждой уникальной пары (производитель, модель)."""
        profile_id = self._module_type_profile_id(category)
        type_ids: Dict[Tuple[str, str], int] = {}
        failed = set()

        for module in modules:
            key = module.type_key
            if key in type_ids or key in failed:
                continue
            result = self._safe_netbox_call(
                f"module-type {module.model}",
                self._ensure_module_type,
                module,
                profile_id,
            )
            if result is None:
                failed.add(key)
                continue
            type_id, created = result
            type_ids[key] = type_id
            if created:
                stats.add("types_created")

        return type_ids

    # ==================== MODULE BAYS ====================

    def _ensure_module_bay(self, device_id: int, module: ModuleSpec) -> Tuple[int, bool]:
        """Находит или создаёт module-bay. Returns: (ID, создан ли)."""
        existing = self._find(
            "module-bays",
            lambda r: r.get("name") == module.bay_name and self._ref_id(r.get("device")) == device_id,
            device_id=device_id,
            name=module.bay_name,
        )
        if existing is not None:
            return existing["id"], False

        created = self._create(
            ModuleBayPayload(device=device_id, name=module.bay_name, label=module.category.value),
            f"Создание module-bay {module.bay_name}",
        )
        return created["id"], True

    def _sync_module_bays(
        self,
        device_id: int,
        modules: List[ModuleSpec],
        stats: SyncStats,
    ) -> Dict[str, int]:
        """Фаза 2: module-bay на каждый слот."""
        bay_ids: Dict[str, int] = {}
        for module in modules:
            result = self._safe_netbox_call(
                f"module-bay {module.bay_name}",
                self._ensure_module_bay,
                device_id,
                module,
            )
            if result is None:
                continue
            bay_id, created = result
            bay_ids[module.bay_name] = bay_id
            if created:
                stats.add("bays_created")
        return bay_ids

    # ==================== MODULES ====================

    def _sync_module(self, device_id: int, bay_id: int, type_id: int, module: ModuleSpec) -> str:
        """
        Создаёт модуль или исправляет type/serial существующего.

        Returns:
            str: created / updated / skipped
        """
        existing = self._find(
            "modules",
            lambda r: self._ref_id(r.get("module_bay")) == bay_id,
            device_id=device_id,
            module_bay_id=bay_id,
        )

        if existing is None:
            self._create(
                ModulePayload(
                    device=device_id,
                    module_bay=bay_id,
                    module_type=type_id,
                    serial=module.serial,
                ),
                f"Создание модуля {module.bay_name}: {module.model}",
            )
            return "created"

        changes: Dict[str, Any] = {}
        if self._ref_id(existing.get("module_type")) != type_id:
            changes["module_type"] = type_id
        if module.serial and (existing.get("serial") or "") != module.serial:
            changes["serial"] = module.serial

        if not changes:
            return "skipped"

        self._update(
            existing["id"],
            ModulePayload(**changes),
            f"Обновление модуля {module.bay_name}: {', '.join(sorted(changes))}",
        )
        return "updated"

    def sync_modules(self, device_id: int, modules: List[ModuleSpec]) -> Dict[str, Any]:
        """
        Синхронизирует модули устройства по категориям.

        Args:
            device_id: ID устройства
            modules: Модули снимка

        Returns:
            dict: {created, updated, skipped, failed, types_created, bays_created, details}
        """
        stats = SyncStats("created", "updated", "skipped", "failed", "types_created", "bays_created")

        by_category: Dict[ModuleCategory, List[ModuleSpec]] = {}
        for module in modules:
            by_category.setdefault(module.category, []).append(module)

        for category in ModuleCategory:
            items = by_category.get(category)
            if not items:
                continue
            logger.info(f"{self._log_prefix()}Модули {category.value}: {len(items)}")

            type_ids = self._sync_module_types(category, items, stats)
            bay_ids = self._sync_module_bays(device_id, items, stats)

            for module in items:
                bay_id = bay_ids.get(module.bay_name)
                type_id = type_ids.get(module.type_key)
                if bay_id is None or type_id is None:
                    logger.warning(
                        f"{self._log_prefix()}Модуль {module.bay_name} пропущен: "
                        f"нет {'module-bay' if bay_id is None else 'module-type'}"
                    )
                    stats.add("failed")
                    continue

                status = self._safe_netbox_call(
                    f"модуля {module.bay_name}",
                    self._sync_module,
                    device_id,
                    bay_id,
                    type_id,
                    module,
                    default="failed",
                )
                stats.add(status, f"{category.value}:{module.bay_name}")

        return stats.result()
