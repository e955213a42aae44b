"""
Синхронизация устройства и размещения блейда в шасси.

Обычный сервер: device по имени → create / update.
Блейд: шасси → device-bay "Bay-<n>" на шасси → блейд → installed_device в bay.
Порядок обязателен: bay нельзя создать без ID шасси,
а установить блейд нельзя без ID блейда.
"""

import logging
from typing import Any, Dict

from .base import SyncStats
from .references import ResolvedRef
from ..payloads import DevicePayload, DeviceBayPayload
from ...core.models import DeviceSnapshot
from ...core.exceptions import (
    BayHierarchyError,
    DeviceSyncError,
    NetBoxError,
    NetBoxValidationError,
    format_error_for_log,
)

logger = logging.getLogger(__name__)

DEVICE_REF_FIELDS = ("device_type", "role", "site")


class DevicesSyncMixin:
    """Mixin для устройства, шасси и device-bay."""

    def ensure_roles(self, snapshot: DeviceSnapshot) -> Dict[str, ResolvedRef]:
        """
        Гарантирует наличие ролей Server / Blade / Chassis и роли из снимка.

        Returns:
            Dict: имя роли → ResolvedRef
        """
        names = [
            self.options.server_role,
            self.options.blade_role,
            self.options.chassis_role,
            snapshot.role,
        ]
        roles = {}
        for name in names:
            if name and name not in roles:
                roles[name] = self.ensure_role(name)
        return roles

    def _device_changes(self, existing: Dict[str, Any], payload: DevicePayload) -> Dict[str, Any]:
        """
        Поля payload, отличающиеся от устройства в NetBox.

        Поля со значением None не сравниваются: регистрация ими не владеет.
        """
        changes = {}
        for field_name, value in payload.to_dict().items():
            if field_name in DEVICE_REF_FIELDS:
                current = existing.get(field_name)
                if current is None and field_name == "role":
                    current = existing.get("device_role")
                current = self._ref_id(current)
            elif field_name == "status":
                current = self._choice_value(existing.get("status"))
            else:
                current = existing.get(field_name)
                if current is None:
                    current = ""
            if current != value:
                changes[field_name] = value
        return changes

    def _upsert_device(self, payload: DevicePayload, stats: SyncStats) -> Dict[str, Any]:
        """
        Создаёт или обновляет устройство по имени.

        Raises:
            DeviceSyncError: NetBox отклонил создание или обновление
        """
        name = payload.name
        existing = self.client.get_device_by_name(name)

        try:
            if existing is None:
                device = self._create(payload, f"Создание устройства {name}")
                stats.add("created", name)
                return device

            changes = self._device_changes(existing, payload)
            if not changes:
                logger.debug(f"{self._log_prefix()}Устройство {name} без изменений")
                stats.add("skipped", name)
                return existing

            description = f"Обновление устройства {name}: {', '.join(sorted(changes))}"
            if self.options.device_update_mode == "replace":
                self._replace(existing["id"], payload, description)
            else:
                self._update(existing["id"], DevicePayload(**changes), description)
            stats.add("updated", {"name": name, "changes": sorted(changes)})
            return {**existing, **changes}

        except NetBoxError as e:
            raise DeviceSyncError(
                f"Не удалось зарегистрировать устройство {name}: {format_error_for_log(e)}",
                device=name,
            ) from e

    def _ensure_device_bay(
        self,
        chassis_id: int,
        bay_name: str,
        chassis_type: str,
        stats: SyncStats,
    ) -> Dict[str, Any]:
        """
        Находит или создаёт device-bay на шасси.

        Raises:
            BayHierarchyError: Тип шасси не поддерживает device bays
        """
        bay = self._find(
            "device-bays",
            lambda r: r.get("name") == bay_name and self._ref_id(r.get("device")) == chassis_id,
            device_id=chassis_id,
            name=bay_name,
        )
        if bay is not None:
            stats.add("skipped", bay_name)
            return bay

        try:
            bay = self._create(
                DeviceBayPayload(device=chassis_id, name=bay_name),
                f"Создание device-bay {bay_name} на шасси (id={chassis_id})",
            )
        except NetBoxValidationError as e:
            raise BayHierarchyError(
                f"NetBox отклонил device-bay {bay_name}: у device type '{chassis_type}' "
                f"должен быть subdevice_role=parent",
                device_type=chassis_type,
                details={"errors": e.errors},
            ) from e
        except NetBoxError as e:
            raise DeviceSyncError(
                f"Не удалось создать device-bay {bay_name}: {format_error_for_log(e)}",
            ) from e

        stats.add("created", bay_name)
        return bay

    def _install_device(
        self,
        bay: Dict[str, Any],
        device_id: int,
        device_name: str,
        device_type: str,
        stats: SyncStats,
    ) -> None:
        """
        Устанавливает устройство в device-bay (PATCH installed_device).

        Raises:
            BayHierarchyError: NetBox отклонил установку
        """
        installed = self._ref_id(bay.get("installed_device"))
        if installed == device_id:
            stats.add("skipped", f"{bay.get('name')}:{device_name}")
            return

        try:
            self._update(
                bay["id"],
                DeviceBayPayload(installed_device=device_id),
                f"Установка {device_name} в {bay.get('name')}",
            )
        except NetBoxValidationError as e:
            raise BayHierarchyError(
                f"NetBox отклонил установку {device_name} в {bay.get('name')}: у device type "
                f"'{device_type}' должен быть subdevice_role=child, а слот должен быть свободен",
                device_type=device_type,
                details={"errors": e.errors, "installed_device": installed},
            ) from e
        except NetBoxError as e:
            raise DeviceSyncError(
                f"Не удалось установить {device_name} в {bay.get('name')}: {format_error_for_log(e)}",
                device=device_name,
            ) from e

        stats.add("updated", f"{bay.get('name')}:{device_name}")

    def sync_device(self, snapshot: DeviceSnapshot) -> Dict[str, Any]:
        """
        Регистрирует устройство (и шасси для блейда).

        Args:
            snapshot: Снимок сервера

        Returns:
            dict: stats + "device_id"

        Raises:
            MissingReferenceError: Нет site / role / device-type
            DeviceSyncError: Устройство не создано
            BayHierarchyError: Шасси или блейд не поддерживают bays
        """
        stats = SyncStats("created", "updated", "skipped", "failed")

        site = self.ensure_site(snapshot.site)
        roles = self.ensure_roles(snapshot)
        device_type = self.ensure_device_type(snapshot.device_type)

        bay = None
        if snapshot.is_blade:
            hint = snapshot.chassis
            chassis_type = self.ensure_device_type(hint.device_type)
            chassis = self._upsert_device(
                DevicePayload(
                    name=hint.chassis_name,
                    device_type=chassis_type.id,
                    role=roles[self.options.chassis_role].id,
                    site=site.id,
                    status=snapshot.status,
                ),
                stats,
            )
            bay = self._ensure_device_bay(chassis["id"], hint.bay_name, chassis_type.name, stats)

        device = self._upsert_device(
            DevicePayload(
                name=snapshot.name,
                device_type=device_type.id,
                role=roles[snapshot.role].id,
                site=site.id,
                status=snapshot.status,
                serial=snapshot.serial,
                asset_tag=snapshot.asset_tag,
                comments=snapshot.comments,
            ),
            stats,
        )

        if bay is not None:
            self._install_device(bay, device["id"], snapshot.name, device_type.name, stats)

        result = stats.result()
        result["device_id"] = device["id"]
        return result
