"""
Базовые классы и утилиты для синхронизации с NetBox.

Содержит:
- SyncOptions: параметры регистрации из config.yaml
- SyncStats: счётчики created/updated/skipped/failed
- PlannedAction: описание изменения в режиме dry-run
- SyncBase: общие методы поиска, записи и обработки ошибок
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..payloads import Payload
from ...core.context import RunContext, get_current_context
from ...core.domain.mac import MacPriorityPolicy, default_mac_priority
from ...core.constants import DEFAULT_ROLE_COLOR
from ...core.exceptions import NetBoxError, format_error_for_log

logger = logging.getLogger(__name__)


@dataclass
class SyncOptions:
    """
    Параметры регистрации.

    Attributes:
        server_role: Роль обычного сервера
        blade_role: Роль блейда
        chassis_role: Роль шасси
        role_color: Цвет автосоздаваемых ролей
        module_profiles: Категория → имя module-type-profile
        sync_module_attributes: Передавать атрибуты модулей в module-type
        create_prefixes: Создавать префиксы для IP-адресов
        device_update_mode: patch (только изменения) или replace (PUT целиком)
    """
    server_role: str = "Server"
    blade_role: str = "Blade"
    chassis_role: str = "Chassis"
    role_color: str = DEFAULT_ROLE_COLOR
    module_profiles: Dict[str, str] = field(default_factory=dict)
    sync_module_attributes: bool = True
    create_prefixes: bool = True
    device_update_mode: str = "patch"

    @classmethod
    def from_config(cls, cfg) -> "SyncOptions":
        """Создаёт опции из Config."""
        modules = cfg.get("modules") or {}
        return cls(
            server_role=cfg.roles.server or "Server",
            blade_role=cfg.roles.blade or "Blade",
            chassis_role=cfg.roles.chassis or "Chassis",
            role_color=cfg.roles.color or DEFAULT_ROLE_COLOR,
            module_profiles=dict(modules.get("profiles") or {}),
            sync_module_attributes=bool(modules.get("sync_attributes", True)),
            create_prefixes=bool(cfg.ip.create_prefixes),
            device_update_mode=cfg.device.update_mode or "patch",
        )


class SyncStats:
    """
    Инициализация stats/details для sync-операций.

    Example:
        s = SyncStats("created", "updated", "skipped", "failed")
        stats, details = s.stats, s.details
        # stats = {"created": 0, "updated": 0, ...}
        # details = {"create": [], "update": [], "skip": []}
    """

    _DETAIL_KEY_MAP = {
        "created": "create",
        "updated": "update",
        "skipped": "skip",
    }

    def __init__(self, *operations: str):
        """
        Args:
            *operations: Ключи для stats (created, updated, skipped, failed)
        """
        operations = operations or ("created", "updated", "skipped", "failed")
        self.stats: Dict[str, int] = {op: 0 for op in operations}
        self.details: Dict[str, list] = {}
        for op in operations:
            detail_key = self._DETAIL_KEY_MAP.get(op)
            if detail_key:
                self.details[detail_key] = []

    def add(self, operation: str, item: Any = None) -> None:
        """Увеличивает счётчик и добавляет элемент в details."""
        self.stats[operation] = self.stats.get(operation, 0) + 1
        detail_key = self._DETAIL_KEY_MAP.get(operation)
        if item is not None and detail_key in self.details:
            self.details[detail_key].append(item)

    def result(self) -> Dict[str, Any]:
        """Возвращает stats с вложенным details."""
        result = dict(self.stats)
        if self.details:
            result["details"] = dict(self.details)
        return result


@dataclass
class PlannedAction:
    """
    Изменение, которое было бы выполнено без dry-run.

    Attributes:
        collection: Коллекция NetBox
        operation: create / update / replace
        description: Описание для человека
        payload: Тело запроса
        object_id: ID объекта (для update/replace)
    """
    collection: str
    operation: str
    description: str
    payload: Dict[str, Any] = field(default_factory=dict)
    object_id: Optional[int] = None


class SyncBase:
    """
    Базовый класс для синхронизации с NetBox.

    Все записи идут через _create/_update/_replace: в режиме dry-run
    они только логируют [DRY-RUN] и копят PlannedAction.
    Объекты, «созданные» в dry-run, получают отрицательный ID;
    поиск по такому ID в NetBox не выполняется.
    """

    def __init__(
        self,
        client,
        dry_run: bool = False,
        context: Optional[RunContext] = None,
        options: Optional[SyncOptions] = None,
        mac_priority: Optional[MacPriorityPolicy] = None,
    ):
        """
        Инициализация синхронизатора.

        Args:
            client: NetBox клиент (get/create/update/replace)
            dry_run: Режим симуляции (ничего не меняет)
            context: Контекст выполнения (если None, используется глобальный)
            options: Параметры регистрации
            mac_priority: Политика приоритетов владельца MAC
        """
        self.client = client
        self.ctx = context or get_current_context()
        self.dry_run = dry_run
        self.options = options or SyncOptions()
        self.mac_priority = mac_priority or default_mac_priority

        self.actions: List[PlannedAction] = []
        self._next_planned_id = -1
        # Кэш справочников на время запуска: (kind, key) -> ResolvedRef
        self._references: Dict[tuple, Any] = {}

    def _log_prefix(self) -> str:
        """Возвращает префикс для логов с run_id."""
        if self.ctx:
            return f"[{self.ctx.run_id}] "
        return ""

    # ==================== ПОИСК ====================

    @staticmethod
    def _is_planned(object_id: Any) -> bool:
        """ID объекта, который существует только в плане dry-run."""
        return isinstance(object_id, int) and object_id < 0

    def _find_all(self, collection: str, **filters: Any) -> List[Dict[str, Any]]:
        """
        Ищет объекты по фильтрам.

        Если фильтр ссылается на объект из плана dry-run, NetBox не опрашивается.
        """
        if any(self._is_planned(v) for v in filters.values()):
            return []
        return self.client.get(collection, **filters)["results"]

    def _find(
        self,
        collection: str,
        match: Optional[Callable[[Dict[str, Any]], bool]] = None,
        **filters: Any,
    ) -> Optional[Dict[str, Any]]:
        """
        Находит первый объект, действительно подходящий под запрос.

        NetBox иногда отдаёт строки, не совпадающие с фильтром (неизвестный
        параметр фильтра игнорируется). Такие строки отбрасываются, и объект
        считается не найденным.

        Args:
            collection: Коллекция
            match: Проверка строки на стороне клиента
            **filters: Параметры фильтра NetBox

        Returns:
            dict или None
        """
        for row in self._find_all(collection, **filters):
            if match is None or match(row):
                return row
            logger.debug(
                f"{self._log_prefix()}{collection}: строка id={row.get('id')} "
                f"не соответствует фильтру {filters}, пропущена"
            )
        return None

    @staticmethod
    def _ref_id(value: Any) -> Optional[int]:
        """ID из вложенной ссылки NetBox ({"id": 1, ...} или 1)."""
        if value is None:
            return None
        if isinstance(value, dict):
            return value.get("id")
        if isinstance(value, int):
            return value
        return getattr(value, "id", None)

    @staticmethod
    def _choice_value(value: Any) -> Any:
        """Значение choice-поля NetBox ({"value": "active", ...} или "active")."""
        if isinstance(value, dict):
            return value.get("value")
        return value

    # ==================== ЗАПИСЬ ====================

    def _plan(self, collection: str, operation: str, payload: Payload, description: str,
              object_id: Optional[int] = None) -> None:
        """Записывает действие dry-run и логирует его."""
        data = payload.to_dict()
        self.actions.append(PlannedAction(
            collection=collection,
            operation=operation,
            description=description,
            payload=data,
            object_id=object_id,
        ))
        logger.info(f"{self._log_prefix()}[DRY-RUN] {description}")

    def _create(self, payload: Payload, description: str) -> Dict[str, Any]:
        """
        Создаёт объект (или планирует создание в dry-run).

        Returns:
            dict: Созданный объект; в dry-run тело с отрицательным id
        """
        collection = payload.collection
        if self.dry_run:
            self._plan(collection, "create", payload, description)
            planned_id = self._next_planned_id
            self._next_planned_id -= 1
            return {"id": planned_id, **payload.to_dict()}

        result = self.client.create(collection, payload)
        logger.info(f"{self._log_prefix()}{description} (id={result.get('id')})")
        return result

    def _update(self, object_id: int, payload: Payload, description: str) -> Dict[str, Any]:
        """Частичное обновление (PATCH) или его план в dry-run."""
        collection = payload.collection
        if self.dry_run or self._is_planned(object_id):
            self._plan(collection, "update", payload, description, object_id)
            return {"id": object_id, **payload.to_dict()}

        result = self.client.update(collection, object_id, payload)
        logger.info(f"{self._log_prefix()}{description}")
        return result

    def _replace(self, object_id: int, payload: Payload, description: str) -> Dict[str, Any]:
        """Полная замена (PUT) или её план в dry-run."""
        collection = payload.collection
        if self.dry_run or self._is_planned(object_id):
            self._plan(collection, "replace", payload, description, object_id)
            return {"id": object_id, **payload.to_dict()}

        result = self.client.replace(collection, object_id, payload)
        logger.info(f"{self._log_prefix()}{description}")
        return result

    # ==================== ОБРАБОТКА ОШИБОК ====================

    def _safe_netbox_call(
        self,
        operation: str,
        fn: Callable,
        *args,
        default: Any = None,
        log_level: str = "warning",
        **kwargs,
    ) -> Any:
        """
        Выполняет NetBox вызов для необязательного объекта.

        Ошибка NetBox логируется, запуск продолжается.

        Args:
            operation: Описание операции (для лога)
            fn: Функция для вызова
            *args: Аргументы функции
            default: Значение при ошибке
            log_level: Уровень логирования (warning/error)
            **kwargs: Именованные аргументы функции

        Returns:
            Результат fn() или default при ошибке
        """
        log_fn = getattr(logger, log_level)
        try:
            return fn(*args, **kwargs)
        except NetBoxError as e:
            log_fn(f"{self._log_prefix()}Ошибка {operation}: {format_error_for_log(e)}")
            return default
