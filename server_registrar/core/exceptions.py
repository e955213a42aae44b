"""
Типизированные исключения для Server Registrar.

Иерархия:
    RegistrarError (базовый)
    ├── ObserverError (сбор фактов с сервера)
    │   └── ObserverUnavailableError (утилита для категории недоступна)
    ├── NetBoxError (NetBox API)
    │   ├── NetBoxConnectionError (подключение к API)
    │   ├── NetBoxAPIError (ошибка API)
    │   └── NetBoxValidationError (валидация данных, HTTP 400)
    ├── ReconcileError (фатальная ошибка регистрации, прерывает запуск)
    │   ├── MissingReferenceError (нет site / role / device-type)
    │   ├── HostnameConventionError (имя блейда не по шаблону)
    │   ├── BayHierarchyError (device-type не поддерживает bays)
    │   └── DeviceSyncError (не удалось создать/обновить устройство)
    └── ConfigError (конфигурация)

Пример использования:
    from server_registrar.core.exceptions import ReconcileError

    try:
        sync.register(snapshot)
    except ReconcileError as e:
        logger.error(f"Регистрация прервана: {e}")
"""

from typing import Optional, Any


class RegistrarError(Exception):
    """
    Базовое исключение для всех ошибок Server Registrar.

    Attributes:
        message: Описание ошибки
        details: Дополнительные детали (dict)
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def to_dict(self) -> dict:
        """Сериализация для логов/отчётов."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# === Observer Errors ===

class ObserverError(RegistrarError):
    """
    Ошибка при сборе фактов о сервере.

    Attributes:
        category: Категория оборудования (CPU, Memory, ...) если применимо
    """

    def __init__(
        self,
        message: str,
        category: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.category = category
        details = details or {}
        if category:
            details["category"] = category
        super().__init__(message, details)


class ObserverUnavailableError(ObserverError):
    """
    Утилита для опроса категории недоступна (нет dmidecode, smartctl и т.п.).

    Категория пропускается целиком, остальные продолжают работу.

    Пример:
        raise ObserverUnavailableError("nvidia-smi не найден", category="GPU")
    """
    pass


# === NetBox Errors ===

class NetBoxError(RegistrarError):
    """
    Базовая ошибка NetBox API.

    Attributes:
        url: URL NetBox
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.url = url
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, details)


class NetBoxConnectionError(NetBoxError):
    """
    Ошибка подключения к NetBox API.

    Пример:
        raise NetBoxConnectionError("Connection refused", url="https://netbox.local")
    """
    pass


class NetBoxAPIError(NetBoxError):
    """
    Ошибка при вызове NetBox API.

    Attributes:
        status_code: HTTP код ответа
        endpoint: API endpoint
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.status_code = status_code
        self.endpoint = endpoint
        details = details or {}
        if status_code:
            details["status_code"] = status_code
        if endpoint:
            details["endpoint"] = endpoint
        super().__init__(message, url, details)


class NetBoxValidationError(NetBoxAPIError):
    """
    NetBox отклонил данные (HTTP 400).

    Attributes:
        errors: Тело ответа NetBox с описанием ошибок по полям

    Пример:
        raise NetBoxValidationError(
            "Bad request",
            endpoint="device-bays",
            errors={"device": ["Device type does not support device bays"]},
        )
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        endpoint: Optional[str] = None,
        errors: Optional[Any] = None,
        details: Optional[dict] = None,
    ):
        self.errors = errors
        details = details or {}
        if errors:
            details["errors"] = str(errors)[:300]
        super().__init__(message, url, status_code=400, endpoint=endpoint, details=details)


# === Reconcile Errors ===

class ReconcileError(RegistrarError):
    """
    Фатальная ошибка регистрации.

    Прерывает весь запуск: следующие шаги зависят от результата.
    """
    pass


class MissingReferenceError(ReconcileError):
    """
    Обязательный справочный объект отсутствует в NetBox.

    Attributes:
        kind: Тип объекта (site, role, device-type)
        key: Значение, по которому искали

    Пример:
        raise MissingReferenceError("Сайт не найден", kind="site", key="office")
    """

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.kind = kind
        self.key = key
        details = details or {}
        if kind:
            details["kind"] = kind
        if key:
            details["key"] = key
        super().__init__(message, details)


class HostnameConventionError(ReconcileError):
    """
    Имя блейда не соответствует шаблону <prefix>b<номер>.

    Attributes:
        hostname: Имя устройства
    """

    def __init__(
        self,
        message: str,
        hostname: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.hostname = hostname
        details = details or {}
        if hostname:
            details["hostname"] = hostname
        super().__init__(message, details)


class BayHierarchyError(ReconcileError):
    """
    NetBox отклонил создание или заполнение bay.

    Обычно значит, что у device-type не выставлен subdevice_role
    (parent для шасси, child для блейда). Сообщение называет тип,
    который нужно поправить.

    Attributes:
        device_type: Модель device-type, которую нужно настроить
    """

    def __init__(
        self,
        message: str,
        device_type: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.device_type = device_type
        details = details or {}
        if device_type:
            details["device_type"] = device_type
        super().__init__(message, details)


class DeviceSyncError(ReconcileError):
    """
    Не удалось создать или обновить запись устройства.

    Attributes:
        device: Имя устройства
    """

    def __init__(
        self,
        message: str,
        device: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.device = device
        details = details or {}
        if device:
            details["device"] = device
        super().__init__(message, details)


# === Config Errors ===

class ConfigError(RegistrarError):
    """
    Ошибка конфигурации.

    Attributes:
        config_file: Путь к файлу конфигурации
        key: Ключ конфигурации с ошибкой

    Пример:
        raise ConfigError("Missing required field", config_file="config.yaml", key="netbox.url")
    """

    def __init__(
        self,
        message: str,
        config_file: Optional[str] = None,
        key: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.config_file = config_file
        self.key = key
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        if key:
            details["key"] = key
        super().__init__(message, details)


# === Utility Functions ===

def format_error_for_log(error: Exception) -> str:
    """
    Форматирует ошибку для вывода в лог.

    Args:
        error: Исключение

    Returns:
        str: Отформатированная строка ошибки
    """
    if isinstance(error, RegistrarError):
        return str(error)
    return f"{error.__class__.__name__}: {error}"
