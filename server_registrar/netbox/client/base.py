"""
Базовый класс NetBox клиента.

Инициализация подключения и общий CRUD поверх pynetbox:
    get(collection, **filters)          → {"count": N, "results": [...]}
    create(collection, body)            → dict
    update(collection, id, body)        → dict (PATCH, частичное обновление)
    replace(collection, id, body)       → dict (PUT, полная замена)

Записи возвращаются обычными словарями (dict(record)),
ошибки pynetbox/requests переводятся в NetBoxError.
"""

import os
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Tuple, Union

import pynetbox
import requests

from ..payloads import Payload
from ...core.credentials import get_netbox_token
from ...core.exceptions import (
    NetBoxAPIError,
    NetBoxConnectionError,
    NetBoxValidationError,
)

logger = logging.getLogger(__name__)

# Коллекция → (приложение pynetbox, endpoint pynetbox)
COLLECTIONS: Dict[str, Tuple[str, str]] = {
    "sites": ("dcim", "sites"),
    "device-roles": ("dcim", "device_roles"),
    "device-types": ("dcim", "device_types"),
    "devices": ("dcim", "devices"),
    "device-bays": ("dcim", "device_bays"),
    "manufacturers": ("dcim", "manufacturers"),
    "module-type-profiles": ("dcim", "module_type_profiles"),
    "module-types": ("dcim", "module_types"),
    "module-bays": ("dcim", "module_bays"),
    "modules": ("dcim", "modules"),
    "interfaces": ("dcim", "interfaces"),
    "mac-addresses": ("dcim", "mac_addresses"),
    "ip-addresses": ("ipam", "ip_addresses"),
    "prefixes": ("ipam", "prefixes"),
}

Body = Union[Payload, Dict[str, Any]]


class NetBoxClientBase:
    """
    Базовый класс для NetBox клиента.

    Отвечает за подключение к NetBox API и общий CRUD.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        ssl_verify: bool = True,
        timeout: int = 30,
    ):
        """
        Инициализация клиента NetBox.

        Токен ищется в следующем порядке:
        1. get_netbox_token(): env NETBOX_TOKEN, keyring
        2. Параметр token (из CLI или config.yaml)

        Args:
            url: URL NetBox сервера (или env NETBOX_URL)
            token: API токен (опционально)
            ssl_verify: Проверять SSL сертификат
            timeout: Таймаут запросов PUT в секундах

        Raises:
            ValueError: URL или токен не указаны
        """
        self.url = url or os.environ.get("NETBOX_URL")
        self._token = get_netbox_token(config_token=token)
        self.timeout = timeout

        if not self.url:
            raise ValueError(
                "NetBox URL не указан. Укажите url или установите NETBOX_URL"
            )
        if not self._token:
            raise ValueError(
                "NetBox токен не указан. Установите NETBOX_TOKEN, "
                "сохраните токен в keyring или добавьте netbox.token в config.yaml"
            )

        self.api = pynetbox.api(self.url, token=self._token)

        if not ssl_verify:
            session = requests.Session()
            session.verify = False
            self.api.http_session = session

        logger.info(f"NetBox клиент инициализирован: {self.url}")

    # ==================== ВСПОМОГАТЕЛЬНЫЕ ====================

    def _endpoint(self, collection: str):
        """Возвращает pynetbox Endpoint для коллекции."""
        try:
            app_name, endpoint_name = COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Неизвестная коллекция NetBox: {collection}")
        return getattr(getattr(self.api, app_name), endpoint_name)

    @staticmethod
    def _serialize(body: Body) -> Dict[str, Any]:
        """Тело запроса в dict (единственное место сериализации)."""
        if isinstance(body, Payload):
            return body.to_dict()
        return dict(body)

    @staticmethod
    def _record_to_dict(record: Any) -> Dict[str, Any]:
        """pynetbox Record → dict."""
        if record is None:
            return {}
        if isinstance(record, dict):
            return record
        return dict(record)

    @contextmanager
    def _api_errors(self, collection: str) -> Iterator[None]:
        """Переводит ошибки pynetbox/requests в NetBoxError."""
        try:
            yield
        except pynetbox.RequestError as e:
            status_code = getattr(getattr(e, "req", None), "status_code", None)
            if status_code == 400:
                raise NetBoxValidationError(
                    f"NetBox отклонил запрос к {collection}",
                    url=self.url,
                    endpoint=collection,
                    errors=getattr(e, "error", None),
                ) from e
            raise NetBoxAPIError(
                f"Ошибка NetBox API ({collection}): {e}",
                url=self.url,
                status_code=status_code,
                endpoint=collection,
            ) from e
        except pynetbox.ContentError as e:
            raise NetBoxAPIError(
                f"Некорректный ответ NetBox ({collection}): {e}",
                url=self.url,
                endpoint=collection,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetBoxConnectionError(
                f"Нет подключения к NetBox: {e}",
                url=self.url,
            ) from e

    # ==================== CRUD ====================

    def get(self, collection: str, **filters: Any) -> Dict[str, Any]:
        """
        Ищет объекты по фильтрам.

        Args:
            collection: Коллекция (devices, interfaces, ...)
            **filters: Параметры фильтра NetBox (name=..., device_id=...)

        Returns:
            dict: {"count": N, "results": [dict, ...]}
        """
        with self._api_errors(collection):
            records = [self._record_to_dict(r) for r in self._endpoint(collection).filter(**filters)]
        logger.debug(f"GET {collection} {filters}: {len(records)}")
        return {"count": len(records), "results": records}

    def create(self, collection: str, body: Body) -> Dict[str, Any]:
        """
        Создаёт объект.

        Returns:
            dict: Созданный объект (с id)
        """
        data = self._serialize(body)
        with self._api_errors(collection):
            record = self._endpoint(collection).create(data)
        logger.debug(f"POST {collection}: {data}")
        return self._record_to_dict(record)

    def update(self, collection: str, object_id: int, body: Body) -> Dict[str, Any]:
        """
        Частично обновляет объект (PATCH).

        Returns:
            dict: Обновлённый объект
        """
        data = self._serialize(body)
        with self._api_errors(collection):
            records = self._endpoint(collection).update([{"id": object_id, **data}])
        logger.debug(f"PATCH {collection}/{object_id}: {data}")
        return self._record_to_dict(records[0]) if records else {}

    def replace(self, collection: str, object_id: int, body: Body) -> Dict[str, Any]:
        """
        Полностью заменяет объект (PUT).

        pynetbox не умеет PUT, поэтому запрос идёт через его HTTP сессию.

        Returns:
            dict: Заменённый объект
        """
        data = self._serialize(body)
        endpoint = self._endpoint(collection)
        url = f"{endpoint.url}/{object_id}/"
        headers = {
            "Authorization": f"Token {self._token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            response = self.api.http_session.put(url, json=data, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise NetBoxConnectionError(f"Нет подключения к NetBox: {e}", url=self.url) from e

        if response.status_code == 400:
            raise NetBoxValidationError(
                f"NetBox отклонил запрос к {collection}",
                url=self.url,
                endpoint=collection,
                errors=response.text,
            )
        if not response.ok:
            raise NetBoxAPIError(
                f"Ошибка NetBox API ({collection}): {response.text[:200]}",
                url=self.url,
                status_code=response.status_code,
                endpoint=collection,
            )

        logger.debug(f"PUT {collection}/{object_id}: {data}")
        return response.json()
