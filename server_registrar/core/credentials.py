"""
Получение NetBox API токена.

Источники (по приоритету):
1. Переменная окружения NETBOX_TOKEN
2. Системное хранилище (keyring: Secret Service / Keychain / Credential Manager)
3. Значение из config.yaml
"""

import os
import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "server_registrar"
KEYRING_USERNAME = "netbox_token"


def get_netbox_token(config_token: Optional[str] = None) -> Optional[str]:
    """
    Получает NetBox API токен из безопасного хранилища.

    Args:
        config_token: Токен из config.yaml (fallback)

    Returns:
        str: API токен или None

    Example:
        # Из переменной окружения
        export NETBOX_TOKEN="your-token"

        # Или сохранить в системное хранилище
        keyring set server_registrar netbox_token

        token = get_netbox_token(config.netbox.token)
    """
    env_token = os.getenv("NETBOX_TOKEN")
    if env_token:
        logger.debug("NetBox токен получен из переменной окружения NETBOX_TOKEN")
        return env_token.strip()

    try:
        stored_token = keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except KeyringError as e:
        logger.debug(f"Системное хранилище недоступно: {e}")
        stored_token = None

    if stored_token:
        logger.debug("NetBox токен получен из системного хранилища")
        return stored_token.strip()

    if config_token:
        logger.debug("NetBox токен получен из config.yaml")
        return config_token.strip()

    logger.warning("NetBox токен не найден ни в одном источнике")
    return None
