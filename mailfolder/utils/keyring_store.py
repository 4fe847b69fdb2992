"""Credential storage for the proxy's IMAP password via the system keyring."""
from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "mailfolder"


def _service(host: str) -> str:
    return f"{SERVICE_NAME}:{host}"


def set_password(username: str, host: str, password: str) -> bool:
    """Store password in system keyring. Returns True on success."""
    try:
        import keyring
        keyring.set_password(_service(host), username, password)
        return True
    except Exception as exc:
        logger.warning("keyring set failed: %s", exc)
        return False


def get_password(username: str, host: str) -> str | None:
    """Retrieve password from system keyring. Returns None if not found."""
    try:
        import keyring
        return keyring.get_password(_service(host), username)
    except Exception as exc:
        logger.warning("keyring get failed: %s", exc)
        return None


def delete_password(username: str, host: str) -> bool:
    try:
        import keyring
        keyring.delete_password(_service(host), username)
        return True
    except Exception as exc:
        logger.warning("keyring delete failed: %s", exc)
        return False
