"""IMAP connection factory used by the proxy server."""
from __future__ import annotations

import logging

from imapclient import IMAPClient

from mailfolder.models.account import Account
from mailfolder.utils.keyring_store import get_password

logger = logging.getLogger(__name__)


class IMAPConnectionError(Exception):
    pass


def connect(account: Account, timeout: int = 30) -> IMAPClient:
    """
    Create an IMAPClient for the given account and log in with the
    password stored in the keyring.
    Raises IMAPConnectionError on failure.
    """
    password = get_password(account.username, account.host)
    if password is None:
        raise IMAPConnectionError(
            f"No password found for {account.username}@{account.host}. "
            "Run `mailfolder proxy` interactively once to store it."
        )

    try:
        client = IMAPClient(
            host=account.host,
            port=account.port,
            ssl=account.use_ssl,
            timeout=timeout,
        )
    except Exception as exc:
        raise IMAPConnectionError(f"Cannot connect to {account.host}:{account.port}: {exc}") from exc

    try:
        client.login(account.username, password)
    except Exception as exc:
        raise IMAPConnectionError(f"Authentication failed for {account.username}: {exc}") from exc

    logger.info("Authenticated %s@%s via password", account.username, account.host)
    return client


def list_folders(client: IMAPClient) -> list[str]:
    """Return a flat, sorted list of all folder names on the server."""
    folders = []
    for flags, delimiter, name in client.list_folders():
        if isinstance(name, bytes):
            name = name.decode("utf-8", errors="replace")
        folders.append(name)
    return sorted(folders)
