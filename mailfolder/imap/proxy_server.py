"""ProxyServer — answers folder commands over a Unix socket by driving IMAPClient.

Protocol: one newline-terminated command per line, one response line back.
    save_message <path> <folder>   →  OK
    folder_status <folder>         →  OK {"total": n, "unread": m}
    list_folders                   →  OK ["INBOX", ...]
Failures answer ``ERR <reason>``.
"""
from __future__ import annotations

import json
import logging
import os
import socketserver
from pathlib import Path

from imapclient import IMAPClient

from mailfolder.imap.connection import connect, list_folders
from mailfolder.imap.proxy_client import ERR, OK
from mailfolder.models.account import Account

logger = logging.getLogger(__name__)


class CommandError(Exception):
    pass


def handle_command(client: IMAPClient, line: str) -> str:
    """Run one protocol command against *client* and return the response line."""
    command, _, args = line.strip().partition(" ")
    try:
        if command == "save_message":
            return _save_message(client, args)
        if command == "folder_status":
            return _folder_status(client, args)
        if command == "list_folders":
            return f"{OK} {json.dumps(list_folders(client))}"
        raise CommandError(f"unknown command: {command!r}")
    except CommandError as exc:
        logger.warning("Rejected %r: %s", line.strip(), exc)
        return f"{ERR} {exc}"
    except Exception as exc:
        logger.error("Command %r failed: %s", line.strip(), exc)
        return f"{ERR} {exc}"


def _save_message(client: IMAPClient, args: str) -> str:
    path, _, folder = args.partition(" ")
    if not path or not folder:
        raise CommandError("usage: save_message <path> <folder>")
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise CommandError(f"cannot read {path}: {exc}") from exc
    client.append(folder, raw, flags=(b"\\Seen",))
    logger.info("Appended %s to %s (%d bytes)", path, folder, len(raw))
    return OK


def _folder_status(client: IMAPClient, folder: str) -> str:
    if not folder:
        raise CommandError("usage: folder_status <folder>")
    status = client.folder_status(folder, [b"MESSAGES", b"UNSEEN"])
    total = int(status.get(b"MESSAGES", 0))
    unread = int(status.get(b"UNSEEN", 0))
    return f"{OK} {json.dumps({'total': total, 'unread': unread})}"


class _ProxyRequestHandler(socketserver.StreamRequestHandler):
    server: "ProxyServer"

    def handle(self) -> None:
        for raw in self.rfile:
            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            if not line:
                continue
            response = handle_command(self.server.imap, line)
            self.wfile.write((response + "\n").encode("utf-8"))
            self.wfile.flush()


class ProxyServer(socketserver.UnixStreamServer):
    """Serves one connection at a time; the IMAP session is shared between them."""

    def __init__(self, socket_path: str | Path, client: IMAPClient) -> None:
        self.imap = client
        self.socket_path = Path(socket_path)
        _remove_stale_socket(self.socket_path)
        super().__init__(str(self.socket_path), _ProxyRequestHandler)

    def server_close(self) -> None:
        super().server_close()
        _remove_stale_socket(self.socket_path)


def _remove_stale_socket(path: Path) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


def serve(account: Account, socket_path: str | Path) -> None:
    """Log in to *account* and answer proxy commands until interrupted."""
    client = connect(account)
    server = ProxyServer(socket_path, client)
    logger.info("IMAP proxy for %s listening on %s", account, socket_path)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Proxy interrupted, shutting down")
    finally:
        server.server_close()
        try:
            client.logout()
        except Exception as exc:
            logger.debug("Logout failed: %s", exc)
