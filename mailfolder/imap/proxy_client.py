"""ProxyClient — line-oriented request/response channel to the IMAP proxy.

One command per connection: the client writes a single newline-terminated
line and reads back a single line.  Answers starting with ``ERR`` are
failures; only ``OK``, optionally followed by a JSON payload, is success.
"""
from __future__ import annotations

import json
import logging
import socket
from pathlib import Path
from typing import Any

import mailfolder.config as cfg

logger = logging.getLogger(__name__)

OK = "OK"
ERR = "ERR"


class ProxyError(Exception):
    pass


class ProxyClient:
    def __init__(
        self,
        socket_path: str | Path | None = None,
        timeout: float | None = None,
    ) -> None:
        self._socket_path = Path(socket_path) if socket_path else cfg.PROXY_SOCKET_PATH
        self._timeout = timeout if timeout is not None else cfg.PROXY_TIMEOUT_SECONDS

    @property
    def socket_path(self) -> Path:
        return self._socket_path

    def send(self, command: str) -> str:
        """
        Send one command line and return the response line (without newline).
        Raises ProxyError if the proxy cannot be reached or closes without answering.
        """
        if not command.endswith("\n"):
            command += "\n"
        logger.debug("proxy ← %s", command.rstrip("\n"))
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
                sock.settimeout(self._timeout)
                sock.connect(str(self._socket_path))
                sock.sendall(command.encode("utf-8"))
                with sock.makefile("rb") as reader:
                    raw = reader.readline()
        except OSError as exc:
            raise ProxyError(f"Cannot talk to proxy at {self._socket_path}: {exc}") from exc

        if not raw:
            raise ProxyError("Proxy closed the connection without answering")
        response = raw.decode("utf-8", errors="replace").rstrip("\r\n")
        logger.debug("proxy → %s", response)
        return response

    def request(self, command: str) -> str:
        """Send *command* and return the payload after OK; anything else raises ProxyError."""
        response = self.send(command)
        status, _, payload = response.partition(" ")
        if status == ERR:
            raise ProxyError(payload or "Proxy reported an error")
        if status != OK:
            raise ProxyError(f"Unexpected proxy answer: {response!r}")
        return payload

    # ── Commands ──────────────────────────────────────────────────────────────

    def save_message(self, source_path: str, folder: str) -> None:
        self.request(f"save_message {source_path} {folder}")
        logger.info("Saved %s to remote folder %s", source_path, folder)

    def folder_status(self, folder: str) -> tuple[int, int]:
        """Return (total, unread) for a remote folder."""
        data = _decode_payload(self.request(f"folder_status {folder}"))
        try:
            return int(data["total"]), int(data["unread"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ProxyError(f"Malformed folder_status answer: {data!r}") from exc

    def list_folders(self) -> list[str]:
        data = _decode_payload(self.request("list_folders"))
        if not isinstance(data, list):
            raise ProxyError(f"Malformed list_folders answer: {data!r}")
        return [str(name) for name in data]


def _decode_payload(payload: str) -> Any:
    try:
        return json.loads(payload)
    except ValueError as exc:
        raise ProxyError(f"Proxy answer is not JSON: {payload!r}") from exc
