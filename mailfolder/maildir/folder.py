"""MaildirFolder — one mail folder, backed by a local maildir or a remote IMAP folder.

Local folders are counted from disk and cached against the modification time
of cur/ and new/, so a quiescent folder is counted without touching the
directory listings.  Remote folders never touch the filesystem: their counts
are pushed in with set_counts() and their saves go through the IMAP proxy.
"""
from __future__ import annotations

import logging
import os
import random
import socket
import threading
import time
from enum import Enum

from mailfolder.imap.proxy_client import ProxyClient
from mailfolder.maildir.store import MessageStore
from mailfolder.models.message import INFO_SEPARATOR, Message
from mailfolder.utils.files import deliver_file, is_maildir, mtime_ns

logger = logging.getLogger(__name__)

NEVER_CACHED = -1
RANDOM_RANGE = 999


class Backend(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"

    @classmethod
    def for_path(cls, path: str) -> "Backend":
        """A bare name (no leading separator) is a remote folder."""
        if path and not path.startswith(os.sep):
            return cls.REMOTE
        return cls.LOCAL


class MaildirFolder:
    def __init__(
        self,
        path: str,
        backend: Backend | None = None,
        proxy: ProxyClient | None = None,
        store: MessageStore | None = None,
    ) -> None:
        self._path = str(path)
        self._backend = backend if backend is not None else Backend.for_path(self._path)
        self._proxy = proxy
        self._store = store or MessageStore()
        self._lock = threading.Lock()
        self._issued: set[str] = set()
        self._issued_second = 0

        self.cached_mtime: int = NEVER_CACHED
        self.cached_total: int = 0
        self.cached_unread: int = 0

    def __repr__(self) -> str:
        return f"MaildirFolder({self._path!r}, {self._backend.value})"

    @property
    def path(self) -> str:
        return self._path

    @property
    def backend(self) -> Backend:
        return self._backend

    def is_local(self) -> bool:
        return self._backend is Backend.LOCAL

    def is_remote(self) -> bool:
        return self._backend is Backend.REMOTE

    # ── Counts ────────────────────────────────────────────────────────────────

    def unread_count(self) -> int:
        self.refresh_cache()
        return self.cached_unread

    def total_count(self) -> int:
        self.refresh_cache()
        return self.cached_total

    def last_modified(self) -> int:
        if self.is_remote():
            return self.cached_mtime
        return max(
            mtime_ns(os.path.join(self._path, "cur")),
            mtime_ns(os.path.join(self._path, "new")),
        )

    def refresh_cache(self) -> None:
        """Re-count the folder if cur/ or new/ changed since the last count."""
        if self.is_remote():
            return
        with self._lock:
            last_mod = self.last_modified()
            if last_mod == self.cached_mtime:
                return

            messages = self._store.messages(self._path)
            self.cached_mtime = last_mod
            self.cached_total = len(messages)
            self.cached_unread = sum(1 for m in messages if m.is_new())
            logger.debug(
                "Recounted %s: %d total, %d unread",
                self._path, self.cached_total, self.cached_unread,
            )

    def set_counts(self, total: int, unread: int) -> None:
        """Store counts obtained elsewhere (the proxy) for a remote folder."""
        if self.is_local():
            raise ValueError(f"{self._path} is a local folder; its counts come from disk")
        with self._lock:
            self.cached_total = total
            self.cached_unread = min(unread, total)

    def bump_mtime(self) -> None:
        """Mark a remote folder's counts as stale."""
        with self._lock:
            self.cached_mtime += 1

    # ── Messages ──────────────────────────────────────────────────────────────

    def list_messages(self) -> list[Message]:
        """
        Every message on disk, in no particular order.  Remote folders are
        listed by the proxy, not here, so they return an empty list.
        """
        if self.is_remote():
            return []
        return self._store.messages(self._path)

    def generate_filename(self, is_new: bool) -> str:
        """
        Return a full path for a new message file, under new/ when *is_new*
        and cur/ otherwise.  Returns "" if this folder is not a maildir.
        """
        if not is_maildir(self._path):
            return ""

        directory = os.path.join(self._path, "new" if is_new else "cur")
        flag = "N" if is_new else "S"
        hostname = _maildir_hostname()

        while True:
            now = int(time.time())
            if now != self._issued_second:
                # names from an earlier second can no longer be generated again
                self._issued.clear()
                self._issued_second = now
            name = f"{now}.{hostname}{random.randrange(RANDOM_RANGE)}{INFO_SEPARATOR}{flag}"
            candidate = os.path.join(directory, name)
            if candidate in self._issued or os.path.lexists(candidate):
                continue
            self._issued.add(candidate)
            return candidate

    def save_message(self, message: Message) -> bool:
        """
        Store a copy of *message* in this folder.

        Local folders get a byte copy staged in tmp/ and renamed into cur/,
        marked as seen; False is returned if this is not a maildir or the copy fails.  Remote folders
        hand the file to the proxy, which raises ProxyError on failure.
        """
        if self.is_remote():
            self._proxy_client().save_message(message.path, self._path)
            return True

        dest = self.generate_filename(is_new=False)
        if not dest:
            logger.warning("Cannot save to %s: not a maildir", self._path)
            return False
        if not deliver_file(message.path, os.path.join(self._path, "tmp"), dest):
            return False
        logger.info("Saved %s → %s", message.path, dest)
        return True

    def _proxy_client(self) -> ProxyClient:
        if self._proxy is None:
            self._proxy = ProxyClient()
        return self._proxy


def _maildir_hostname() -> str:
    return socket.gethostname().replace("/", "\\057").replace(":", "\\072")
