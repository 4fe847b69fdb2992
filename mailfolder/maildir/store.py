"""MessageStore — enumerates the message files of a maildir."""
from __future__ import annotations

import logging
import os

from mailfolder.models.message import Message

logger = logging.getLogger(__name__)

MESSAGE_SUBDIRS = ("cur", "new")


class MessageStore:
    """
    Stateless lister: one Message per non-directory entry found directly
    under cur/ and new/.  Missing or unreadable directories yield nothing.
    """

    def entries(self, directory: str) -> list[str]:
        """Return the paths of the non-directory entries directly in *directory*."""
        try:
            with os.scandir(directory) as it:
                return [entry.path for entry in it if not entry.is_dir()]
        except OSError as exc:
            logger.debug("Cannot list %s: %s", directory, exc)
            return []

    def messages(self, maildir_path: str) -> list[Message]:
        result: list[Message] = []
        for sub in MESSAGE_SUBDIRS:
            for path in self.entries(os.path.join(maildir_path, sub)):
                result.append(Message(path))
        return result
