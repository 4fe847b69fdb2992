"""Message dataclass — a handle on one maildir message file (no parsing)."""
from __future__ import annotations

import os
from dataclasses import dataclass

INFO_SEPARATOR = ":2,"
SEEN_FLAG = "S"


@dataclass(frozen=True)
class Message:
    path: str

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)

    @property
    def flags(self) -> str:
        """Maildir info flags from the filename, e.g. 'FS' for '...:2,FS'."""
        _, sep, flags = self.filename.rpartition(INFO_SEPARATOR)
        return flags if sep else ""

    @property
    def in_new_dir(self) -> bool:
        return os.path.basename(os.path.dirname(self.path)) == "new"

    def is_new(self) -> bool:
        """True for mail still under new/ or not carrying the Seen flag."""
        return self.in_new_dir or SEEN_FLAG not in self.flags

    def is_unread(self) -> bool:
        return self.is_new()
