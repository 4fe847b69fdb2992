"""Account dataclass — the IMAP account the proxy logs into."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Account:
    host: str = ""
    port: int = 993
    username: str = ""
    use_ssl: bool = True

    def __str__(self) -> str:
        return f"{self.username}@{self.host}:{self.port}"
