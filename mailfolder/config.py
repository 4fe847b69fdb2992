"""Application configuration — paths, defaults, persistence."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path

APP_NAME = "mailfolder"
APP_VERSION = "0.1.0"

logger = logging.getLogger(__name__)

# ── Directories ───────────────────────────────────────────────────────────────

_XDG_DATA = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
_XDG_CONFIG = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
_XDG_RUNTIME = os.environ.get("XDG_RUNTIME_DIR")

DATA_DIR: Path = _XDG_DATA / "mailfolder"
CONFIG_DIR: Path = _XDG_CONFIG / "mailfolder"
LOG_PATH: Path = DATA_DIR / "mailfolder.log"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.json"

for _d in (DATA_DIR, CONFIG_DIR):
    _d.mkdir(parents=True, exist_ok=True)

# ── Proxy ─────────────────────────────────────────────────────────────────────

PROXY_SOCKET_PATH: Path = (Path(_XDG_RUNTIME) if _XDG_RUNTIME else DATA_DIR) / "imap-proxy.sock"
PROXY_TIMEOUT_SECONDS: float | None = None   # None blocks until the proxy answers

IMAP_HOST: str = ""
IMAP_PORT: int = 993
IMAP_USERNAME: str = ""
IMAP_USE_SSL: bool = True


# ── Persistence ───────────────────────────────────────────────────────────────

def save_settings() -> None:
    """Persist user-changeable settings to disk.  The IMAP password lives in the keyring."""
    data = {
        "proxy_socket_path": str(PROXY_SOCKET_PATH),
        "proxy_timeout_seconds": PROXY_TIMEOUT_SECONDS,
        "imap_host": IMAP_HOST,
        "imap_port": IMAP_PORT,
        "imap_username": IMAP_USERNAME,
        "imap_use_ssl": IMAP_USE_SSL,
    }
    try:
        SETTINGS_PATH.write_text(json.dumps(data, indent=2), encoding="utf-8")
    except Exception as exc:
        logger.warning("Could not save settings: %s", exc)


def load_settings() -> None:
    """Load persisted settings from disk, falling back to defaults."""
    global PROXY_SOCKET_PATH, PROXY_TIMEOUT_SECONDS
    global IMAP_HOST, IMAP_PORT, IMAP_USERNAME, IMAP_USE_SSL
    if not SETTINGS_PATH.exists():
        return
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
        saved_socket = data.get("proxy_socket_path")
        if saved_socket:
            PROXY_SOCKET_PATH = Path(saved_socket).expanduser()
        timeout = data.get("proxy_timeout_seconds", PROXY_TIMEOUT_SECONDS)
        PROXY_TIMEOUT_SECONDS = float(timeout) if timeout is not None else None
        IMAP_HOST = data.get("imap_host", IMAP_HOST)
        IMAP_PORT = int(data.get("imap_port", IMAP_PORT))
        IMAP_USERNAME = data.get("imap_username", IMAP_USERNAME)
        IMAP_USE_SSL = bool(data.get("imap_use_ssl", IMAP_USE_SSL))
    except Exception as exc:
        logger.warning("Could not load settings: %s", exc)


# Load on import so settings are available immediately
load_settings()
