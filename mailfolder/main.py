"""mailfolder — console entry point."""
from __future__ import annotations

import logging
import sys

from mailfolder.config import LOG_PATH


def _setup_logging() -> None:
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=logging.INFO,
        format=fmt,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(LOG_PATH, encoding="utf-8"),
        ],
    )


def main() -> None:
    _setup_logging()
    from mailfolder.cli import main as cli_main
    cli_main()


if __name__ == "__main__":
    main()
