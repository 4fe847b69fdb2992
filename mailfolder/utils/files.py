"""Small filesystem helpers shared by the maildir code."""
from __future__ import annotations

import logging
import os
import shutil

logger = logging.getLogger(__name__)

MAILDIR_SUBDIRS = ("cur", "new", "tmp")


def is_maildir(path: str) -> bool:
    """True if *path* holds the cur/, new/ and tmp/ subdirectories."""
    if not path:
        return False
    return all(os.path.isdir(os.path.join(path, sub)) for sub in MAILDIR_SUBDIRS)


def mtime_ns(path: str) -> int:
    """Modification time of *path* in nanoseconds, 0 if it cannot be stat()ed."""
    try:
        return os.stat(path).st_mtime_ns
    except OSError as exc:
        logger.debug("stat failed for %s: %s", path, exc)
        return 0


def deliver_file(src: str, tmp_dir: str, dst: str) -> bool:
    """
    Copy *src* into *tmp_dir* and rename it to *dst*, so a partial copy never
    shows up as a message.  Returns True on success.
    """
    staged = os.path.join(tmp_dir, os.path.basename(dst))
    try:
        shutil.copyfile(src, staged)
        os.rename(staged, dst)
        return True
    except OSError as exc:
        logger.warning("Copy %s → %s failed: %s", src, dst, exc)
        try:
            os.unlink(staged)
        except FileNotFoundError:
            pass
        except OSError as cleanup_exc:
            logger.warning("Could not remove %s: %s", staged, cleanup_exc)
        return False
