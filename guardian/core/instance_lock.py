"""
Guardian - Single Instance Lock
===============================

PID lock file in DATA_DIR so two bots never moderate the same guilds.

DESIGN:
    The lock is an fcntl advisory lock held for the life of the process.
    A leftover file from a dead process is replaced; a file whose PID is
    still alive blocks startup.
"""

import fcntl
import os
from pathlib import Path
from typing import IO, Optional

from guardian.core.logger import logger


LOCK_FILE_NAME = "guardian.pid"


class InstanceLock:
    """Holds the single-instance lock file."""

    def __init__(self, data_dir: Path) -> None:
        self.path = data_dir / LOCK_FILE_NAME
        self._fp: Optional[IO[str]] = None

    def _read_pid(self) -> Optional[int]:
        try:
            return int(self.path.read_text().strip())
        except (OSError, ValueError):
            return None

    @staticmethod
    def _pid_alive(pid: int) -> bool:
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            return True  # exists, owned by someone else
        return True

    def acquire(self) -> bool:
        """
        Take the lock.

        Returns:
            True if acquired, False if another live instance holds it.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        current_pid = os.getpid()

        old_pid = self._read_pid()
        if old_pid is not None and old_pid != current_pid:
            if self._pid_alive(old_pid):
                logger.error("Another Guardian Instance Is Running", [
                    ("PID", str(old_pid)),
                    ("Lock File", str(self.path)),
                ])
                return False
            logger.warning(f"Removing stale lock file (PID {old_pid} is dead)")

        fp = open(self.path, "a+", encoding="utf-8")
        try:
            fcntl.flock(fp.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            fp.close()
            logger.error("Failed to Acquire Lock File", [("Lock File", str(self.path)), ("Error", str(e))])
            return False

        fp.seek(0)
        fp.truncate()
        fp.write(str(current_pid))
        fp.flush()
        self._fp = fp

        logger.info("Instance Lock Acquired", [("PID", str(current_pid)), ("Lock File", str(self.path))])
        return True

    def release(self) -> None:
        if self._fp is None:
            return
        fcntl.flock(self._fp.fileno(), fcntl.LOCK_UN)
        self._fp.close()
        self._fp = None
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


__all__ = ["InstanceLock"]
