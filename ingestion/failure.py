"""
Per-source failure log
"""

import logging
import threading
from pathlib import Path
from typing import Any, List, Optional, TextIO

logger = logging.getLogger(__name__)

FAILURE_SUFFIX = ".error"


class FailureLogger:
    """
    Records the input records of one source that failed to load.

    The file ``<checkpoint dir>/<timestamp>/<source key>.error`` is only
    created when the first failure is written.
    """

    def __init__(self, directory: Path, timestamp: str, struct):
        self.struct = struct
        self.path = self.path_for(directory, timestamp, struct)
        self.count = 0
        self._lock = threading.Lock()
        self._writer: Optional[TextIO] = None
        self._closed = False

    def write(self, record: Any, error: BaseException) -> None:
        with self._lock:
            if self._closed:
                raise ValueError(f"Failure logger for '{self.struct}' is closed")
            if self._writer is None:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._writer = self.path.open("a", encoding="utf-8")
            message = str(error).replace("\n", " ")
            self._writer.write(f"# {type(error).__name__}: {message}\n")
            # One line per record keeps the log readable back in pairs
            self._writer.write(str(record).replace("\n", " ") + "\n")
            self._writer.flush()
            self.count += 1

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._writer is not None:
                self._writer.close()
                self._writer = None
                logger.warning(f"{self.count} failed records of '{self.struct}' logged to '{self.path}'")

    @property
    def closed(self) -> bool:
        return self._closed

    @staticmethod
    def path_for(directory: Path, timestamp: str, struct) -> Path:
        return Path(directory) / timestamp / f"{struct.unique_key_for_file()}{FAILURE_SUFFIX}"

    @staticmethod
    def failed_records(path: Path) -> List[str]:
        """
        Read back the records of a failure log.

        Each record line follows its ``# <error>`` line. A missing log
        means the source had no failures.
        """
        path = Path(path)
        if not path.is_file():
            return []
        lines = path.read_text(encoding="utf-8").splitlines()
        return lines[1::2]
