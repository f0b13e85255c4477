"""
Checkpoint persistence and discovery for load progress.

One checkpoint file is written per run, named
``load-progress <timestamp>`` inside the job's checkpoint directory.
The timestamp is fixed width, so the lexicographically greatest name
is also the most recent run.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from core.exceptions import CheckpointCorruptError, CheckpointWriteError
from ingestion.storage import CheckpointFileSystem, LocalFileSystem
from models.progress import ProgressSnapshot

logger = logging.getLogger(__name__)

PROGRESS_FILE = "load-progress"
BLANK_STR = " "

PathLike = Union[str, Path]


class CheckpointStore:
    """
    Reads and writes progress snapshots.

    Responsibilities:
    - Serialise a snapshot to a timestamp-named JSON file
    - Find the latest checkpoint of a job
    - Refuse to resume from a checkpoint that cannot be parsed
    """

    def __init__(self, fs: Optional[CheckpointFileSystem] = None):
        self.fs = fs or LocalFileSystem()

    @staticmethod
    def checkpoint_path(directory: PathLike, timestamp: str) -> Path:
        return Path(directory) / f"{PROGRESS_FILE}{BLANK_STR}{timestamp}"

    @staticmethod
    def timestamp_of(path: PathLike) -> str:
        """The run timestamp a checkpoint file is named after"""
        return Path(path).name[len(PROGRESS_FILE) + len(BLANK_STR):]

    def persist(self, snapshot: ProgressSnapshot, directory: PathLike, timestamp: str) -> Path:
        """
        Write ``snapshot`` as the checkpoint of the run stamped ``timestamp``.

        Raises:
            CheckpointWriteError: If the file cannot be written
        """
        path = self.checkpoint_path(directory, timestamp)
        try:
            content = json.dumps(snapshot.to_dict(), indent=2)
            self.fs.write_text_atomic(path, content)
        except OSError as e:
            raise CheckpointWriteError(
                "Failed to write load progress",
                context={"path": str(path)},
                original_exception=e
            )
        logger.info(f"Load progress written to '{path}'")
        return path

    def discover_latest(self, directory: PathLike) -> Optional[Path]:
        """Return the most recent checkpoint under ``directory``, if any"""
        names = sorted(
            name for name in self.fs.list_names(Path(directory))
            if name.startswith(PROGRESS_FILE)
        )
        if not names:
            return None
        return Path(directory) / names[-1]

    def load(self, path: PathLike) -> ProgressSnapshot:
        """
        Read a checkpoint file.

        Raises:
            CheckpointCorruptError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            text = self.fs.read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            raise CheckpointCorruptError(
                "Failed to read progress file",
                context={"path": str(path)},
                original_exception=e
            )

        try:
            return ProgressSnapshot.from_dict(json.loads(text))
        except (json.JSONDecodeError, ValidationError) as e:
            raise CheckpointCorruptError(
                "Malformed progress file",
                context={"path": str(path)},
                original_exception=e
            )


__all__ = ["CheckpointStore", "PROGRESS_FILE"]
