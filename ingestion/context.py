"""
Job context shared by every loading worker of one run.

Lifecycle:
    INIT -> RUNNING -> STOPPING -> CLOSED

The context owns:
- the progress resumed from the latest checkpoint (read only)
- the progress recorded by this run
- one failure logger per input source, created exactly once
- the cooperative stop flag
- the final flush of progress on close
"""

import logging
import threading
from typing import Dict, List, Optional

from core.clock import Clock, SystemClock, format_timestamp
from core.exceptions import CheckpointError, JobStateError
from ingestion.checkpoint import CheckpointStore
from ingestion.client import ClientHolder, client_holder as default_client_holder
from ingestion.failure import FailureLogger
from models.base import ElementCategory, JobState
from models.progress import ProgressSnapshot
from schemas.options import LoadOptions

logger = logging.getLogger(__name__)


class JobContext:
    """
    Coordinates progress, failure logs and shutdown for one loading run.

    Workers read ``old_progress`` to find where each source resumes, record
    into ``new_progress`` and poll ``stopped`` between units of work. The
    orchestrator calls ``close()`` once, after every worker has been joined.
    """

    def __init__(
        self,
        options: LoadOptions,
        store: Optional[CheckpointStore] = None,
        clock: Optional[Clock] = None,
        client_holder: Optional[ClientHolder] = None,
    ):
        self.state = JobState.INIT
        self.options = options
        self.store = store or CheckpointStore()
        self.client_holder = client_holder or default_client_holder
        # The time at the beginning of loading, accurate to seconds
        self.timestamp = format_timestamp((clock or SystemClock()).now())
        self.loading_category: Optional[ElementCategory] = None
        # Timestamp of the run resumed from, if any
        self.previous_timestamp: Optional[str] = None

        self._stop_event = threading.Event()
        self._loggers_lock = threading.Lock()
        self._loggers: Dict[str, FailureLogger] = {}

        self.old_progress = self._load_old_progress()
        self.new_progress = ProgressSnapshot()
        self.state = JobState.RUNNING

    def _load_old_progress(self) -> ProgressSnapshot:
        if not self.options.incremental_mode:
            return ProgressSnapshot()
        directory = self.options.checkpoint_dir()
        path = self.store.discover_latest(directory)
        if path is None:
            logger.info(f"No load progress found under '{directory}', starting fresh")
            return ProgressSnapshot()
        logger.info(f"Resuming from load progress '{path}'")
        # A corrupt checkpoint propagates: resuming blind risks re-loading or losing records
        snapshot = self.store.load(path)
        self.previous_timestamp = self.store.timestamp_of(path)
        return snapshot

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def request_stop(self) -> None:
        """Ask workers to stop pulling input; running batches finish normally"""
        if self._stop_event.is_set():
            return
        logger.info("Stop requested, workers will halt after their current batch")
        self._stop_event.set()
        if self.state == JobState.RUNNING:
            self.state = JobState.STOPPING

    def previous_failures(self, struct) -> List[str]:
        """Records of ``struct`` the resumed run failed to load, when reloading them"""
        if not self.options.reload_failure or self.previous_timestamp is None:
            return []
        path = FailureLogger.path_for(
            self.options.checkpoint_dir(), self.previous_timestamp, struct
        )
        return FailureLogger.failed_records(path)

    def failure_logger(self, struct) -> FailureLogger:
        """Return the failure logger of ``struct``, creating it on first use"""
        key = struct.unique_key_for_file()
        with self._loggers_lock:
            failure_logger = self._loggers.get(key)
            if failure_logger is None:
                logger.info(f"Create failure logger for struct '{struct}'")
                failure_logger = FailureLogger(
                    self.options.checkpoint_dir(), self.timestamp, struct
                )
                self._loggers[key] = failure_logger
            return failure_logger

    def close(self) -> None:
        """
        Flush the run's state. Must be called exactly once, after all workers
        have terminated.

        Writing the final checkpoint is best effort: a failure is logged and
        the run still completes, since every record of this run has already
        been submitted.
        """
        if self.state == JobState.CLOSED:
            raise JobStateError("Job context is already closed")
        self.state = JobState.STOPPING

        with self._loggers_lock:
            failure_loggers = list(self._loggers.values())
        for failure_logger in failure_loggers:
            try:
                failure_logger.close()
            except OSError:
                logger.error(f"Failed to close failure logger '{failure_logger.path}'", exc_info=True)

        try:
            self.store.persist(self.new_progress, self.options.checkpoint_dir(), self.timestamp)
        except CheckpointError as e:
            logger.error(f"Failed to write load progress: {e}", exc_info=True)

        self.client_holder.close()
        self.state = JobState.CLOSED

    def __enter__(self) -> "JobContext":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self.state != JobState.CLOSED:
            self.close()
