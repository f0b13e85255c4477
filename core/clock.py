"""
Clock abstraction for run timestamps
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone

# Fixed width (14 chars) so lexicographic order equals chronological order
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


class Clock(ABC):
    """Source of the current time"""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime"""


class SystemClock(Clock):
    """Wall clock in UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock frozen at a given instant, used for deterministic runs"""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


def format_timestamp(instant: datetime) -> str:
    """
    Render a run timestamp accurate to seconds.

    Aware datetimes are converted to UTC first so that checkpoints written
    across a DST change or from hosts in different zones still sort.
    """
    if instant.tzinfo is not None:
        instant = instant.astimezone(timezone.utc)
    return instant.strftime(TIMESTAMP_FORMAT)
