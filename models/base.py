import enum


# ============================================================================
# ENUMS
# ============================================================================

class ElementCategory(str, enum.Enum):
    """Partitions of loaded elements"""
    VERTEX = "vertex"
    EDGE = "edge"

    @property
    def is_vertex(self) -> bool:
        return self is ElementCategory.VERTEX


class JobState(str, enum.Enum):
    """Job context lifecycle, strictly in declaration order"""
    INIT = "init"
    RUNNING = "running"
    STOPPING = "stopping"
    CLOSED = "closed"
