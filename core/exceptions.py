"""
Custom exceptions for the loader with structured error context.

This module provides the exception hierarchy used by the progress,
checkpoint and job-context layers. Each exception carries context
information for debugging and for the failure logs.

Exception Hierarchy:
    LoadException (base)
    ├── ConfigInvalidError
    ├── CheckpointError
    │   ├── CheckpointCorruptError
    │   └── CheckpointWriteError
    ├── InvalidSourceReferenceError
    ├── InvalidProgressStateError
    └── JobStateError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class LoadException(Exception):
    """
    Base exception for all loader errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (path, source key, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigInvalidError(LoadException):
    """
    Raised when run options are malformed or missing.

    Context should include:
        - errors: List of field-level validation errors
    """
    pass


# ============================================================================
# Checkpoint Errors
# ============================================================================

class CheckpointError(LoadException):
    """Base exception for checkpoint persistence failures."""
    pass


class CheckpointCorruptError(CheckpointError):
    """
    Raised when a checkpoint file cannot be parsed.

    Fatal at startup in incremental mode: the job never falls back to
    an empty snapshot when the only resume state is unreadable.

    Context should include:
        - path: Path of the checkpoint file
    """
    pass


class CheckpointWriteError(CheckpointError):
    """
    Raised when a checkpoint file cannot be written.

    Context should include:
        - path: Destination path of the checkpoint file
    """
    pass


# ============================================================================
# Caller Contract Errors
# ============================================================================

class InvalidSourceReferenceError(LoadException, ValueError):
    """
    Raised when progress is reported for a source that was never registered.

    Context should include:
        - source_key: The unknown source key
        - category: Element category of the source
    """
    pass


class InvalidProgressStateError(LoadException, RuntimeError):
    """
    Raised when an item progress update violates its invariants.

    Covers offset regressions, offsets past the known item size and
    completing an item when none is being loaded.
    """
    pass


class JobStateError(LoadException, RuntimeError):
    """Raised when the job context lifecycle is used out of order."""
    pass
