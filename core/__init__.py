"""
Core utilities and configuration for the resumable loader.

This package provides foundational components used throughout the loader:

Modules:
    config: Application configuration and environment variable management
    clock: Clock abstraction and the fixed-width run timestamp format
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.clock import SystemClock, format_timestamp
    from core.exceptions import CheckpointCorruptError, ConfigInvalidError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Stamp a run
    timestamp = format_timestamp(SystemClock().now())
"""

__all__ = [
    "settings",
    "setup_logging",
    "Clock",
    "SystemClock",
    "FixedClock",
    "format_timestamp",
    # Exceptions
    "LoadException",
    "ConfigInvalidError",
    "CheckpointError",
    "CheckpointCorruptError",
    "CheckpointWriteError",
    "InvalidSourceReferenceError",
    "InvalidProgressStateError",
    "JobStateError",
]
