"""Lakecat exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each reconciliation stage raises a specific error type for debuggability.
"""

from __future__ import annotations


class LakecatError(Exception):
    """Base exception for all Lakecat failures."""


class LakecatConfigError(LakecatError):
    """Raised for invalid runtime configuration."""


class LakecatDependencyError(LakecatError):
    """Raised when an optional runtime dependency is missing."""


class LakecatValidationError(LakecatError):
    """Raised for malformed or missing request fields."""


class LakecatNotFoundError(LakecatError):
    """Raised when a referenced format or storage does not exist."""


class LakecatPreconditionError(LakecatError):
    """Raised when a storage exists but cannot be used for reconciliation."""


class LakecatStorageAccessError(LakecatError):
    """Raised for transport or permission failures while listing storage."""


class LakecatPersistenceError(LakecatError):
    """Raised when catalog reads or writes fail."""


class LakecatCancelledError(LakecatError):
    """Raised when storage probing is cancelled or exceeds its deadline."""


class LakecatNotificationError(LakecatError):
    """Raised when a notification sink fails to accept an event."""
