"""Cooperative cancellation for storage probing.

Reconciliation checks a token before every storage probe so callers can
stop a long scan. A token may also carry a deadline after which it
reports itself as cancelled.
"""

from __future__ import annotations

import threading
import time

from core.errors import LakecatCancelledError


class CancellationToken:
    """Thread-safe cancellation token with an optional deadline.

    Examples:
        >>> token = CancellationToken.with_timeout(30.0)
        >>> token.raise_if_cancelled("storage probe")
        >>> token.cancel()
        >>> token.is_cancelled()
        True
    """

    def __init__(self, deadline: float | None = None) -> None:
        """Initialize a token.

        Args:
            deadline: Optional ``time.monotonic()`` value after which the
                token counts as cancelled.
        """
        self._is_cancelled = threading.Event()
        self._deadline = deadline

    @classmethod
    def with_timeout(cls, timeout_seconds: float | None) -> "CancellationToken":
        """Create a token expiring ``timeout_seconds`` from now."""
        if timeout_seconds is None:
            return cls()
        return cls(deadline=time.monotonic() + timeout_seconds)

    def cancel(self) -> None:
        """Signal that cancellation has been requested."""
        self._is_cancelled.set()

    def is_expired(self) -> bool:
        """Return whether the deadline has passed."""
        return self._deadline is not None and time.monotonic() >= self._deadline

    def is_cancelled(self) -> bool:
        """Return whether cancellation was requested or the deadline passed."""
        return self._is_cancelled.is_set() or self.is_expired()

    def raise_if_cancelled(self, operation: str) -> None:
        """Raise when the token is cancelled.

        Args:
            operation: Operation name used in the error message.

        Raises:
            LakecatCancelledError: If cancelled or past the deadline.
        """
        if self._is_cancelled.is_set():
            raise LakecatCancelledError(
                f"{operation} was cancelled before completion. No data was registered."
            )
        if self.is_expired():
            raise LakecatCancelledError(
                f"{operation} exceeded its deadline. No data was registered; "
                "raise LAKECAT_PROBE_TIMEOUT_SECONDS or --timeout and retry."
            )
