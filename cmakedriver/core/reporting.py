"""
Error reporting sink for background work.

Work that runs detached from any caller (such as reloading the CMake cache
after an external edit) has nobody to raise to. Such failures are turned into
ErrorRecord values and handed to an ErrorReporter, which logs them and keeps
them for inspection.

Example:
    >>> reporter = ErrorReporter()
    >>> await reporter.invoke_async("Reloading CMake Cache", driver.reload)
    >>> for record in reporter.records:
    ...     print(record.what, record.error)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ErrorRecord:
    """
    A failure raised by detached work.

    Attributes:
        what: Short description of the work that failed
        error: The exception that was raised
        timestamp: ISO 8601 time the failure was recorded
    """

    what: str
    error: BaseException
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())


class ErrorReporter:
    """
    Collects ErrorRecords and forwards them to registered listeners.

    Listeners are plain callables; a listener that raises is logged and
    skipped so one bad listener cannot hide a report from the others.
    """

    def __init__(self, max_records: int = 100):
        self.max_records = max_records
        self._records: List[ErrorRecord] = []
        self._listeners: List[Callable[[ErrorRecord], None]] = []

    @property
    def records(self) -> List[ErrorRecord]:
        """Recorded failures, oldest first."""
        return list(self._records)

    def add_listener(self, listener: Callable[[ErrorRecord], None]) -> None:
        self._listeners.append(listener)

    def report(self, record: ErrorRecord) -> None:
        """Record a failure and notify listeners."""
        logger.error(
            f"{record.what} failed: {record.error}",
            exc_info=(type(record.error), record.error, record.error.__traceback__),
        )
        self._records.append(record)
        if len(self._records) > self.max_records:
            del self._records[0]
        for listener in self._listeners:
            try:
                listener(record)
            except Exception as e:
                logger.warning(f"Error listener failed: {e}")

    async def invoke_async(
        self, what: str, func: Callable[[], Awaitable[T]]
    ) -> Optional[T]:
        """
        Await ``func`` and report any exception instead of raising it.

        Args:
            what: Description used in the error record
            func: Coroutine function to run

        Returns:
            The function's result, or None if it failed
        """
        try:
            return await func()
        except Exception as e:
            self.report(ErrorRecord(what=what, error=e))
            return None

    def clear(self) -> None:
        self._records.clear()


_global_reporter: Optional[ErrorReporter] = None


def get_global_reporter() -> ErrorReporter:
    """
    Get the process-wide error reporter.

    Returns:
        Global ErrorReporter instance
    """
    global _global_reporter
    if _global_reporter is None:
        _global_reporter = ErrorReporter()
    return _global_reporter


def reset_global_reporter() -> None:
    """Reset the global reporter (for testing)."""
    global _global_reporter
    _global_reporter = None


__all__ = [
    "ErrorRecord",
    "ErrorReporter",
    "get_global_reporter",
    "reset_global_reporter",
]
