"""
Core functionality for cmakedriver.

This package contains the foundational modules that the drivers depend on.
"""

from .exceptions import (
    CMakeDriverError,
    DriverError,
    DriverNotInitializedError,
    DriverStateError,
    CacheError,
    CacheLoadError,
    CacheParseError,
    CompilationDatabaseError,
    ConfigError,
    StateError,
    FilesystemError,
)

from .process import (
    ExecutionResult,
    OutputConsumer,
    execute_command,
)

from .reporting import (
    ErrorRecord,
    ErrorReporter,
    get_global_reporter,
    reset_global_reporter,
)

__all__ = [
    "CMakeDriverError",
    "DriverError",
    "DriverNotInitializedError",
    "DriverStateError",
    "CacheError",
    "CacheLoadError",
    "CacheParseError",
    "CompilationDatabaseError",
    "ConfigError",
    "StateError",
    "FilesystemError",
    "ExecutionResult",
    "OutputConsumer",
    "execute_command",
    "ErrorRecord",
    "ErrorReporter",
    "get_global_reporter",
    "reset_global_reporter",
]
