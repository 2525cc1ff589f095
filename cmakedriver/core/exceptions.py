"""
Centralized exception hierarchy for cmakedriver.

All errors raised by the driver layer derive from CMakeDriverError so callers
can present them to the user with a single handler.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class CMakeDriverError(Exception):
    """Base exception for all cmakedriver errors."""

    pass


# ============================================================================
# Driver Lifecycle Exceptions
# ============================================================================


class DriverError(CMakeDriverError):
    """Base exception for driver lifecycle errors."""

    pass


class DriverNotInitializedError(DriverError):
    """Raised when a driver operation is used before initialize()."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"Driver must be initialized before calling {operation}()"
        )


class DriverStateError(DriverError):
    """Raised when a driver is used in an invalid lifecycle state."""

    pass


# ============================================================================
# CMake Cache Exceptions
# ============================================================================


class CacheError(CMakeDriverError):
    """Base exception for CMake cache errors."""

    pass


class CacheLoadError(CacheError):
    """Raised when the cache file cannot be read."""

    def __init__(self, path, reason: str):
        self.path = path
        super().__init__(f"Failed to load CMake cache {path}: {reason}")


class CacheParseError(CacheError):
    """Raised when a cache file line cannot be parsed."""

    def __init__(self, line_number: int, line: str):
        self.line_number = line_number
        self.line = line
        super().__init__(f"Invalid CMake cache entry on line {line_number}: {line!r}")


# ============================================================================
# Other Exceptions
# ============================================================================


class CompilationDatabaseError(CMakeDriverError):
    """Raised when compile_commands.json exists but cannot be parsed."""

    pass


class ConfigError(CMakeDriverError):
    """Configuration parsing or validation error."""

    pass


class StateError(CMakeDriverError):
    """Base exception for state management errors."""

    pass


class FilesystemError(CMakeDriverError):
    """Base exception for filesystem operations."""

    pass
