"""
Readers for the files CMake writes into a build directory.
"""

from cmakedriver.cmake.cache import (
    CACHE_FILE_NAME,
    CacheEntry,
    CacheEntryType,
    CMakeCache,
    is_truthy,
)
from cmakedriver.cmake.compdb import (
    COMPDB_FILE_NAME,
    CompilationDatabase,
    CompilationInfo,
)

__all__ = [
    "CACHE_FILE_NAME",
    "CacheEntry",
    "CacheEntryType",
    "CMakeCache",
    "is_truthy",
    "COMPDB_FILE_NAME",
    "CompilationDatabase",
    "CompilationInfo",
]
