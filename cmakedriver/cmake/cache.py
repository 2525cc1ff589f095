"""
CMake cache (CMakeCache.txt) reader.

A cache file is a sequence of ``KEY:TYPE=VALUE`` lines. ``//`` lines hold the
help string of the entry that follows; ``#`` lines and blank lines are
ignored. ``KEY-ADVANCED:INTERNAL=1`` marks KEY as an advanced option.

Example:
    >>> cache = await CMakeCache.from_path(build_dir / "CMakeCache.txt")
    >>> cache.get("CMAKE_BUILD_TYPE").value
    'Debug'
"""

import asyncio
import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, List, Mapping, Optional, Union

from cmakedriver.core.exceptions import CacheLoadError, CacheParseError

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = "CMakeCache.txt"

_ENTRY_RE = re.compile(
    r'^(?:"(?P<quoted>[^"]*)"|(?P<key>[^:="]+)):(?P<type>[A-Z_]+)=(?P<value>.*)$'
)
_ADVANCED_SUFFIX = "-ADVANCED"

_FALSE_CONSTANTS = {"0", "OFF", "NO", "FALSE", "N", "IGNORE", "NOTFOUND", ""}


class CacheEntryType(Enum):
    """Declared type of a cache entry."""

    BOOL = "BOOL"
    STRING = "STRING"
    PATH = "PATH"
    FILEPATH = "FILEPATH"
    INTERNAL = "INTERNAL"
    STATIC = "STATIC"
    UNINITIALIZED = "UNINITIALIZED"


def is_truthy(value: str) -> bool:
    """
    Evaluate a string the way CMake's if() evaluates a constant.

    Non-zero numbers are true; 0, OFF, NO, FALSE, N, IGNORE, NOTFOUND, the
    empty string and anything ending in -NOTFOUND are false. Other strings
    are treated as true.
    """
    upper = value.strip().upper()
    if upper in _FALSE_CONSTANTS or upper.endswith("-NOTFOUND"):
        return False
    try:
        return float(upper) != 0
    except ValueError:
        return True


@dataclass(frozen=True)
class CacheEntry:
    """
    A single typed cache entry.

    Attributes:
        key: Entry name
        type: Declared entry type
        value: bool for BOOL entries, str otherwise
        helpstring: Documentation from the preceding ``//`` lines
        advanced: Whether the entry is marked advanced
    """

    key: str
    type: CacheEntryType
    value: Union[str, bool]
    helpstring: str = ""
    advanced: bool = False

    def as_string(self) -> str:
        if isinstance(self.value, bool):
            return "ON" if self.value else "OFF"
        return self.value

    def as_bool(self) -> bool:
        if isinstance(self.value, bool):
            return self.value
        return is_truthy(self.value)

    def as_list(self) -> List[str]:
        """Split a CMake ``;`` separated list."""
        text = self.as_string()
        return text.split(";") if text else []


class CMakeCache:
    """
    Immutable snapshot of a parsed CMake cache.

    Entries are fixed at construction; a new snapshot is created for every
    load rather than updating an existing one.
    """

    def __init__(self, path: Optional[Path], entries: Mapping[str, CacheEntry]):
        self.path = path
        self._entries = MappingProxyType(dict(entries))

    @classmethod
    async def from_path(cls, path: Union[str, Path]) -> "CMakeCache":
        """
        Load and parse a cache file.

        Args:
            path: Path to CMakeCache.txt

        Returns:
            Parsed cache snapshot

        Raises:
            CacheLoadError: If the file does not exist or cannot be read
            CacheParseError: If the file contains a malformed entry
        """
        path = Path(path)
        logger.debug(f"Reading CMake cache file {path}")
        try:
            content = await asyncio.to_thread(
                path.read_text, encoding="utf-8", errors="replace"
            )
        except FileNotFoundError:
            raise CacheLoadError(path, "file does not exist")
        except OSError as e:
            raise CacheLoadError(path, str(e)) from e
        return cls(path, parse_cache_content(content))

    @property
    def entries(self) -> Mapping[str, CacheEntry]:
        """Read-only mapping of key to entry."""
        return self._entries

    @property
    def all_entries(self) -> Iterator[CacheEntry]:
        return iter(self._entries.values())

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CMakeCache):
            return NotImplemented
        return dict(self._entries) == dict(other._entries)

    def __repr__(self) -> str:
        return f"CMakeCache(path={self.path!r}, entries={len(self._entries)})"


def parse_cache_content(content: str) -> dict:
    """
    Parse the text of a cache file.

    Args:
        content: Cache file contents

    Returns:
        Dictionary of key to CacheEntry

    Raises:
        CacheParseError: If a non-comment line is not a valid entry
    """
    entries = {}
    advanced_keys = set()
    doc_lines: List[str] = []

    for line_number, raw_line in enumerate(content.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            doc_lines = []
            continue
        if line.startswith("//"):
            doc_lines.append(line[2:].strip())
            continue
        if line.startswith("#"):
            continue

        match = _ENTRY_RE.match(line)
        if match is None:
            raise CacheParseError(line_number, raw_line)

        key = match.group("quoted")
        if key is None:
            key = match.group("key").strip()
        try:
            entry_type = CacheEntryType(match.group("type"))
        except ValueError:
            raise CacheParseError(line_number, raw_line)

        raw_value = match.group("value")
        value: Union[str, bool] = (
            is_truthy(raw_value) if entry_type is CacheEntryType.BOOL else raw_value
        )

        entries[key] = CacheEntry(
            key=key,
            type=entry_type,
            value=value,
            helpstring=" ".join(doc_lines),
        )
        doc_lines = []

        if key.endswith(_ADVANCED_SUFFIX) and is_truthy(raw_value):
            advanced_keys.add(key[: -len(_ADVANCED_SUFFIX)])

    for key in advanced_keys:
        if key in entries:
            entries[key] = replace(entries[key], advanced=True)

    return entries
