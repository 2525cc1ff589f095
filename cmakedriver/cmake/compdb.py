"""
Compilation database (compile_commands.json) reader.

Each record describes how one translation unit is compiled. Records are
indexed by the normalized absolute path of the source file, so lookups work
regardless of how the caller spells the path.
"""

import asyncio
import json
import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple, Union

from cmakedriver.core.exceptions import CompilationDatabaseError
from cmakedriver.core.filesystem import IS_WINDOWS, normalize_path_string

logger = logging.getLogger(__name__)

COMPDB_FILE_NAME = "compile_commands.json"


@dataclass(frozen=True)
class CompilationInfo:
    """
    How a single source file is compiled.

    Attributes:
        file: Absolute path of the source file
        directory: Working directory of the compile
        arguments: Compiler invocation split into arguments
        command: Original command string, when the record used ``command``
        output: Object file produced, when recorded
    """

    file: str
    directory: str
    arguments: Tuple[str, ...]
    command: Optional[str] = None
    output: Optional[str] = None


def _key_for(path: Union[str, Path]) -> str:
    return normalize_path_string(os.path.abspath(str(path)), case_normalize=True)


def _split_command(command: str) -> Tuple[str, ...]:
    return tuple(shlex.split(command, posix=not IS_WINDOWS))


def _parse_record(index: int, record) -> CompilationInfo:
    if not isinstance(record, dict):
        raise CompilationDatabaseError(f"Entry {index} is not an object")
    try:
        directory = record["directory"]
        file = record["file"]
    except KeyError as e:
        raise CompilationDatabaseError(f"Entry {index} is missing {e}") from e
    if not isinstance(directory, str) or not isinstance(file, str):
        raise CompilationDatabaseError(
            f"Entry {index}: 'directory' and 'file' must be strings"
        )

    command = record.get("command")
    arguments = record.get("arguments")
    if arguments is not None:
        if not isinstance(arguments, list):
            raise CompilationDatabaseError(f"Entry {index}: arguments must be a list")
        args = tuple(str(a) for a in arguments)
    elif command is not None:
        try:
            args = _split_command(command)
        except ValueError as e:
            raise CompilationDatabaseError(
                f"Entry {index}: cannot split command: {e}"
            ) from e
    else:
        raise CompilationDatabaseError(
            f"Entry {index} has neither 'arguments' nor 'command'"
        )

    if not os.path.isabs(file):
        file = os.path.join(directory, file)

    return CompilationInfo(
        file=os.path.normpath(file),
        directory=directory,
        arguments=args,
        command=command,
        output=record.get("output"),
    )


class CompilationDatabase:
    """Immutable index of compile commands by source file."""

    def __init__(self, infos: Iterable[CompilationInfo]):
        index = {}
        for info in infos:
            # A file compiled more than once keeps its first record
            index.setdefault(_key_for(info.file), info)
        self._index = MappingProxyType(index)

    @classmethod
    def from_json(cls, data) -> "CompilationDatabase":
        """
        Build a database from parsed compile_commands.json content.

        Raises:
            CompilationDatabaseError: If the content has the wrong shape
        """
        if not isinstance(data, list):
            raise CompilationDatabaseError("compile_commands.json must contain a list")
        return cls(_parse_record(i, record) for i, record in enumerate(data))

    @classmethod
    async def from_file_path(
        cls, path: Union[str, Path]
    ) -> Optional["CompilationDatabase"]:
        """
        Load a compilation database.

        Args:
            path: Path to compile_commands.json

        Returns:
            The database, or None if the file does not exist

        Raises:
            CompilationDatabaseError: If the file exists but is invalid
        """
        path = Path(path)
        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No compilation database at {path}")
            return None
        except OSError as e:
            raise CompilationDatabaseError(f"Cannot read {path}: {e}") from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise CompilationDatabaseError(f"Invalid JSON in {path}: {e}") from e

        db = cls.from_json(data)
        logger.debug(f"Loaded {len(db)} compile commands from {path}")
        return db

    @property
    def entries(self) -> Mapping[str, CompilationInfo]:
        return self._index

    def get_compilation_info(self, path: Union[str, Path]) -> Optional[CompilationInfo]:
        """Return the record for ``path``, or None if the file is not listed."""
        return self._index.get(_key_for(path))

    def __len__(self) -> int:
        return len(self._index)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CompilationDatabase):
            return NotImplemented
        return dict(self._index) == dict(other._index)
