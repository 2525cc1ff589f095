"""
File system utilities for cmakedriver.

This module provides the small set of platform-aware file operations the
driver needs:
- Path normalization (forward-slash strings for CMake)
- Safe file operations (atomic writes, safe deletion)
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Union

from cmakedriver.core.exceptions import FilesystemError

# Platform detection
IS_WINDOWS = os.name == "nt"


# ============================================================================
# Path Utilities
# ============================================================================


def normalize_path_string(path: Union[str, Path], case_normalize: bool = False) -> str:
    """
    Convert a path to the platform-neutral string form CMake accepts.

    Collapses redundant separators and ``..`` components, converts
    backslashes to forward slashes. normpath already drops trailing slashes.

    Args:
        path: Path to normalize
        case_normalize: Lower-case the result on Windows, where paths
            are case-insensitive

    Returns:
        Normalized path string

    Example:
        >>> normalize_path_string("/src/project/../build/")
        '/src/build'
    """
    normalized = os.path.normpath(str(path)).replace("\\", "/")
    if case_normalize and IS_WINDOWS:
        normalized = normalized.lower()
    return normalized


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    This ensures the file is never in a partially-written state.
    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


def safe_rmtree(path: Union[str, Path]) -> None:
    """
    Remove a directory tree, raising FilesystemError on failure.

    A path that does not exist is silently accepted.

    Args:
        path: Directory to remove

    Raises:
        FilesystemError: If path is not a directory or deletion fails

    Example:
        >>> safe_rmtree('/tmp/build')
    """
    path = Path(path)

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        if IS_WINDOWS:

            def handle_remove_readonly(func, path, exc):
                """Error handler for Windows read-only files."""
                if not os.access(path, os.W_OK):
                    os.chmod(path, 0o777)
                    func(path)
                else:
                    raise

            shutil.rmtree(path, onerror=handle_remove_readonly)
        else:
            shutil.rmtree(path)

    except Exception as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def safe_unlink(path: Union[str, Path]) -> bool:
    """
    Remove a single file if it exists.

    Args:
        path: File to remove

    Returns:
        True if a file was removed, False if it did not exist

    Raises:
        FilesystemError: If the file exists but cannot be removed
    """
    path = Path(path)
    if not path.exists():
        return False
    try:
        path.unlink()
    except OSError as e:
        raise FilesystemError(f"Failed to remove file '{path}': {e}") from e
    return True
