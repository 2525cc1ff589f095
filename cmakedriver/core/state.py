"""
Persistent driver state.

Tracks the active kit, the project name reported by the CMake cache and the
outcome of the last configure. State is persisted to
`.cmakedriver/state.json` under the source directory, so it survives a wiped
build directory.

Example:
    >>> from pathlib import Path
    >>> from cmakedriver.core.state import StateManager
    >>>
    >>> manager = StateManager(Path('/path/to/project'))
    >>> manager.update_project_name('Foo')
    >>> manager.load().project_name
    'Foo'
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from cmakedriver.core.exceptions import StateError
from cmakedriver.core.filesystem import atomic_write

logger = logging.getLogger(__name__)

STATE_DIR_NAME = ".cmakedriver"
STATE_FILE_NAME = "state.json"


@dataclass
class DriverState:
    """
    Driver state tracking.

    Attributes:
        version: State file format version
        active_kit: Name of the kit last applied
        project_name: Value of CMAKE_PROJECT_NAME from the last reload
        last_configure: ISO 8601 timestamp of the last configure
        last_configure_exit_code: Exit code reported by the last configure
    """

    version: int = 1
    active_kit: Optional[str] = None
    project_name: Optional[str] = None
    last_configure: Optional[str] = None
    last_configure_exit_code: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "active_kit": self.active_kit,
            "project_name": self.project_name,
            "last_configure": self.last_configure,
            "last_configure_exit_code": self.last_configure_exit_code,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DriverState":
        """
        Create DriverState from dictionary.

        Raises:
            StateError: If the data has the wrong shape
        """
        if not isinstance(data, dict):
            raise StateError("State data must be a JSON object")
        version = data.get("version", 1)
        if version != 1:
            raise StateError(f"Unsupported state version: {version}")
        exit_code = data.get("last_configure_exit_code")
        if exit_code is not None and not isinstance(exit_code, int):
            raise StateError("last_configure_exit_code must be an integer")
        return cls(
            version=version,
            active_kit=data.get("active_kit"),
            project_name=data.get("project_name"),
            last_configure=data.get("last_configure"),
            last_configure_exit_code=exit_code,
        )


class StateManager:
    """
    Manages driver state persistence.

    Every update reads the current file, applies the change and writes it
    back atomically.

    Attributes:
        source_dir: Project source directory
        state_file: Path to state.json
    """

    def __init__(self, source_dir: Path):
        self.source_dir = Path(source_dir)
        self.state_file = self.source_dir / STATE_DIR_NAME / STATE_FILE_NAME

    def load(self) -> DriverState:
        """
        Load state from disk.

        Returns:
            Stored state, or a default DriverState if no file exists

        Raises:
            StateError: If the state file is corrupt
        """
        if not self.state_file.exists():
            return DriverState()
        try:
            with open(self.state_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StateError(f"Corrupt state file {self.state_file}: {e}") from e
        except OSError as e:
            raise StateError(f"Cannot read state file {self.state_file}: {e}") from e
        return DriverState.from_dict(data)

    def save(self, state: DriverState) -> None:
        """Persist state atomically."""
        try:
            atomic_write(self.state_file, json.dumps(state.to_dict(), indent=2))
        except OSError as e:
            raise StateError(f"Cannot write state file {self.state_file}: {e}") from e
        logger.debug(f"Saved driver state to {self.state_file}")

    def update_active_kit(self, kit_name: Optional[str]) -> None:
        state = self.load()
        state.active_kit = kit_name
        self.save(state)

    def update_project_name(self, project_name: str) -> None:
        state = self.load()
        if state.project_name == project_name:
            return
        state.project_name = project_name
        self.save(state)

    def record_configure(self, exit_code: int) -> None:
        """Record the time and result of a configure run."""
        state = self.load()
        state.last_configure = datetime.now().isoformat()
        state.last_configure_exit_code = exit_code
        self.save(state)
