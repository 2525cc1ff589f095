"""
Kits: named compiler/toolchain selections applied to a driver.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from cmakedriver.core.exceptions import ConfigError
from cmakedriver.core.filesystem import normalize_path_string


@dataclass(frozen=True)
class Kit:
    """
    A toolchain selection.

    Attributes:
        name: Unique kit name
        compilers: Language to compiler path (e.g. {"C": "/usr/bin/gcc"})
        toolchain_file: Optional CMake toolchain file
        preferred_generator: Generator to use when the config names none
    """

    name: str
    compilers: Dict[str, str] = field(default_factory=dict)
    toolchain_file: Optional[str] = None
    preferred_generator: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Kit":
        """
        Create a Kit from a configuration mapping.

        Raises:
            ConfigError: If required fields are missing or have the wrong type
        """
        if not isinstance(data, dict) or "name" not in data:
            raise ConfigError("Kit missing required field: name")
        compilers = data.get("compilers") or {}
        if not isinstance(compilers, dict):
            raise ConfigError(f"Kit '{data['name']}': compilers must be a dictionary")
        return cls(
            name=str(data["name"]),
            compilers={str(k): str(v) for k, v in compilers.items()},
            toolchain_file=data.get("toolchain_file"),
            preferred_generator=data.get("preferred_generator"),
        )

    def settings_args(self) -> List[str]:
        """CMake cache definitions this kit contributes to a configure."""
        args = [
            f"-DCMAKE_{lang}_COMPILER:FILEPATH={normalize_path_string(path)}"
            for lang, path in sorted(self.compilers.items())
        ]
        if self.toolchain_file:
            args.append(
                f"-DCMAKE_TOOLCHAIN_FILE:FILEPATH={normalize_path_string(self.toolchain_file)}"
            )
        return args


def kit_change_requires_clean(old: Optional[Kit], new: Optional[Kit]) -> bool:
    """
    Decide whether switching kits invalidates the build directory.

    CMake caches compiler paths on the first configure, so changing compilers
    or the toolchain file needs a fresh binary directory.
    """
    if old is None or new is None:
        return False
    return (
        old.compilers != new.compilers or old.toolchain_file != new.toolchain_file
    )
