"""YAML configuration parser for cmakedriver.

This module provides parsing and validation for cmakedriver.yaml configuration files.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from cmakedriver.core.exceptions import ConfigError
from cmakedriver.kit import Kit

CONFIG_FILE_NAME = "cmakedriver.yaml"


@dataclass
class DriverConfig:
    """Complete driver configuration."""

    source_dir: Path
    build_directory: str = "build"
    cmake_path: str = "cmake"
    generator: Optional[str] = None
    build_type: Optional[str] = None
    configure_args: List[str] = field(default_factory=list)
    configure_environment: Dict[str, str] = field(default_factory=dict)
    kits: List[Kit] = field(default_factory=list)
    active_kit: Optional[str] = None

    @property
    def binary_dir(self) -> Path:
        """Absolute build directory (build_directory is relative to source_dir)."""
        return (self.source_dir / self.build_directory).absolute()

    def get_kit(self, name: str) -> Kit:
        for kit in self.kits:
            if kit.name == name:
                return kit
        raise ConfigError(f"Unknown kit: {name}")

    @classmethod
    def from_dict(cls, data: dict, base_dir: Optional[Path] = None) -> "DriverConfig":
        """
        Build a validated configuration from parsed YAML data.

        Args:
            data: Configuration mapping
            base_dir: Directory relative source_directory values resolve against
                (default: current directory)

        Raises:
            ConfigError: If configuration is invalid
        """
        return _parse_and_validate(data, base_dir or Path.cwd())


def parse_config(config_path: Path) -> DriverConfig:
    """
    Parse cmakedriver.yaml configuration file.

    Args:
        config_path: Path to cmakedriver.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    return _parse_and_validate(data, config_path.parent.absolute())


def _parse_and_validate(data: dict, base_dir: Path) -> DriverConfig:
    """Parse and validate configuration data."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    version = data.get("version", 1)
    if version != 1:
        raise ConfigError(f"Unsupported version: {version} (expected 1)")

    for key in ("cmake_path", "build_directory", "source_directory"):
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"{key} must be a string")

    configure_args = data.get("configure_args", [])
    if not isinstance(configure_args, list):
        raise ConfigError("configure_args must be a list")

    environment = data.get("configure_environment", {})
    if not isinstance(environment, dict):
        raise ConfigError("configure_environment must be a dictionary")

    kits = _parse_kits(data.get("kits", []))
    kit_names = {kit.name for kit in kits}

    active_kit = data.get("active_kit")
    if active_kit is not None and active_kit not in kit_names:
        raise ConfigError(f"active_kit references undefined kit: {active_kit}")

    source_dir = (base_dir / data.get("source_directory", ".")).absolute()

    return DriverConfig(
        source_dir=Path(source_dir),
        build_directory=data.get("build_directory", "build"),
        cmake_path=data.get("cmake_path", "cmake"),
        generator=data.get("generator"),
        build_type=data.get("build_type"),
        configure_args=[str(arg) for arg in configure_args],
        configure_environment={str(k): str(v) for k, v in environment.items()},
        kits=kits,
        active_kit=active_kit,
    )


def _parse_kits(data: list) -> List[Kit]:
    """Parse kit definitions."""
    if not isinstance(data, list):
        raise ConfigError("kits must be a list")

    kits = []
    names = set()
    for kit_data in data:
        kit = Kit.from_dict(kit_data)
        if kit.name in names:
            raise ConfigError(f"Duplicate kit name: {kit.name}")
        names.add(kit.name)
        kits.append(kit)
    return kits
