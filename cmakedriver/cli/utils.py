"""
Shared utilities for CLI commands.

Provides configuration loading, console output and driver setup used by
every command.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from cmakedriver.config import CONFIG_FILE_NAME, DriverConfig, parse_config
from cmakedriver.drivers.legacy import LegacyCMakeDriver

logger = logging.getLogger(__name__)


# ============================================================================
# Configuration Management
# ============================================================================


def load_driver_config(args) -> DriverConfig:
    """
    Load the driver configuration for a CLI invocation.

    An explicit --config must exist. Without one, cmakedriver.yaml in the
    project root is used when present, otherwise defaults apply.

    Raises:
        ConfigError: If the configuration file is missing or invalid
    """
    project_root = Path(args.project_root).absolute()
    if args.config:
        return parse_config(Path(args.config).absolute())

    default_config = project_root / CONFIG_FILE_NAME
    if default_config.exists():
        logger.debug(f"Loading configuration from {default_config}")
        return parse_config(default_config)

    logger.debug("No configuration file found, using defaults")
    return DriverConfig(source_dir=project_root)


@asynccontextmanager
async def open_driver(args) -> AsyncIterator[LegacyCMakeDriver]:
    """Create an initialized driver for ``args`` and dispose it afterwards."""
    config = load_driver_config(args)
    driver = await LegacyCMakeDriver.create(config)
    try:
        kit_name = getattr(args, "kit", None)
        if kit_name:
            await driver.change_kit(config.get_kit(kit_name))
        yield driver
    finally:
        await driver.dispose()


# ============================================================================
# Console Output
# ============================================================================


class ConsoleOutputConsumer:
    """Streams process output to the console as it arrives."""

    def output(self, line: str) -> None:
        safe_print(line)

    def error(self, line: str) -> None:
        safe_print(line, file=sys.stderr)


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def safe_print(message: str, file=None):
    """
    Print message, replacing characters the console cannot encode.

    Args:
        message: Message to print
        file: Output file (default: stdout)
    """
    try:
        print(message, file=file)
    except UnicodeEncodeError:
        stream = file or sys.stdout
        encoding = getattr(stream, "encoding", None) or "ascii"
        print(message.encode(encoding, errors="replace").decode(encoding), file=file)
