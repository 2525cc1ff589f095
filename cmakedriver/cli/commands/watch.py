"""
Watch command implementation.

Keeps a driver alive and reloads the CMake cache whenever it changes on disk.
"""

import asyncio
import logging

from cmakedriver.cli.utils import open_driver, print_error
from cmakedriver.core.exceptions import CMakeDriverError

logger = logging.getLogger(__name__)


async def _watch(args) -> int:
    async with open_driver(args) as driver:
        driver.on_project_name_changed(
            lambda name: logger.info(f"Project name changed: {name}")
        )
        logger.info(f"Watching {driver.cache_path} (Ctrl-C to stop)")
        await asyncio.Event().wait()
    return 0


def run(args) -> int:
    """
    Run the watch command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (130 when interrupted, 1 on error)
    """
    try:
        return asyncio.run(_watch(args))
    except KeyboardInterrupt:
        logger.info("Stopped watching")
        return 130
    except CMakeDriverError as e:
        print_error("Watch failed", str(e))
        return 1
