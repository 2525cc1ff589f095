"""
Configure command implementation.

Runs CMake for the project, optionally after removing the cached
configuration state.
"""

import asyncio
import logging

from cmakedriver.cli.utils import ConsoleOutputConsumer, open_driver, print_error
from cmakedriver.core.exceptions import CMakeDriverError

logger = logging.getLogger(__name__)


async def _configure(args) -> int:
    async with open_driver(args) as driver:
        consumer = ConsoleOutputConsumer()
        if args.clean:
            retc = await driver.clean_configure(consumer)
        else:
            retc = await driver.configure(args.cmake_args or [], consumer)
        if driver.project_name:
            logger.info(f"Project: {driver.project_name}")
        return retc


def run(args) -> int:
    """
    Run the configure command.

    Args:
        args: Parsed command-line arguments

    Returns:
        CMake's exit code, or 1 if CMake could not run to completion
    """
    logger.debug(f"Arguments: {args}")
    try:
        retc = asyncio.run(_configure(args))
    except CMakeDriverError as e:
        logger.error(f"Configure failed: {e}")
        print_error("Configure failed", str(e))
        return 1

    if retc != 0:
        print_error(f"CMake exited with code {retc}")
        return retc if retc > 0 else 1
    logger.info("Configure succeeded")
    return 0
