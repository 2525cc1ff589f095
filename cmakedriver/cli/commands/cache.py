"""
Cache command implementation.

Prints the entries of the project's CMake cache.
"""

import asyncio
import logging

from cmakedriver.cli.utils import open_driver, print_error, safe_print
from cmakedriver.core.exceptions import CMakeDriverError

logger = logging.getLogger(__name__)


async def _list_entries(args) -> int:
    async with open_driver(args) as driver:
        if driver.cmake_cache is None:
            print_error(
                "No CMake cache found",
                f"{driver.cache_path} does not exist; run 'cmakedriver configure' first",
            )
            return 1
        for key, entry in sorted(driver.cmake_cache_entries.items()):
            if args.filter and args.filter.lower() not in key.lower():
                continue
            if entry.advanced and not args.advanced:
                continue
            safe_print(f"{key}:{entry.type.value}={entry.as_string()}")
        return 0


def run(args) -> int:
    """
    Run the cache command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        return asyncio.run(_list_entries(args))
    except CMakeDriverError as e:
        print_error("Failed to read CMake cache", str(e))
        return 1
