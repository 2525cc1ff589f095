"""
Compile-info command implementation.

Shows how a source file is compiled according to compile_commands.json.
"""

import asyncio
import logging
import os
import shlex

from cmakedriver.cli.utils import open_driver, print_error, safe_print
from cmakedriver.core.exceptions import CMakeDriverError

logger = logging.getLogger(__name__)


async def _show(args) -> int:
    async with open_driver(args) as driver:
        info = await driver.compilation_info_for_file(os.path.abspath(args.file))
        if info is None:
            print_error(f"No compile command recorded for {args.file}")
            return 1
        safe_print(f"file:      {info.file}")
        safe_print(f"directory: {info.directory}")
        safe_print(f"command:   {shlex.join(info.arguments)}")
        if info.output:
            safe_print(f"output:    {info.output}")
        return 0


def run(args) -> int:
    """
    Run the compile-info command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if the file was found, 1 otherwise)
    """
    try:
        return asyncio.run(_show(args))
    except CMakeDriverError as e:
        print_error("Failed to load project state", str(e))
        return 1
