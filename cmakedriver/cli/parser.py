"""
cmakedriver CLI argument parser.

This module implements the command-line interface for cmakedriver using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

try:
    from importlib.metadata import version

    __version__ = version("cmakedriver")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


class CLI:
    """cmakedriver command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="cmakedriver",
            description="cmakedriver - run CMake and track its configuration state",
            epilog='Use "cmakedriver COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"cmakedriver {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./cmakedriver.yaml)",
        )
        parser.add_argument(
            "--project-root",
            type=Path,
            metavar="PATH",
            default=Path.cwd(),
            help="Project root directory (default: current directory)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_configure_command(subparsers)
        self._add_cache_command(subparsers)
        self._add_compile_info_command(subparsers)
        self._add_watch_command(subparsers)

        return parser

    def _add_kit_argument(self, parser):
        parser.add_argument(
            "--kit",
            metavar="NAME",
            help="Kit from the configuration file to apply before running",
        )

    def _add_configure_command(self, subparsers):
        """Add 'configure' subcommand."""
        parser = subparsers.add_parser(
            "configure",
            help="Run CMake configuration",
            description="Run CMake to generate build files in the build directory",
        )
        self._add_kit_argument(parser)
        parser.add_argument(
            "--clean",
            action="store_true",
            help="Remove CMakeCache.txt and CMakeFiles/ before configuring",
        )
        parser.add_argument(
            "--cmake-args",
            action="append",
            metavar="ARG",
            help="Additional CMake arguments (can be used multiple times)",
        )

    def _add_cache_command(self, subparsers):
        """Add 'cache' subcommand."""
        parser = subparsers.add_parser(
            "cache",
            help="Show CMake cache entries",
            description="Print the entries of the build directory's CMake cache",
        )
        parser.add_argument(
            "--filter",
            metavar="TEXT",
            help="Only show entries whose name contains TEXT",
        )
        parser.add_argument(
            "--advanced",
            action="store_true",
            help="Include entries marked as advanced",
        )

    def _add_compile_info_command(self, subparsers):
        """Add 'compile-info' subcommand."""
        parser = subparsers.add_parser(
            "compile-info",
            help="Show how a source file is compiled",
            description="Look up a source file in compile_commands.json",
        )
        parser.add_argument("file", type=Path, help="Source file to look up")

    def _add_watch_command(self, subparsers):
        """Add 'watch' subcommand."""
        parser = subparsers.add_parser(
            "watch",
            help="Reload the CMake cache when it changes",
            description="Watch CMakeCache.txt and reload it on every change",
        )
        self._add_kit_argument(parser)

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "configure": "cmakedriver.cli.commands.configure",
            "cache": "cmakedriver.cli.commands.cache",
            "compile-info": "cmakedriver.cli.commands.compile_info",
            "watch": "cmakedriver.cli.commands.watch",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
