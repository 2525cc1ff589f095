"""
Command-line interface for cmakedriver.
"""

from cmakedriver.cli.parser import CLI, main

__all__ = ["CLI", "main"]
