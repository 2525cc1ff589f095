"""
Entry point for running cmakedriver CLI as a module.

Usage: python -m cmakedriver [command] [options]
"""

from cmakedriver.cli.parser import main

if __name__ == "__main__":
    main()
