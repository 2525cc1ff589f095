"""
cmakedriver - run CMake and keep its configuration state in sync.
"""

from cmakedriver.config import DriverConfig, parse_config
from cmakedriver.drivers import CMakeDriver, LegacyCMakeDriver
from cmakedriver.kit import Kit

__version__ = "0.1.0"

__all__ = [
    "CMakeDriver",
    "DriverConfig",
    "Kit",
    "LegacyCMakeDriver",
    "parse_config",
]
