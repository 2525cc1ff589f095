"""
CMake drivers.
"""

from cmakedriver.drivers.base import CMakeDriver
from cmakedriver.drivers.legacy import DerivedState, LegacyCMakeDriver

__all__ = ["CMakeDriver", "DerivedState", "LegacyCMakeDriver"]
