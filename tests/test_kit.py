"""
Unit tests for kits.
"""

import pytest

from cmakedriver.core.exceptions import ConfigError
from cmakedriver.kit import Kit, kit_change_requires_clean


class TestKit:
    """Tests for Kit."""

    def test_from_dict(self):
        kit = Kit.from_dict(
            {
                "name": "clang",
                "compilers": {"C": "/usr/bin/clang"},
                "preferred_generator": "Ninja",
            }
        )

        assert kit.name == "clang"
        assert kit.compilers == {"C": "/usr/bin/clang"}
        assert kit.toolchain_file is None
        assert kit.preferred_generator == "Ninja"

    def test_from_dict_rejects_bad_compilers(self):
        with pytest.raises(ConfigError, match="compilers"):
            Kit.from_dict({"name": "x", "compilers": ["gcc"]})

    def test_settings_args(self):
        """Test compilers are sorted by language and paths normalized."""
        kit = Kit(
            name="gcc",
            compilers={"CXX": "/usr/bin/g++", "C": "/usr/bin//gcc"},
            toolchain_file="/opt/tc/../toolchain.cmake",
        )

        assert kit.settings_args() == [
            "-DCMAKE_C_COMPILER:FILEPATH=/usr/bin/gcc",
            "-DCMAKE_CXX_COMPILER:FILEPATH=/usr/bin/g++",
            "-DCMAKE_TOOLCHAIN_FILE:FILEPATH=/opt/toolchain.cmake",
        ]


class TestKitChangeRequiresClean:
    """Tests for kit_change_requires_clean()."""

    def test_first_kit_needs_no_clean(self):
        assert kit_change_requires_clean(None, Kit(name="a")) is False

    def test_different_compilers(self):
        old = Kit(name="a", compilers={"CXX": "g++"})
        new = Kit(name="b", compilers={"CXX": "clang++"})

        assert kit_change_requires_clean(old, new) is True

    def test_different_toolchain_file(self):
        old = Kit(name="a", toolchain_file="x.cmake")
        new = Kit(name="a", toolchain_file="y.cmake")

        assert kit_change_requires_clean(old, new) is True

    def test_rename_only(self):
        old = Kit(name="a", compilers={"CXX": "g++"})
        new = Kit(name="b", compilers={"CXX": "g++"})

        assert kit_change_requires_clean(old, new) is False
