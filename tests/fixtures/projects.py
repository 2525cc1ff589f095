"""Reusable CMake project fixtures for testing.

This module provides pytest fixtures and writers that create realistic source
and build directories: a CMakeLists.txt project, a CMakeCache.txt and a
compile_commands.json, without needing CMake installed.
"""

import json
from pathlib import Path
from typing import Dict

import pytest

from cmakedriver.config import DriverConfig


CACHE_HEADER = """# This is the CMakeCache file.
# For build in directory: {binary_dir}
# It was generated by CMake: /usr/bin/cmake
# You can edit this file to change values found and used by cmake.

########################
# EXTERNAL cache entries
########################

"""


def write_cache(binary_dir: Path, entries: Dict[str, str], extra: str = "") -> Path:
    """
    Write a CMakeCache.txt with the given STRING/INTERNAL entries.

    Keys may carry an explicit type as ``"KEY:TYPE"``; plain keys are written
    as STRING entries.

    Returns:
        Path to the written cache file
    """
    binary_dir.mkdir(parents=True, exist_ok=True)
    lines = [CACHE_HEADER.format(binary_dir=binary_dir)]
    for key, value in entries.items():
        if ":" in key:
            name, type_ = key.split(":", 1)
        else:
            name, type_ = key, "STRING"
        lines.append(f"//Value of {name}\n{name}:{type_}={value}\n\n")
    lines.append(extra)
    cache_path = binary_dir / "CMakeCache.txt"
    cache_path.write_text("".join(lines))
    return cache_path


def write_compdb(binary_dir: Path, source_dir: Path, files=("main.cpp",)) -> Path:
    """Write a compile_commands.json with one record per source file."""
    binary_dir.mkdir(parents=True, exist_ok=True)
    records = [
        {
            "directory": str(binary_dir),
            "command": f"/usr/bin/c++ -I{source_dir}/include -o {name}.o -c {source_dir / name}",
            "file": str(source_dir / name),
            "output": f"{name}.o",
        }
        for name in files
    ]
    compdb_path = binary_dir / "compile_commands.json"
    compdb_path.write_text(json.dumps(records, indent=2))
    return compdb_path


@pytest.fixture
def cmake_project(tmp_path) -> Path:
    """
    Create a minimal CMake project source directory.

    Returns:
        Path to the source directory (build/ beneath it does not exist yet)
    """
    source_dir = tmp_path / "project"
    source_dir.mkdir()
    (source_dir / "CMakeLists.txt").write_text(
        "cmake_minimum_required(VERSION 3.20)\n"
        "project(Foo CXX)\n"
        "add_executable(foo main.cpp)\n"
    )
    (source_dir / "main.cpp").write_text("int main() { return 0; }\n")
    return source_dir


@pytest.fixture
def driver_config(cmake_project) -> DriverConfig:
    """DriverConfig for cmake_project with a build/ binary directory."""
    return DriverConfig(source_dir=cmake_project, cmake_path="cmake")


@pytest.fixture
def configured_project(cmake_project) -> Path:
    """cmake_project with an existing cache and compilation database."""
    binary_dir = cmake_project / "build"
    write_cache(
        binary_dir,
        {
            "CMAKE_PROJECT_NAME:STATIC": "Foo",
            "CMAKE_GENERATOR:INTERNAL": "Ninja",
            "CMAKE_BUILD_TYPE": "Debug",
        },
    )
    write_compdb(binary_dir, cmake_project)
    return cmake_project
