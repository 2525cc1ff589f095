"""
CMake driver interface.

This module defines the capability set every driver variant implements. The
orchestrating layer holds whichever variant is active; variants share no
mutable state through this class.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from cmakedriver.cmake.cache import CacheEntry
from cmakedriver.cmake.compdb import CompilationInfo
from cmakedriver.core.process import OutputConsumer


class CMakeDriver(ABC):
    """
    Abstract base class for CMake drivers.

    A driver runs CMake for one source/binary directory pair and exposes the
    state CMake produced. Drivers are built in two phases: construction
    yields an inert object and ``initialize()`` must be awaited once before
    any other operation.
    """

    @property
    @abstractmethod
    def source_dir(self) -> Path:
        pass

    @property
    @abstractmethod
    def binary_dir(self) -> Path:
        pass

    @property
    @abstractmethod
    def needs_reconfigure(self) -> bool:
        """True until a configure succeeds; re-armed by kit changes and cleans."""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        """Perform asynchronous setup. Must be called exactly once."""
        pass

    @abstractmethod
    async def set_kit(
        self, need_clean: bool, apply_kit_change: Callable[[], Awaitable[None]]
    ) -> None:
        """
        Prepare the driver for a kit change.

        Args:
            need_clean: Remove the binary directory before applying the change
            apply_kit_change: Callback that activates the new kit
        """
        pass

    @abstractmethod
    async def configure(
        self,
        extra_args: Sequence[str] = (),
        output_consumer: Optional[OutputConsumer] = None,
    ) -> int:
        """
        Run CMake configuration.

        Returns:
            CMake's exit code, or -1 if it terminated abnormally
        """
        pass

    @abstractmethod
    async def clean_configure(
        self, output_consumer: Optional[OutputConsumer] = None
    ) -> int:
        """Remove cached configuration state and configure from scratch."""
        pass

    @abstractmethod
    async def post_build(self) -> bool:
        """Refresh derived state after a build."""
        pass

    @abstractmethod
    async def compilation_info_for_file(
        self, path: str
    ) -> Optional[CompilationInfo]:
        """Look up how ``path`` is compiled, or None if unknown."""
        pass

    @property
    @abstractmethod
    def cmake_cache_entries(self) -> Dict[str, CacheEntry]:
        pass

    @property
    @abstractmethod
    def generator_name(self) -> Optional[str]:
        pass

    @property
    @abstractmethod
    def targets(self) -> List[str]:
        pass

    @property
    @abstractmethod
    def executable_targets(self) -> List[str]:
        pass

    @abstractmethod
    async def dispose(self) -> None:
        """Release resources held by the driver."""
        pass

    async def __aenter__(self) -> "CMakeDriver":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()
