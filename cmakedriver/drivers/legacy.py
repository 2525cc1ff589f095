"""
Legacy CMake driver.

Drives CMake through its command line only: every configure is a ``cmake``
invocation, after which the CMake cache and the compilation database are
re-read from the binary directory. Edits to the cache made outside of a
configure are picked up by watching the cache file.
"""

import asyncio
import contextlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from cmakedriver.cmake.cache import CACHE_FILE_NAME, CacheEntry, CMakeCache
from cmakedriver.cmake.compdb import (
    COMPDB_FILE_NAME,
    CompilationDatabase,
    CompilationInfo,
)
from cmakedriver.config import DriverConfig
from cmakedriver.core.exceptions import (
    DriverNotInitializedError,
    DriverStateError,
    StateError,
)
from cmakedriver.core.filesystem import normalize_path_string, safe_rmtree, safe_unlink
from cmakedriver.core.process import ExecutionResult, OutputConsumer, execute_command
from cmakedriver.core.reporting import ErrorRecord, ErrorReporter, get_global_reporter
from cmakedriver.core.state import StateManager
from cmakedriver.core.watcher import FileWatcher
from cmakedriver.drivers.base import CMakeDriver
from cmakedriver.kit import Kit, kit_change_requires_clean

logger = logging.getLogger(__name__)

CMAKE_FILES_DIR_NAME = "CMakeFiles"

CommandRunner = Callable[..., Awaitable[ExecutionResult]]


@dataclass(frozen=True)
class DerivedState:
    """Cache and compilation database loaded by one reload."""

    cache: Optional[CMakeCache] = None
    compilation_database: Optional[CompilationDatabase] = None


class LegacyCMakeDriver(CMakeDriver):
    """
    The legacy driver.

    Example:
        >>> driver = await LegacyCMakeDriver.create(config)
        >>> retc = await driver.configure()
        >>> driver.needs_reconfigure
        False
        >>> await driver.dispose()
    """

    def __init__(
        self,
        config: DriverConfig,
        kit: Optional[Kit] = None,
        *,
        state_manager: Optional[StateManager] = None,
        reporter: Optional[ErrorReporter] = None,
        runner: CommandRunner = execute_command,
        watcher_factory: Callable[[Path], FileWatcher] = FileWatcher,
    ):
        self._config = config
        self._source_dir = Path(config.source_dir).absolute()
        self._binary_dir = config.binary_dir
        if kit is None and config.active_kit:
            kit = config.get_kit(config.active_kit)
        self._kit = kit
        self._state = state_manager or StateManager(self._source_dir)
        self._reporter = reporter or get_global_reporter()
        self._run = runner

        self._needs_reconfigure = True
        self._derived = DerivedState()
        self._project_name: Optional[str] = None
        self._project_name_listeners: List[Callable[[str], None]] = []

        self._cache_watcher = watcher_factory(self.cache_path)
        self._watch_task: Optional[asyncio.Task] = None
        self._initialized = False
        self._disposed = False

    @classmethod
    async def create(
        cls, config: DriverConfig, kit: Optional[Kit] = None, **kwargs
    ) -> "LegacyCMakeDriver":
        """Construct and initialize a driver."""
        logger.debug("Creating instance of LegacyCMakeDriver")
        driver = cls(config, kit, **kwargs)
        await driver.initialize()
        return driver

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def source_dir(self) -> Path:
        return self._source_dir

    @property
    def binary_dir(self) -> Path:
        return self._binary_dir

    @property
    def cache_path(self) -> Path:
        return self._binary_dir / CACHE_FILE_NAME

    @property
    def kit(self) -> Optional[Kit]:
        return self._kit

    @property
    def needs_reconfigure(self) -> bool:
        return self._needs_reconfigure

    @property
    def cmake_cache(self) -> Optional[CMakeCache]:
        return self._derived.cache

    @property
    def compilation_database(self) -> Optional[CompilationDatabase]:
        return self._derived.compilation_database

    @property
    def project_name(self) -> Optional[str]:
        return self._project_name

    @property
    def cmake_cache_entries(self) -> Dict[str, CacheEntry]:
        cache = self._derived.cache
        if cache is None:
            return {}
        return {entry.key: entry for entry in cache.all_entries}

    @property
    def generator_name(self) -> Optional[str]:
        cache = self._derived.cache
        if cache is None:
            return None
        gen = cache.get("CMAKE_GENERATOR")
        return gen.as_string() if gen else None

    @property
    def targets(self) -> List[str]:
        return []

    @property
    def executable_targets(self) -> List[str]:
        return []

    def on_project_name_changed(self, listener: Callable[[str], None]) -> None:
        self._project_name_listeners.append(listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _ensure_ready(self, operation: str) -> None:
        if self._disposed:
            raise DriverStateError(f"Cannot call {operation}() on a disposed driver")
        if not self._initialized:
            raise DriverNotInitializedError(operation)

    async def initialize(self) -> None:
        if self._initialized:
            raise DriverStateError("Driver is already initialized")
        if self._disposed:
            raise DriverStateError("Cannot initialize a disposed driver")

        if await asyncio.to_thread(self.cache_path.exists):
            await self.reload()

        self._cache_watcher.start()
        self._watch_task = asyncio.create_task(self._consume_cache_changes())
        self._initialized = True

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        task, self._watch_task = self._watch_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._cache_watcher.dispose()

    async def _consume_cache_changes(self) -> None:
        while True:
            await self._cache_watcher.changed()
            # Several notifications usually arrive for one write
            self._cache_watcher.drain()
            logger.debug(f"Reload CMake cache: {self.cache_path} changed")
            await self._reporter.invoke_async("Reloading CMake Cache", self.reload)

    # ------------------------------------------------------------------
    # Kit handling
    # ------------------------------------------------------------------

    async def set_kit(
        self, need_clean: bool, apply_kit_change: Callable[[], Awaitable[None]]
    ) -> None:
        self._ensure_ready("set_kit")
        self._needs_reconfigure = True
        if need_clean:
            logger.debug(f"Wiping build directory {self.binary_dir}")
            await asyncio.to_thread(safe_rmtree, self.binary_dir)
            self._cache_watcher.restart()
        await apply_kit_change()

    async def change_kit(self, kit: Kit) -> None:
        """Switch to ``kit``, wiping the build directory if compilers changed."""
        need_clean = kit_change_requires_clean(self._kit, kit)

        async def apply() -> None:
            self._kit = kit
            await self._persist(
                "Saving active kit", self._state.update_active_kit, kit.name
            )

        await self.set_kit(need_clean, apply)

    # ------------------------------------------------------------------
    # Configure
    # ------------------------------------------------------------------

    def _settings_args(self) -> List[str]:
        args = []
        generator = self._config.generator or (
            self._kit.preferred_generator if self._kit else None
        )
        if generator:
            args += ["-G", generator]
        if self._config.build_type:
            args.append(f"-DCMAKE_BUILD_TYPE:STRING={self._config.build_type}")
        if self._kit:
            args += self._kit.settings_args()
        args += self._config.configure_args
        return args

    async def configure(
        self,
        extra_args: Sequence[str] = (),
        output_consumer: Optional[OutputConsumer] = None,
    ) -> int:
        self._ensure_ready("configure")
        args = self._settings_args() + list(extra_args)
        args.append("-H" + normalize_path_string(self.source_dir))
        args.append("-B" + normalize_path_string(self.binary_dir))

        cmake_path = self._config.cmake_path
        logger.debug(f"Invoking CMake {cmake_path} with arguments {json.dumps(args)}")
        res = await self._run(
            cmake_path,
            args,
            output_consumer,
            env=self._config.configure_environment or None,
        )
        logger.debug(res.stderr)
        logger.debug(res.stdout)

        if res.retc == 0:
            self._needs_reconfigure = False
        retc = -1 if res.retc is None else res.retc

        try:
            # A failed configure may still have rewritten the cache
            await self.reload()
        finally:
            await self._persist(
                "Recording configure result", self._state.record_configure, retc
            )
        return retc

    async def clean_configure(
        self, output_consumer: Optional[OutputConsumer] = None
    ) -> int:
        self._ensure_ready("clean_configure")
        self._needs_reconfigure = True
        cache = self.cache_path
        cmake_files = self.binary_dir / CMAKE_FILES_DIR_NAME
        if await asyncio.to_thread(cache.exists):
            logger.info(f"Removing {cache}")
            await asyncio.to_thread(safe_unlink, cache)
        if await asyncio.to_thread(cmake_files.exists):
            logger.info(f"Removing {cmake_files}")
            await asyncio.to_thread(safe_rmtree, cmake_files)
        return await self.configure([], output_consumer)

    async def post_build(self) -> bool:
        self._ensure_ready("post_build")
        await self.reload()
        return True

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    async def reload(self) -> None:
        """
        Re-read the CMake cache and compilation database.

        Both are published together in one assignment. A missing cache is an
        error; a missing compilation database is not.

        Raises:
            CacheError: If the cache cannot be loaded
            CompilationDatabaseError: If compile_commands.json is invalid
        """
        cache = await CMakeCache.from_path(self.cache_path)
        compdb = await CompilationDatabase.from_file_path(
            self.binary_dir / COMPDB_FILE_NAME
        )
        self._derived = DerivedState(cache=cache, compilation_database=compdb)

        project = cache.get("CMAKE_PROJECT_NAME")
        if project:
            await self._set_project_name(project.as_string())

    async def _set_project_name(self, name: str) -> None:
        if name == self._project_name:
            return
        self._project_name = name
        for listener in self._project_name_listeners:
            listener(name)
        await self._persist(
            "Saving project name", self._state.update_project_name, name
        )

    async def _persist(self, what: str, update: Callable[..., None], *args) -> None:
        # State is bookkeeping only; a bad state file must not break the driver
        try:
            await asyncio.to_thread(update, *args)
        except StateError as e:
            self._reporter.report(ErrorRecord(what=what, error=e))

    async def compilation_info_for_file(
        self, path: str
    ) -> Optional[CompilationInfo]:
        """
        Look up the compile command for ``path``.

        Relative paths are taken relative to the source directory.
        """
        self._ensure_ready("compilation_info_for_file")
        db = self._derived.compilation_database
        if db is None:
            return None
        return db.get_compilation_info(self._source_dir / path)
