"""
Single-file change notifications for asyncio code.

FileWatcher observes one path with watchdog. The observer thread never calls
into driver code directly; it posts a change event onto an asyncio.Queue owned
by the event loop, and consumers await ``changed()`` from a task of their own.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class _TargetChangeHandler(FileSystemEventHandler):
    """
    Forwards events that touch the watched file.

    Creation, deletion or renaming of the file's directory is forwarded to
    ``rearm`` instead, because observers lose a directory that is removed.
    """

    def __init__(
        self,
        target: Path,
        notify: Callable[[], None],
        rearm: Callable[[], None],
    ):
        self.target = target
        self.directory = target.parent
        self.notify = notify
        self.rearm = rearm

    @staticmethod
    def _as_path(raw_path) -> Optional[Path]:
        if not raw_path:
            return None
        if isinstance(raw_path, bytes):
            raw_path = raw_path.decode()
        return Path(raw_path).absolute()

    def _matches(self, raw_path) -> bool:
        return self._as_path(raw_path) == self.target

    def _is_directory(self, raw_path) -> bool:
        return self._as_path(raw_path) == self.directory

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            if self._is_directory(event.src_path):
                self.rearm()
        elif self._matches(event.src_path):
            self.notify()

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._matches(event.src_path):
            self.notify()

    def on_deleted(self, event: FileSystemEvent) -> None:
        if self._is_directory(event.src_path):
            self.rearm()

    def on_moved(self, event: FileSystemEvent) -> None:
        dest_path = getattr(event, "dest_path", None)
        if self._is_directory(event.src_path) or self._is_directory(dest_path):
            self.rearm()
        # Tools commonly write a temporary file and rename it over the target
        elif not event.is_directory and self._matches(dest_path):
            self.notify()


class FileWatcher:
    """
    Watches a single file and queues a notification for every change.

    The watched file does not need to exist yet. The nearest existing
    ancestor directory is observed, so a file created later is still seen.
    If the file's directory is deleted and created again, observation is
    re-armed on the new directory.

    Example:
        >>> watcher = FileWatcher(build_dir / "CMakeCache.txt")
        >>> watcher.start()
        >>> await watcher.changed()
        >>> watcher.dispose()
    """

    def __init__(
        self,
        path: Union[str, Path],
        observer_factory: Callable[[], Observer] = Observer,
    ):
        self.path = Path(path).absolute()
        self._observer_factory = observer_factory
        self._observer = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._queue: Optional[asyncio.Queue] = None
        self._disposed = False

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def _watch_root(self) -> Path:
        root = self.path.parent
        while not root.exists() and root.parent != root:
            root = root.parent
        return root

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """
        Begin observing the file.

        Args:
            loop: Event loop that receives notifications (default: running loop)
        """
        if self._disposed:
            raise RuntimeError(f"Watcher for {self.path} has been disposed")
        if self._observer is not None:
            return

        self._loop = loop or asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        self._schedule()

    def restart(self) -> None:
        """
        Re-create the observer, keeping queued notifications.

        Needed after the watched directory was deleted, since observers do
        not follow a directory that is removed and created again.
        """
        if self._disposed or self._observer is None:
            return
        self._stop_observer()
        self._schedule()

    def _schedule(self) -> None:
        root = self._watch_root()
        directory = self.path.parent
        recursive = root != directory
        handler = _TargetChangeHandler(self.path, self._post_change, self._post_rearm)

        observer = self._observer_factory()
        observer.schedule(handler, str(root), recursive=recursive)
        if not recursive and directory.parent != directory:
            # Sees the directory itself being removed or recreated
            observer.schedule(handler, str(directory.parent), recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.debug(f"Watching {self.path} (observing {root})")

    def _post_change(self) -> None:
        # Runs on the observer thread
        self._call_in_loop(self._queue.put_nowait, self.path)

    def _post_rearm(self) -> None:
        # Runs on the observer thread
        self._call_in_loop(self._rearm)

    def _call_in_loop(self, callback, *args) -> None:
        if self._disposed or self._loop is None:
            return
        try:
            self._loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            logger.debug(f"Dropping event for {self.path}: event loop is closed")

    def _rearm(self) -> None:
        if self._disposed or self._observer is None:
            return
        logger.debug(f"Directory of {self.path} was replaced, re-arming watch")
        self.restart()
        # The file may have been written before the new observer started
        if self.path.exists():
            self._queue.put_nowait(self.path)

    async def changed(self) -> Path:
        """Wait for the next change notification."""
        if self._queue is None:
            raise RuntimeError("FileWatcher.start() must be called first")
        return await self._queue.get()

    def drain(self) -> int:
        """
        Discard notifications already queued.

        Returns:
            Number of notifications discarded
        """
        count = 0
        if self._queue is None:
            return count
        while not self._queue.empty():
            self._queue.get_nowait()
            count += 1
        return count

    def dispose(self) -> None:
        """Stop observing. Safe to call more than once."""
        if self._disposed:
            return
        self._disposed = True
        self._stop_observer()

    def _stop_observer(self) -> None:
        observer, self._observer = self._observer, None
        if observer is not None:
            observer.stop()
            observer.join(timeout=5)
            logger.debug(f"Stopped watching {self.path}")
