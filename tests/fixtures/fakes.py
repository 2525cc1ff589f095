"""Test doubles for the driver's collaborators.

FakeRunner stands in for execute_command and FakeWatcher for FileWatcher, so
driver tests control process exit codes and change notifications exactly.
"""

import asyncio
from pathlib import Path
from typing import Callable, List, Optional

from cmakedriver.core.process import ExecutionResult


class FakeRunner:
    """
    Records process invocations and returns a canned exit code.

    Args:
        retc: Exit code to report (None simulates abnormal termination)
        side_effect: Called with the argument list before returning,
            e.g. to write the cache file a real cmake run would produce
    """

    def __init__(
        self,
        retc: Optional[int] = 0,
        side_effect: Optional[Callable[[List[str]], None]] = None,
    ):
        self.retc = retc
        self.side_effect = side_effect
        self.calls: List[dict] = []

    async def __call__(self, program, args, output_consumer=None, env=None, cwd=None):
        self.calls.append(
            {
                "program": program,
                "args": list(args),
                "output_consumer": output_consumer,
                "env": env,
            }
        )
        if self.side_effect is not None:
            self.side_effect(list(args))
        if output_consumer is not None:
            output_consumer.output("-- Configuring done")
        return ExecutionResult(retc=self.retc, stdout="-- Configuring done\n", stderr="")

    @property
    def last_args(self) -> List[str]:
        return self.calls[-1]["args"]


class FakeWatcher:
    """In-memory FileWatcher whose notifications are triggered by the test."""

    instances: List["FakeWatcher"] = []

    def __init__(self, path: Path):
        self.path = Path(path)
        self.started = False
        self.restarts = 0
        self.dispose_count = 0
        self._queue: Optional[asyncio.Queue] = None
        FakeWatcher.instances.append(self)

    def start(self, loop=None) -> None:
        self.started = True
        self._queue = asyncio.Queue()

    def restart(self) -> None:
        self.restarts += 1

    def trigger(self) -> None:
        self._queue.put_nowait(self.path)

    async def changed(self) -> Path:
        return await self._queue.get()

    def drain(self) -> int:
        count = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            count += 1
        return count

    def dispose(self) -> None:
        self.dispose_count += 1


async def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> None:
    """Poll ``predicate`` on the event loop until it holds or time runs out."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.01)
