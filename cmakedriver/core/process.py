"""
Asynchronous process execution.

Runs an external command, streams its output line by line to an optional
consumer, and collects the full stdout/stderr for the caller.
"""

import asyncio
import contextlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Sequence, Union

logger = logging.getLogger(__name__)

_READ_SIZE = 64 * 1024


class OutputConsumer(Protocol):
    """Receives process output as it is produced."""

    def output(self, line: str) -> None:
        """Called for every line written to stdout."""
        ...

    def error(self, line: str) -> None:
        """Called for every line written to stderr."""
        ...


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of a finished process.

    Attributes:
        retc: Exit code, or None if the process terminated abnormally
            (killed by a signal or could not be started)
        stdout: Everything written to stdout
        stderr: Everything written to stderr
    """

    retc: Optional[int]
    stdout: str
    stderr: str


async def _pump(
    stream: asyncio.StreamReader, sink, chunks: list
) -> None:
    # Chunked reads; readline() fails on lines longer than the stream limit
    pending = b""
    while True:
        data = await stream.read(_READ_SIZE)
        if not data:
            break
        chunks.append(data)
        if sink is None:
            continue
        pending += data
        *lines, pending = pending.split(b"\n")
        for raw in lines:
            sink(_decode(raw).rstrip("\r"))
    if sink is not None and pending:
        sink(_decode(pending).rstrip("\r"))


async def execute_command(
    program: Union[str, Path],
    args: Sequence[str],
    output_consumer: Optional[OutputConsumer] = None,
    env: Optional[Dict[str, str]] = None,
    cwd: Optional[Union[str, Path]] = None,
) -> ExecutionResult:
    """
    Execute a command and wait for it to finish.

    Args:
        program: Executable to run
        args: Arguments passed to the executable
        output_consumer: Optional consumer receiving output lines as they arrive
        env: Extra environment variables merged over the current environment
        cwd: Working directory for the process

    Returns:
        ExecutionResult. Failures are reported through ``retc``, never raised.
    """
    full_env = None
    if env:
        full_env = dict(os.environ)
        full_env.update(env)

    logger.debug(f"Executing: {program} {' '.join(args)}")

    try:
        proc = await asyncio.create_subprocess_exec(
            str(program),
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=full_env,
            cwd=str(cwd) if cwd is not None else None,
        )
    except OSError as e:
        logger.error(f"Failed to start {program}: {e}")
        message = f"Failed to start {program}: {e}"
        if output_consumer is not None:
            output_consumer.error(message)
        return ExecutionResult(retc=None, stdout="", stderr=message)

    stdout_chunks: list = []
    stderr_chunks: list = []
    try:
        await asyncio.gather(
            _pump(
                proc.stdout,
                output_consumer.output if output_consumer else None,
                stdout_chunks,
            ),
            _pump(
                proc.stderr,
                output_consumer.error if output_consumer else None,
                stderr_chunks,
            ),
        )
    except BaseException:
        # Never leave the child running unreaped
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
        await proc.wait()
        raise
    returncode = await proc.wait()

    # Negative return codes mean the process was killed by a signal
    retc = returncode if returncode >= 0 else None
    if retc is None:
        logger.warning(f"{program} terminated abnormally (signal {-returncode})")

    return ExecutionResult(
        retc=retc,
        stdout=_decode(b"".join(stdout_chunks)),
        stderr=_decode(b"".join(stderr_chunks)),
    )
