"""Launching the query engine and capturing its output.

One ``EngineInvocation`` is built per attempt. The engine inherits the host
environment with a small overlay on top (staged file path, backtraces), and
its stdout/stderr are read concurrently, each bounded by ``max_buffer``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from contextlib import suppress
import dataclasses
import errno
import logging
import os
from pathlib import Path

from prisma_engine.config import FrozenConfig
from prisma_engine.constants import (
    BACKTRACE_ENV,
    CLI_SUBCOMMAND,
    DATAMODEL_PATH_ENV,
    DMMF_FLAG,
    DMMF_TO_DML_FLAG,
    GET_CONFIG_FLAG,
    MAX_BUFFER,
    READ_CHUNK_SIZE,
)
from prisma_engine.exceptions import (
    EngineLaunchError,
    EngineOutputTooLargeError,
    EngineReportedError,
    TransientBusyError,
)
from prisma_engine.types import Operation

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class EngineInvocation:
    """Everything needed to launch the engine once."""

    executable: str
    args: tuple[str, ...]
    env: Mapping[str, str] = dataclasses.field(default_factory=dict)
    cwd: str | None = None
    max_buffer: int = MAX_BUFFER

    @property
    def argv(self) -> tuple[str, ...]:
        return (self.executable, *self.args)

    def merged_env(self) -> dict[str, str]:
        """The inherited environment with this invocation's overlay applied."""
        return {**os.environ, **self.env}


@dataclasses.dataclass(frozen=True, slots=True)
class EngineOutput:
    stdout: str
    stderr: str
    exit_code: int


def build_invocation(
    operation: Operation,
    engine_path: str,
    staged: Path,
    *,
    cwd: str | None,
    config: FrozenConfig,
) -> EngineInvocation:
    """Map an operation onto the engine's CLI flags and environment."""
    if operation is Operation.GET_DMMF:
        args: tuple[str, ...] = (CLI_SUBCOMMAND, DMMF_FLAG)
    elif operation is Operation.GET_CONFIG:
        args = (CLI_SUBCOMMAND, GET_CONFIG_FLAG, str(staged))
    else:
        args = (CLI_SUBCOMMAND, DMMF_TO_DML_FLAG, str(staged))

    env: dict[str, str] = {}
    if operation is not Operation.DMMF_TO_DML:
        env[DATAMODEL_PATH_ENV] = str(staged)
    if config.rust_backtrace:
        env[BACKTRACE_ENV] = "1"

    return EngineInvocation(
        executable=engine_path,
        args=args,
        env=env,
        cwd=cwd or os.getcwd(),
        max_buffer=config.max_buffer,
    )


async def run_engine(invocation: EngineInvocation, operation: Operation) -> EngineOutput:
    """Run the engine to completion and return its output.

    Raises:
        TransientBusyError: The executable was busy (ETXTBSY) at launch.
        EngineLaunchError: Any other failure to start the process.
        EngineOutputTooLargeError: stdout or stderr exceeded ``max_buffer``.
        EngineReportedError: The engine exited non-zero.
    """
    label = operation.label
    log.debug("Running %s (cwd=%s)", " ".join(invocation.argv), invocation.cwd)

    try:
        proc = await asyncio.create_subprocess_exec(
            *invocation.argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=invocation.cwd,
            env=invocation.merged_env(),
        )
    except OSError as e:
        if e.errno == errno.ETXTBSY:
            raise TransientBusyError(
                f"{label} engine executable is busy (ETXTBSY): {invocation.executable}",
                operation=label,
            ) from e
        raise EngineLaunchError(
            f"{label} could not start {invocation.executable}: {e}", operation=label
        ) from e

    readers = (
        asyncio.create_task(
            _read_bounded(proc.stdout, invocation.max_buffer, "stdout", label)
        ),
        asyncio.create_task(
            _read_bounded(proc.stderr, invocation.max_buffer, "stderr", label)
        ),
    )
    try:
        stdout_bytes, stderr_bytes = await asyncio.gather(*readers)
        exit_code = await proc.wait()
    except BaseException:
        for reader in readers:
            reader.cancel()
        if proc.returncode is None:
            with suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()
        # Reap both readers so a second overflow is not left unretrieved
        await asyncio.gather(*readers, return_exceptions=True)
        raise

    stdout = _strip_final_newline(stdout_bytes.decode("utf-8", errors="replace"))
    stderr = _strip_final_newline(stderr_bytes.decode("utf-8", errors="replace"))
    log.debug("Engine exited with %d (%d bytes stdout)", exit_code, len(stdout_bytes))

    if exit_code != 0:
        detail = stderr or stdout or f"engine exited with code {exit_code}"
        raise EngineReportedError(
            f"{label} {detail}",
            operation=label,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
        )

    return EngineOutput(stdout=stdout, stderr=stderr, exit_code=exit_code)


async def _read_bounded(
    stream: asyncio.StreamReader | None, limit: int, name: str, label: str
) -> bytes:
    if stream is None:
        return b""
    chunks: list[bytes] = []
    total = 0
    while chunk := await stream.read(READ_CHUNK_SIZE):
        total += len(chunk)
        if total > limit:
            raise EngineOutputTooLargeError(
                f"{label} engine {name} exceeded max_buffer of {limit} bytes",
                operation=label,
            )
        chunks.append(chunk)
    return b"".join(chunks)


def _strip_final_newline(text: str) -> str:
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text
