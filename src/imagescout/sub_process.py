"""Async subprocess execution.

A non-zero exit status is returned, not raised. Only failures to launch the
program (or an expired timeout) are errors.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .errors import CommandExecutionError, CommandTimeoutError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecResult:
    stdout: str
    stderr: str
    returncode: int


async def execute(
    program: str, args: Sequence[str], *, timeout_s: float | None = None
) -> ExecResult:
    argv = [program, *args]
    logger.debug("executing: %s", " ".join(argv))
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise CommandExecutionError(program, f"cannot execute {program}: {e}") from e

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            proc.communicate(), timeout=timeout_s
        )
    except asyncio.TimeoutError:
        proc.kill()
        _ = await proc.wait()
        raise CommandTimeoutError(program, float(timeout_s or 0.0)) from None

    return ExecResult(
        stdout=stdout_bytes.decode(errors="replace"),
        stderr=stderr_bytes.decode(errors="replace"),
        returncode=int(proc.returncode or 0),
    )
