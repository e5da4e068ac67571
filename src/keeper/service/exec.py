"""Subprocess execution for service manager commands."""

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)

# Shell conventions for "command not found" and "not executable"
EXIT_NOT_FOUND = 127
EXIT_CANNOT_EXECUTE = 126


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of a finished command."""

    code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.code == 0

    @property
    def detail(self) -> str:
        """Diagnostic text: stderr when present, else stdout."""
        return self.stderr or self.stdout


class CommandRunner(Protocol):
    """Callable that runs a program and captures its output."""

    async def __call__(self, program: str, *args: str) -> CommandResult: ...


async def run_command(program: str, *args: str) -> CommandResult:
    """Run a program to completion and capture its output.

    Never raises for a non-zero exit. A missing binary is reported as exit
    code 127 with a shell-style "command not found" message.
    """
    logger.debug("exec: %s %s", program, " ".join(args))
    try:
        proc = await asyncio.create_subprocess_exec(
            program,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        return CommandResult(
            code=EXIT_NOT_FOUND, stderr=f"{program}: command not found"
        )
    except OSError as e:
        return CommandResult(code=EXIT_CANNOT_EXECUTE, stderr=f"{program}: {e}")

    stdout, stderr = await proc.communicate()
    result = CommandResult(
        code=proc.returncode or 0,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )
    if not result.ok:
        logger.debug("exec: %s exited %d", program, result.code)
    return result


async def stream_command(program: str, *args: str) -> AsyncIterator[str]:
    """Run a program and yield its combined output line by line."""
    try:
        proc = await asyncio.create_subprocess_exec(
            program,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except FileNotFoundError:
        yield f"{program}: command not found"
        return

    if proc.stdout:
        async for line in proc.stdout:
            yield line.decode(errors="replace").rstrip()
    await proc.wait()
