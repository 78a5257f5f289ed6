from __future__ import annotations

import asyncio
import logging
import shlex
from dataclasses import dataclass

from hostwatch.config import Settings


logger = logging.getLogger(__name__)


class CommandRunnerError(RuntimeError):
    pass


class CommandNotFoundError(CommandRunnerError):
    """The executable is not installed on this host."""


class CommandTimeoutError(CommandRunnerError):
    pass


class CommandError(CommandRunnerError):
    """The command ran but exited non-zero."""

    def __init__(self, message: str, result: CommandResult):
        super().__init__(message)
        self.result = result


@dataclass
class CommandResult:
    stdout: str
    stderr: str
    exit_code: int


class CommandRunner:
    """Runs local commands on the event loop without a shell."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def execute(
        self,
        command: str | list[str],
        *,
        check: bool = False,
        timeout: float | None = None,
    ) -> CommandResult:
        argv = shlex.split(command) if isinstance(command, str) else list(command)
        if not argv:
            raise CommandRunnerError("Empty command")
        if timeout is None:
            timeout = self.settings.command_timeout

        logger.debug("exec: %s", shlex.join(argv))
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(f"Command not found: {argv[0]}") from exc
        except PermissionError as exc:
            raise CommandNotFoundError(f"Command not executable: {argv[0]}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError as exc:
            await _reap(proc)
            raise CommandTimeoutError(f"Command timed out after {timeout}s: {argv[0]}") from exc
        except BaseException:
            # Cancelled mid-wait; the child must not outlive the poll
            await _reap(proc)
            raise

        result = CommandResult(
            stdout=stdout.decode(errors="replace").strip(),
            stderr=stderr.decode(errors="replace").strip(),
            exit_code=proc.returncode if proc.returncode is not None else -1,
        )
        if check and result.exit_code != 0:
            raise CommandError(f"Command failed ({result.exit_code}): {argv[0]}\n{result.stderr}", result)
        return result


async def _reap(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()
