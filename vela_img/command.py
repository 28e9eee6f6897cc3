"""Command invocations and the process runner for the img executable.

This module handles:
- Representing one call of the external tool as an argument vector
- Rendering command lines for display with secrets masked
- Running a command with its output streamed to our own stdout/stderr
- The `img version` diagnostic command
"""

from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from vela_img.errors import EXECUTION_ERROR, NONZERO_EXIT, ProcessError

logger = logging.getLogger(__name__)

# Path to the img executable in the plugin image
IMG_BINARY = Path("/usr/bin/img")

# Replaces secret argument values in displayed command lines
MASK = "********"

VERSION_ACTION = "version"


@dataclass(frozen=True, repr=False)
class CommandInvocation:
    """One call of the external tool.

    Attributes:
        executable: Path to the binary to run.
        args: Sub-action followed by its flags, passed verbatim.
        secret_args: Indexes into args whose values are hidden on display.
    """

    executable: Path
    args: tuple[str, ...]
    secret_args: tuple[int, ...] = ()

    def __repr__(self) -> str:
        return f"CommandInvocation({self.render()!r})"

    @property
    def argv(self) -> list[str]:
        """Full argument vector handed to the process."""
        return [str(self.executable), *self.args]

    def render(self, mask: bool = True) -> str:
        """Render the command line as a single string.

        Args:
            mask: Replace the values of secret arguments with the mask token.

        Returns:
            Space-joined argument vector.
        """
        args = list(self.args)
        if mask:
            for index in self.secret_args:
                flag, sep, _ = args[index].partition("=")
                # Keep the flag name of -p=<value> style arguments
                args[index] = f"{flag}{sep}{MASK}" if sep else MASK
        return " ".join([str(self.executable), *args])


@dataclass
class CommandResult:
    """Result of a successful command execution.

    Attributes:
        command: Masked command line that was executed.
        exit_code: Process exit code.
        started_at: Execution start time.
        finished_at: Execution finish time.
    """

    command: str
    exit_code: int
    started_at: datetime
    finished_at: datetime


def version_command(img: Path = IMG_BINARY) -> CommandInvocation:
    """Compose the `img version` command used for troubleshooting."""
    logger.debug("Creating img version command")
    return CommandInvocation(executable=img, args=(VERSION_ACTION,))


def run_command(invocation: CommandInvocation) -> CommandResult:
    """Execute a command synchronously.

    The child inherits our stdout and stderr so its output appears live on
    the console. The masked command line is printed first.

    Args:
        invocation: Command to execute.

    Returns:
        CommandResult for the finished process.

    Raises:
        ProcessError: If the process cannot be started or exits non-zero.
    """
    cmd_str = invocation.render()
    logger.debug("Executing command: %s", cmd_str)

    # Flush before the child writes to the same streams
    print(f"$ {cmd_str}", flush=True)
    sys.stderr.flush()

    started_at = datetime.now(timezone.utc)

    try:
        result = subprocess.run(invocation.argv, check=False)
    except OSError as e:
        error_message = f"Failed to execute {invocation.executable}: {e}"
        logger.error(error_message)
        raise ProcessError(error_message, exit_code=None, code=EXECUTION_ERROR) from e

    finished_at = datetime.now(timezone.utc)

    if result.returncode != 0:
        error_message = f"Command failed with exit code {result.returncode}: {cmd_str}"
        logger.error(error_message)
        raise ProcessError(error_message, exit_code=result.returncode, code=NONZERO_EXIT)

    duration = (finished_at - started_at).total_seconds()
    logger.debug("Command finished in %.1fs", duration)

    return CommandResult(
        command=cmd_str,
        exit_code=result.returncode,
        started_at=started_at,
        finished_at=finished_at,
    )


__all__ = [
    "IMG_BINARY",
    "MASK",
    "CommandInvocation",
    "CommandResult",
    "run_command",
    "version_command",
]
