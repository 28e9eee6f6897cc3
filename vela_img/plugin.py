"""Plugin orchestration: validate, then run version, login and build.

The plugin moves through `idle -> validating -> executing -> done`, or to
`failed` on the first validation or process error. Nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from vela_img.build import BuildConfig, build_command, run_build, validate_build
from vela_img.command import (
    IMG_BINARY,
    CommandInvocation,
    CommandResult,
    run_command,
    version_command,
)
from vela_img.errors import ConfigurationError, ProcessError
from vela_img.registry import (
    RegistryConfig,
    login,
    login_command,
    validate_registry,
)

logger = logging.getLogger(__name__)


class PluginState(str, Enum):
    """Lifecycle state of a plugin run."""

    IDLE = "idle"
    VALIDATING = "validating"
    EXECUTING = "executing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class Plugin:
    """Configuration loaded for one plugin run.

    Attributes:
        build: Build configuration.
        registry: Registry configuration.
        img: Path to the img executable.
        state: Current lifecycle state.
    """

    build: BuildConfig
    registry: RegistryConfig
    img: Path = IMG_BINARY
    state: PluginState = field(default=PluginState.IDLE, init=False)

    def validate(self) -> None:
        """Validate the registry, then the build configuration.

        Raises:
            ConfigurationError: On the first missing value.
        """
        logger.debug("Validating plugin configuration")
        self.state = PluginState.VALIDATING
        try:
            validate_registry(self.registry)
            validate_build(self.build)
        except ConfigurationError:
            self.state = PluginState.FAILED
            raise

    def plan(self) -> list[CommandInvocation]:
        """Return the commands a run would execute, in order."""
        commands = [version_command(self.img)]
        login_cmd = login_command(self.registry, self.img)
        if login_cmd is not None:
            commands.append(login_cmd)
        commands.append(build_command(self.build, self.img))
        return commands

    def exec(self) -> list[CommandResult]:
        """Run version, login and build, stopping at the first failure.

        Returns:
            Results of the commands that ran.

        Raises:
            ProcessError: If any command fails.
        """
        logger.debug("Running plugin with provided configuration")
        self.state = PluginState.EXECUTING
        results: list[CommandResult] = []
        try:
            # img version output helps with troubleshooting
            results.append(run_command(version_command(self.img)))

            login_result = login(self.registry, self.img)
            if login_result is not None:
                results.append(login_result)

            results.append(run_build(self.build, self.img))
        except (ConfigurationError, ProcessError):
            self.state = PluginState.FAILED
            raise

        self.state = PluginState.DONE
        return results

    def run(self, dry_run: bool = False) -> list[CommandResult]:
        """Validate and execute the plugin.

        Args:
            dry_run: Only validate and print the commands that would run.

        Returns:
            Results of the executed commands (empty for a dry run).
        """
        self.validate()

        if dry_run:
            for cmd in self.plan():
                print(f"$ {cmd.render()}", flush=True)
            self.state = PluginState.DONE
            return []

        return self.exec()


__all__ = ["Plugin", "PluginState"]
