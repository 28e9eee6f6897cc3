"""Build configuration, validation and the `img build` command.

Optional flags are produced by an ordered table of rules. Each rule checks
one field of the configuration and renders exactly one argument; rules are
applied in table order and the build context directory is always last.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from vela_img.command import IMG_BINARY, CommandInvocation, CommandResult, run_command
from vela_img.errors import ConfigurationError

logger = logging.getLogger(__name__)

BUILD_ACTION = "build"


class BuildConfig(BaseModel):
    """Options controlling how the image is built.

    Attributes:
        build_args: Build-time variables (KEY=VALUE).
        cache_from: Images to consider as cache sources.
        directory: Build context directory.
        dockerfile_path: Name and path of the Dockerfile.
        labels: Image metadata (KEY=VALUE).
        no_cache: Do not use cache when building.
        no_console: Use the non-console progress UI.
        output_spec: BuildKit output specification (e.g. type=tar,dest=build.tar).
        platforms: Platforms to build for.
        tags: Image names, optionally in name:tag form.
        target_stage: Build stage to target.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    build_args: list[str] = Field(default_factory=list)
    cache_from: list[str] = Field(default_factory=list)
    directory: str = Field(default=".")
    dockerfile_path: str | None = Field(default=None)
    labels: list[str] = Field(default_factory=list)
    no_cache: bool = Field(default=False)
    no_console: bool = Field(default=False)
    output_spec: str | None = Field(default=None)
    platforms: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    target_stage: str | None = Field(default=None)


def _quoted_list(flag: str, values: list[str]) -> str:
    return f'{flag} "{" ".join(values)}"'


@dataclass(frozen=True)
class FlagRule:
    """Renders one optional build flag when its field is set.

    Attributes:
        name: Field the rule reads.
        applies: Predicate on the configuration.
        render: Produces the argument for the configuration.
    """

    name: str
    applies: Callable[[BuildConfig], bool]
    render: Callable[[BuildConfig], str]


# Order is significant: flags appear in the command in this order
FLAG_RULES: tuple[FlagRule, ...] = (
    FlagRule(
        "build_args",
        lambda b: bool(b.build_args),
        lambda b: _quoted_list("--build-arg", b.build_args),
    ),
    FlagRule(
        "cache_from",
        lambda b: bool(b.cache_from),
        lambda b: _quoted_list("--cache-from", b.cache_from),
    ),
    FlagRule(
        "dockerfile_path",
        lambda b: bool(b.dockerfile_path),
        lambda b: f"-f={b.dockerfile_path}",
    ),
    FlagRule(
        "labels",
        lambda b: bool(b.labels),
        lambda b: _quoted_list("--label", b.labels),
    ),
    FlagRule("no_cache", lambda b: b.no_cache, lambda b: "--no-cache"),
    FlagRule("no_console", lambda b: b.no_console, lambda b: "--no-console"),
    FlagRule(
        "output_spec",
        lambda b: bool(b.output_spec),
        lambda b: f"--output {b.output_spec}",
    ),
    FlagRule(
        "platforms",
        lambda b: bool(b.platforms),
        lambda b: _quoted_list("--platform", b.platforms),
    ),
    FlagRule("tags", lambda b: bool(b.tags), lambda b: f"-t={' '.join(b.tags)}"),
    FlagRule(
        "target_stage",
        lambda b: bool(b.target_stage),
        lambda b: f"--target {b.target_stage}",
    ),
)


def validate_build(config: BuildConfig) -> None:
    """Verify the build has a context directory and at least one tag.

    Raises:
        ConfigurationError: If the directory or the tags are missing.
    """
    logger.debug("Validating build configuration")

    if not config.directory:
        raise ConfigurationError("no build directory provided", field="directory")
    if not config.tags:
        raise ConfigurationError("no build tag provided", field="tags")


def compose_build_flags(config: BuildConfig) -> list[str]:
    """Apply the flag rules to a configuration.

    Returns:
        Rendered optional flags in rule order.
    """
    return [rule.render(config) for rule in FLAG_RULES if rule.applies(config)]


def build_command(config: BuildConfig, img: Path = IMG_BINARY) -> CommandInvocation:
    """Compose the `img build` command.

    Args:
        config: Build configuration.
        img: Path to the img executable.

    Returns:
        Invocation of the form `build [flags...] <directory>`.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    validate_build(config)
    logger.debug("Creating img build command from build configuration")

    args = [BUILD_ACTION, *compose_build_flags(config), config.directory]
    return CommandInvocation(executable=img, args=tuple(args))


def run_build(config: BuildConfig, img: Path = IMG_BINARY) -> CommandResult:
    """Build the image.

    Raises:
        ConfigurationError: If the configuration is invalid.
        ProcessError: If the build command fails.
    """
    logger.debug("Running build with provided configuration")
    return run_command(build_command(config, img))


__all__ = [
    "FLAG_RULES",
    "BuildConfig",
    "FlagRule",
    "build_command",
    "compose_build_flags",
    "run_build",
    "validate_build",
]
