"""Registry configuration, validation and login.

This module handles:
- Validating registry credentials
- Composing the `img login` command with the password masked on display
- Writing a Docker `config.json` with credentials (alternate to login)
"""

from __future__ import annotations

import base64
import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from vela_img.command import IMG_BINARY, CommandInvocation, CommandResult, run_command
from vela_img.errors import ConfigurationError

logger = logging.getLogger(__name__)

LOGIN_ACTION = "login"
DEFAULT_REGISTRY = "index.docker.io"


class RegistryConfig(BaseModel):
    """Credentials and URL for the image registry.

    Attributes:
        url: Registry host, e.g. index.docker.io.
        username: User name for the registry.
        password: Password for the registry.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str = Field(default=DEFAULT_REGISTRY, description="Registry URL")
    username: str = Field(default="", description="Registry user name")
    password: str = Field(default="", repr=False, description="Registry password")

    @property
    def is_complete(self) -> bool:
        """Whether url, username and password are all set."""
        return bool(self.url and self.username and self.password)


def validate_registry(config: RegistryConfig) -> None:
    """Verify that all registry fields are provided.

    Raises:
        ConfigurationError: Naming the first missing field, checked in
            the order password, url, username.
    """
    logger.debug("Validating registry configuration")

    if not config.password:
        raise ConfigurationError("no config password provided", field="password")
    if not config.url:
        raise ConfigurationError("no config url provided", field="url")
    if not config.username:
        raise ConfigurationError("no config username provided", field="username")


def login_command(
    config: RegistryConfig, img: Path = IMG_BINARY
) -> CommandInvocation | None:
    """Compose the `img login` command.

    Returns:
        The login invocation, or None when any field is empty.
    """
    if not config.is_complete:
        return None

    logger.debug("Creating img login command from registry configuration")
    return CommandInvocation(
        executable=img,
        args=(
            LOGIN_ACTION,
            f"-p={config.password}",
            f"-u={config.username}",
            config.url,
        ),
        secret_args=(1,),
    )


def login(config: RegistryConfig, img: Path = IMG_BINARY) -> CommandResult | None:
    """Log in to the registry, skipping silently if credentials are incomplete.

    Raises:
        ProcessError: If the login command fails.
    """
    cmd = login_command(config, img)
    if cmd is None:
        logger.info("Registry credentials incomplete, skipping login")
        return None
    return run_command(cmd)


def write_docker_config(config: RegistryConfig, path: Path) -> Path | None:
    """Write a Docker config.json holding basic auth for the registry.

    Args:
        config: Registry configuration.
        path: Destination file, e.g. /root/.docker/config.json.

    Returns:
        The written path, or None when any field is empty.
    """
    logger.debug("Writing registry configuration file")

    if not config.is_complete:
        return None

    auth = base64.b64encode(
        f"{config.username}:{config.password}".encode()
    ).decode("ascii")
    payload = {"auths": {config.url: {"auth": auth}}}

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n")
    path.chmod(0o644)
    logger.info("Wrote registry credentials for %s to %s", config.url, path)
    return path


__all__ = [
    "DEFAULT_REGISTRY",
    "RegistryConfig",
    "login",
    "login_command",
    "validate_registry",
    "write_docker_config",
]
