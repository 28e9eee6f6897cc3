"""Configuration settings and file sources for vela_img.

Process-level settings use pydantic-settings with the VELA_IMG_ prefix.
Plugin options are resolved by the CLI with precedence:
CLI flags > env vars > parameter/secret files > defaults.
"""

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vela_img.command import IMG_BINARY

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the VELA_IMG_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="VELA_IMG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    img_binary: Path = Field(
        default=IMG_BINARY,
        description="Path to the img executable",
    )
    vela_dir: Path = Field(
        default=Path("/vela"),
        description="Root of the parameter and secret file mounts",
    )


# Candidate files per plugin option, relative to Settings.vela_dir.
# The first existing file wins.
PARAMETER_FILES: dict[str, tuple[str, ...]] = {
    "log_level": (
        "parameters/img/log_level",
        "secrets/img/log_level",
    ),
    "registry": (
        "parameters/img/registry/name",
        "secrets/docker/registry/name",
    ),
    "username": (
        "parameters/img/registry/username",
        "secrets/img/registry/username",
        "secrets/img/username",
    ),
    "password": (
        "parameters/img/registry/password",
        "secrets/img/registry/password",
        "secrets/img/password",
    ),
    "build_args": (
        "parameters/img/build/build_args",
        "secrets/img/build/build_args",
    ),
    "cache_from": (
        "parameters/img/build/cache_from",
        "secrets/img/build/cache_from",
    ),
    "directory": (
        "parameters/img/build/directory",
        "secrets/img/build/directory",
    ),
    "dockerfile": (
        "parameters/img/build/file",
        "secrets/img/build/file",
    ),
    "labels": (
        "parameters/img/build/labels",
        "secrets/img/build/labels",
    ),
    "no_cache": (
        "parameters/img/build/no_cache",
        "secrets/img/build/no_cache",
    ),
    "no_console": (
        "parameters/img/build/no_console",
        "secrets/img/build/no_console",
    ),
    "output": (
        "parameters/img/build/output",
        "secrets/img/build/output",
    ),
    "platforms": (
        "parameters/img/build/platform",
        "secrets/img/build/platform",
    ),
    "tags": (
        "parameters/img/build/tags",
        "secrets/img/build/tags",
    ),
    "target": (
        "parameters/img/build/target",
        "secrets/img/build/target",
    ),
}


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def candidate_paths(name: str, settings: Settings) -> list[Path]:
    """Return the candidate files for a plugin option.

    Args:
        name: Option name as used in PARAMETER_FILES.
        settings: Settings providing the mount root.

    Returns:
        Absolute candidate paths, in lookup order (empty if unknown).
    """
    return [settings.vela_dir / rel for rel in PARAMETER_FILES.get(name, ())]


def read_parameter_file(paths: Sequence[Path]) -> str | None:
    """Read the value from the first existing file.

    Returns:
        Stripped file contents, or None if no candidate exists.
    """
    for path in paths:
        if path.is_file():
            logger.debug("Reading parameter file %s", path)
            return path.read_text(encoding="utf-8").strip()
    return None


def split_list(values: Iterable[str]) -> list[str]:
    """Split comma-separated values into a flat list, dropping blanks."""
    items: list[str] = []
    for value in values:
        items.extend(part.strip() for part in value.split(",") if part.strip())
    return items


__all__ = [
    "PARAMETER_FILES",
    "Settings",
    "candidate_paths",
    "get_settings",
    "read_parameter_file",
    "split_list",
]
