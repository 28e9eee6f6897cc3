"""Thin CLI wrapper for vela_img.

This module provides the plugin entry point using Typer. Every option can
also come from environment variables or from parameter/secret files; the
actual work is delegated to the plugin module.
"""

import logging
from typing import Annotated, Any

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.markup import escape

from vela_img import __version__
from vela_img.build import BuildConfig
from vela_img.config import (
    PARAMETER_FILES,
    Settings,
    candidate_paths,
    get_settings,
    read_parameter_file,
    split_list,
)
from vela_img.errors import ConfigurationError, ProcessError
from vela_img.log import setup_logging
from vela_img.plugin import Plugin
from vela_img.registry import DEFAULT_REGISTRY, RegistryConfig

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="vela-img",
    help="Vela img plugin for building and publishing images",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)

_LIST_OPTIONS = {"build_args", "cache_from", "labels", "platforms", "tags"}
_BOOL_OPTIONS = {"no_cache", "no_console"}

# Sources that leave an option free to be filled from a file
_FILE_FALLBACK_SOURCES = {"DEFAULT", "DEFAULT_MAP"}

_bool_adapter = TypeAdapter(bool)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"vela-img version {__version__}")
        raise typer.Exit()


def apply_file_sources(
    ctx: typer.Context, params: dict[str, Any], settings: Settings
) -> dict[str, Any]:
    """Fill options left at their default from parameter/secret files.

    Args:
        ctx: Click context holding the parameter sources.
        params: Parsed option values by parameter name.
        settings: Settings providing the file mount root.

    Returns:
        A copy of params with file values applied.

    Raises:
        ConfigurationError: If a boolean file holds an unrecognised value.
    """
    resolved = dict(params)
    for name in PARAMETER_FILES:
        # Typer may ship its own click, so match the enum by member name
        source = ctx.get_parameter_source(name)
        if source is not None and source.name not in _FILE_FALLBACK_SOURCES:
            continue
        text = read_parameter_file(candidate_paths(name, settings))
        if text is None:
            continue
        logger.debug("Read %s from parameter file", name)
        if name in _LIST_OPTIONS:
            resolved[name] = split_list([text])
        elif name in _BOOL_OPTIONS:
            try:
                resolved[name] = _bool_adapter.validate_python(text)
            except ValidationError as e:
                raise ConfigurationError(
                    f"invalid boolean value for {name}: {text!r}", field=name
                ) from e
        else:
            resolved[name] = text
    return resolved


@app.command()
def main(
    ctx: typer.Context,
    log_level: Annotated[
        str,
        typer.Option(
            "--log.level",
            envvar=["PARAMETER_LOG_LEVEL", "VELA_LOG_LEVEL", "IMG_LOG_LEVEL"],
            help="set log level - options: (trace|debug|info|warn|error|fatal|panic)",
        ),
    ] = "info",
    registry: Annotated[
        str,
        typer.Option(
            "--config.name",
            envvar=["PARAMETER_REGISTRY", "REGISTRY_NAME"],
            help="Docker registry name to communicate with",
        ),
    ] = DEFAULT_REGISTRY,
    username: Annotated[
        str,
        typer.Option(
            "--config.username",
            envvar=["PARAMETER_USERNAME", "REGISTRY_USERNAME", "DOCKER_USERNAME"],
            help="user name for communication with the registry",
        ),
    ] = "",
    password: Annotated[
        str,
        typer.Option(
            "--config.password",
            envvar=["PARAMETER_PASSWORD", "REGISTRY_PASSWORD", "DOCKER_PASSWORD"],
            help="password for communication with the registry",
            show_default=False,
        ),
    ] = "",
    build_args: Annotated[
        list[str] | None,
        typer.Option(
            "--build.build-args",
            envvar=["PARAMETER_BUILD_ARGS", "BUILD_BUILD_ARGS"],
            help="should set build time variables",
        ),
    ] = None,
    cache_from: Annotated[
        list[str] | None,
        typer.Option(
            "--build.cache-from",
            envvar=["PARAMETER_CACHE_FROM", "BUILD_CACHE_FROM"],
            help="should be images to consider as cache sources",
        ),
    ] = None,
    directory: Annotated[
        str,
        typer.Option(
            "--build.directory",
            envvar=["PARAMETER_DIRECTORY", "BUILD_DIRECTORY"],
            help="should be a path to the context you want img to run",
        ),
    ] = ".",
    dockerfile: Annotated[
        str,
        typer.Option(
            "--build.file",
            envvar=["PARAMETER_FILE", "BUILD_FILE"],
            help="should be name and path to the Dockerfile",
        ),
    ] = "",
    labels: Annotated[
        list[str] | None,
        typer.Option(
            "--build.labels",
            envvar=["PARAMETER_LABELS", "BUILD_LABELS"],
            help="should be set metadata for an image",
        ),
    ] = None,
    no_cache: Annotated[
        bool,
        typer.Option(
            "--build.no-cache",
            envvar=["PARAMETER_NO_CACHE", "BUILD_NO_CACHE"],
            help="should be do not use cache when building the image",
        ),
    ] = False,
    no_console: Annotated[
        bool,
        typer.Option(
            "--build.no-console",
            envvar=["PARAMETER_NO_CONSOLE", "BUILD_NO_CONSOLE"],
            help="should be non-console progress UI",
        ),
    ] = False,
    output: Annotated[
        str,
        typer.Option(
            "--build.output",
            envvar=["PARAMETER_OUTPUT", "BUILD_OUTPUT"],
            help="BuildKit output specification (e.g. type=tar,dest=build.tar)",
        ),
    ] = "",
    platforms: Annotated[
        list[str] | None,
        typer.Option(
            "--build.platforms",
            envvar=["PARAMETER_PLATFORMS", "BUILD_PLATFORMS"],
            help="should be platforms for which the image should be built",
        ),
    ] = None,
    tags: Annotated[
        list[str] | None,
        typer.Option(
            "--build.tags",
            envvar=["PARAMETER_TAGS", "BUILD_TAGS"],
            help="should be name and optionally a tag in the 'name:tag' format",
        ),
    ] = None,
    target: Annotated[
        str,
        typer.Option(
            "--build.target",
            envvar=["PARAMETER_TARGET", "BUILD_TARGET"],
            help="should be the target build stage to build",
        ),
    ] = "",
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            envvar="PARAMETER_DRY_RUN",
            help="Validate and print the commands without running them",
        ),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Vela img plugin for building and publishing images."""
    settings = get_settings()
    try:
        params = apply_file_sources(ctx, ctx.params, settings)
    except ConfigurationError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    setup_logging(params["log_level"])
    logger.info(
        "Vela Img Plugin (code=%s docs=%s registry=%s)",
        "https://github.com/go-vela/vela-img",
        "https://go-vela.github.io/docs/plugins/registry/img",
        "https://hub.docker.com/r/target/vela-img",
    )

    plugin = Plugin(
        build=BuildConfig(
            build_args=split_list(params["build_args"] or []),
            cache_from=split_list(params["cache_from"] or []),
            directory=params["directory"],
            dockerfile_path=params["dockerfile"] or None,
            labels=split_list(params["labels"] or []),
            no_cache=params["no_cache"],
            no_console=params["no_console"],
            output_spec=params["output"] or None,
            platforms=split_list(params["platforms"] or []),
            tags=split_list(params["tags"] or []),
            target_stage=params["target"] or None,
        ),
        registry=RegistryConfig(
            url=params["registry"],
            username=params["username"],
            password=params["password"],
        ),
        img=settings.img_binary,
    )

    try:
        plugin.run(dry_run=dry_run)
    except ConfigurationError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None
    except ProcessError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        exit_code = e.exit_code if e.exit_code and e.exit_code > 0 else 1
        raise typer.Exit(code=exit_code) from None


__all__ = ["app", "apply_file_sources"]
