"""Command-line interface for inspecting the resolved game client identity.

Commands:
    epic-http manifest     Print the installed Fortnite manifest as JSON.
    epic-http user-agent   Print the User-Agent sent to Epic services.
"""

from __future__ import annotations

import json
import logging
import os
import sys

import click

from epic_http.config import MANIFESTS_DIRECTORY_ENV, Settings, get_settings
from epic_http.libs.manifest import ManifestResolver
from epic_http.observability import initialize_logfire


def _setup_logging(verbose: bool) -> None:
    """Configure global logging.

    Args:
        verbose: If *True* enable *DEBUG* level logging, otherwise *WARNING*
            so command output stays clean.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level)

    from epic_http.logging_security import install_filter

    install_filter()


def _create_settings() -> Settings:
    """Return validated settings, exiting with status *1* if validation fails."""
    try:
        return get_settings()
    except Exception as exc:
        click.echo(f"✗ Configuration error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--manifests-directory",
    envvar=MANIFESTS_DIRECTORY_ENV,
    default=None,
    help=f"Directory holding the launcher's .item files (env: {MANIFESTS_DIRECTORY_ENV})",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx: click.Context, manifests_directory: str | None, verbose: bool) -> None:
    """Epic HTTP - inspect the identity used for Epic Games requests."""
    _setup_logging(verbose)

    if manifests_directory:
        os.environ[MANIFESTS_DIRECTORY_ENV] = manifests_directory
        get_settings.cache_clear()

    settings = _create_settings()
    initialize_logfire(settings)
    ctx.obj = ManifestResolver.from_settings(settings)


@main.command()
@click.pass_obj
def manifest(resolver: ManifestResolver) -> None:
    """Print the installed product's manifest as JSON."""
    try:
        result = resolver.resolve_manifest()
    except OSError as exc:
        click.echo(f"✗ Cannot read {resolver.manifests_directory}: {exc}", err=True)
        sys.exit(1)

    if result is None:
        click.echo(f"✗ No {resolver.product_name} installation found", err=True)
        sys.exit(1)

    click.echo(json.dumps(result.model_dump(), indent=2))


@main.command("user-agent")
@click.pass_obj
def user_agent(resolver: ManifestResolver) -> None:
    """Print the User-Agent sent to Epic services."""
    click.echo(resolver.resolve_user_agent())


if __name__ == "__main__":
    main()
