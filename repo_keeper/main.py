"""CLI entry point for repo-keeper."""

import asyncio
import json
import sys
from pathlib import Path

import click
import structlog

from repo_keeper.config.settings import KeeperSettings
from repo_keeper.exceptions import ConfigurationError, RepoKeeperError
from repo_keeper.models.domain import Repository
from repo_keeper.onedev import discover, get_or_create
from repo_keeper.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)


@click.group()
@click.option("--config", default="repo-keeper.yaml", help="Path to configuration file")
@click.option("--log-level", default="INFO", help="Logging level")
@click.option(
    "--log-format", type=click.Choice(["json", "console"]), default="json", help="Log line format"
)
@click.pass_context
def cli(ctx: click.Context, config: str, log_level: str, log_format: str) -> None:
    """repo-keeper: discover and mirror repositories."""
    configure_logging(log_level, json_output=log_format == "json")

    config_path = Path(config)
    if not config_path.exists():
        click.echo(f"Error: Configuration file not found: {config}", err=True)
        sys.exit(1)

    try:
        settings = KeeperSettings.from_yaml(str(config_path))
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("config_error", exc_info=True)
        sys.exit(1)

    ctx.obj = {"settings": settings}


@cli.command(name="discover")
@click.pass_context
def discover_command(ctx: click.Context) -> None:
    """List repositories of all configured OneDev sources as JSON lines."""
    settings: KeeperSettings = ctx.obj["settings"]

    repos, attempted = asyncio.run(discover(settings.source.onedev))
    if not attempted:
        click.echo("Error: No OneDev sources configured", err=True)
        sys.exit(1)

    for repo in repos:
        click.echo(json.dumps(repo.to_dict()))


@cli.command()
@click.option("--name", required=True, help="Repository name to provision")
@click.option("--destination", "index", type=int, default=0, help="Index of the OneDev destination")
@click.pass_context
def provision(ctx: click.Context, name: str, index: int) -> None:
    """Locate or create a mirror project and print its clone URL."""
    settings: KeeperSettings = ctx.obj["settings"]
    destinations = settings.destination.onedev

    if not 0 <= index < len(destinations):
        click.echo(f"Error: No OneDev destination at index {index}", err=True)
        sys.exit(1)

    repo = Repository(name=name, url="", ssh_url="", token="", default_branch="", owner="", hoster="")
    try:
        clone_url = asyncio.run(get_or_create(destinations[index], repo))
    except RepoKeeperError as e:
        click.echo(f"Error: {e}", err=True)
        log.debug("provision_error", exc_info=True)
        sys.exit(1)

    click.echo(clone_url)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
