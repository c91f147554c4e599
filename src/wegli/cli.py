"""CLI interface for the weg.li client"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional

import click

from wegli.domain.errors import RateLimitedError, WegliError
from wegli.infrastructure.config.config_manager import ConfigManager, ConfigurationError
from wegli.infrastructure.wegli.client import WegliClient

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _error_message(exc: WegliError) -> str:
    if isinstance(exc, RateLimitedError) and exc.retry_after is not None:
        return f"Rate limited by weg.li, retry in {exc.retry_after} seconds"
    if isinstance(exc, RateLimitedError):
        return "Rate limited by weg.li, retry later"
    return f"weg.li API error: {exc}"


def _create_client(ctx: click.Context) -> WegliClient:
    """Create a WegliClient from config file, environment and CLI overrides"""
    try:
        config_manager = ConfigManager(config_path=ctx.obj.get("config_path"))
    except ConfigurationError as e:
        _die(str(e), verbose=ctx.obj.get("verbose", False), exc=e)

    api_config = config_manager.get_api_config()
    retry_config = config_manager.get_retry_config()
    policy = retry_config.to_policy()
    if ctx.obj.get("max_retries") is not None:
        policy = policy.model_copy(update={"max_retries": ctx.obj["max_retries"]})

    try:
        return WegliClient(
            api_url=ctx.obj.get("api_url") or api_config.url,
            api_token=api_config.token,
            retry_policy=policy,
            timeout=api_config.timeout,
            rate_limit=retry_config.rate_limit,
        )
    except ValueError as e:
        _die(str(e), verbose=ctx.obj.get("verbose", False), exc=e)


def _run(ctx: click.Context, fetch: Callable[[WegliClient], Any]) -> None:
    """Fetch with a fresh client and print the result as JSON"""
    verbose = ctx.obj.get("verbose", False)
    client = _create_client(ctx)
    try:
        result = fetch(client)
    except WegliError as e:
        _die(_error_message(e), verbose=verbose, exc=e)

    if isinstance(result, list):
        payload = [item.to_json() for item in result]
    else:
        payload = result.to_json()
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to .wegli.yml config file",
)
@click.option("--api-url", type=str, help="API base URL. Overrides config.")
@click.option(
    "--max-retries",
    type=click.IntRange(min=0),
    help="Retries after a failed request (0 disables retrying). Overrides config.",
)
@click.pass_context
def cli(ctx, verbose: bool, config: Path, api_url: str, max_retries: Optional[int]):
    """wegli - client for the weg.li API"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["api_url"] = api_url
    ctx.obj["max_retries"] = max_retries


@cli.command()
@click.pass_context
def charges(ctx):
    """List all charges."""
    _run(ctx, lambda client: client.get_charges())


@cli.command()
@click.argument("tbnr", type=str)
@click.pass_context
def charge(ctx, tbnr: str):
    """Show a single charge.

    TBNR: "Tatbestandsnummer" of the charge
    """
    _run(ctx, lambda client: client.get_charge(tbnr))


@cli.command()
@click.pass_context
def districts(ctx):
    """List all districts."""
    _run(ctx, lambda client: client.get_districts())


@cli.command()
@click.argument("zip_code", metavar="ZIP", type=str)
@click.pass_context
def district(ctx, zip_code: str):
    """Show the district of a zip code."""
    _run(ctx, lambda client: client.get_district(zip_code))


@cli.command()
@click.pass_context
def notices(ctx):
    """List the notices of the authenticated user."""
    _run(ctx, lambda client: client.get_notices())


@cli.command()
@click.argument("token", type=str)
@click.pass_context
def notice(ctx, token: str):
    """Show a single notice by its token."""
    _run(ctx, lambda client: client.get_notice(token))


@cli.command()
@click.option("--public", is_flag=True, help="List public exports instead of your own")
@click.pass_context
def exports(ctx, public: bool):
    """List export metadata."""
    _run(ctx, lambda client: client.get_exports(public=public))


@cli.command("download-export")
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--public", is_flag=True, help="Download the latest public export")
@click.option("--unzip/--no-unzip", default=True, help="Extract the archive (default: yes)")
@click.pass_context
def download_export(ctx, path: Path, public: bool, unzip: bool):
    """Download the latest notice export.

    PATH: Directory to download (and extract) the export into
    """
    verbose = ctx.obj.get("verbose", False)
    client = _create_client(ctx)
    try:
        result = client.download_latest_export(path, public=public, unzip=unzip)
    except WegliError as e:
        _die(_error_message(e), verbose=verbose, exc=e)
    click.echo(str(result))


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()
