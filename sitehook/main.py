"""sitehook entry point: wires the server together and runs it."""

from __future__ import annotations

import asyncio
import signal
import sys
from pathlib import Path
from typing import BinaryIO

import click

from sitehook import __version__
from sitehook.config import Settings, load_settings
from sitehook.deploy.journal import DeploymentLogger
from sitehook.deploy.trigger import DeploymentTrigger
from sitehook.errors import ConfigError
from sitehook.utils.logging import get_logger, setup_logging
from sitehook.webhooks.server import WebhookServer
from sitehook.webhooks.signature import sign

log = get_logger(__name__)


async def run(settings: Settings) -> None:
    server = WebhookServer(settings)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        log.info("shutdown_signal")
        stop_event.set()

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, _signal_handler)

    log.info("sitehook_starting", version=__version__)
    await server.start()

    try:
        if sys.platform == "win32":
            while not stop_event.is_set():
                await asyncio.sleep(1)
        else:
            await stop_event.wait()
    except KeyboardInterrupt:
        pass
    finally:
        await server.stop()


async def deploy_once(settings: Settings) -> bool:
    """Run the deploy sequence outside of a webhook and record it."""
    attempt = await DeploymentTrigger(settings.deploy).run()
    await DeploymentLogger(settings.deploy.log_file).append(attempt)
    return attempt.succeeded


def _load(config_path: str | None, log_level: str | None) -> Settings:
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if log_level:
        settings.log_level = log_level
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    return settings


@click.group()
@click.version_option(__version__, prog_name="sitehook")
def cli() -> None:
    """Serve the documentation site and redeploy it on signed pushes."""


@cli.command()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
def serve(config_path: str | None, log_level: str | None) -> None:
    """Start the HTTP server."""
    settings = _load(config_path, log_level)
    asyncio.run(run(settings))


@cli.command()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
def deploy(config_path: str | None, log_level: str | None) -> None:
    """Run the deploy commands once, as a push would."""
    settings = _load(config_path, log_level)
    if not asyncio.run(deploy_once(settings)):
        raise SystemExit(1)


@cli.command("sign")
@click.option("--secret", envvar="SITEHOOK_WEBHOOK__SECRET", required=True, help="Shared webhook secret")
@click.argument("payload", type=click.File("rb"))
def sign_cmd(secret: str, payload: BinaryIO) -> None:
    """Print the signature header value for PAYLOAD (use - for stdin)."""
    click.echo(sign(secret.encode("utf-8"), payload.read()))


@cli.command()
@click.option("--config", "config_path", default=None, help="Path to config YAML file")
@click.option("-n", "count", default=5, show_default=True, help="Number of attempts to show")
def history(config_path: str | None, count: int) -> None:
    """Show the most recent entries of the deploy log."""
    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    journal = DeploymentLogger(Path(settings.deploy.log_file))
    blocks = journal.read_blocks()
    if not blocks:
        click.echo(f"No deployments recorded in {journal.path}")
        return
    for block in blocks[-count:] if count > 0 else blocks:
        click.echo(block)
        click.echo()


if __name__ == "__main__":
    cli()
