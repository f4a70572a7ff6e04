"""CLI handling for hclipsync.

This module provides the command-line interface for hclipsync, handling
argument parsing via click, logging configuration, and dispatching to the
daemon, a single pull, or a connection test.

Every option can also be set through an HCLIPSYNC_* environment variable,
which keeps the password off the command line.

Usage:
    hclipsync --server URL [--username U] [--password P] [--interval N]
              [--download-dir DIR] [--once | --probe] [--verbose]
"""

import sys

import click

from hclipsync.main_logging import configure_logging
from hclipsync.main_options import MutuallyExclusiveOption
from hclipsync.settings import (
    KEY_DOWNLOAD_PATH,
    KEY_PASSWORD,
    KEY_QUICK_SYNC,
    KEY_SERVER_ADDRESS,
    KEY_SYNC_INTERVAL,
    KEY_USERNAME,
    SettingsStore,
)


@click.command(context_settings={"auto_envvar_prefix": "HCLIPSYNC"})
@click.option("--server", required=True, help="Clipboard server address or metadata URL")
@click.option("--username", default="", help="Basic auth user name")
@click.option("--password", default="", help="Basic auth password")
@click.option(
    "--interval",
    type=int,
    default=3,
    show_default=True,
    help="Poll interval in seconds (clamped to 1-60)",
)
@click.option(
    "--download-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for downloaded files",
)
@click.option(
    "--once",
    is_flag=True,
    cls=MutuallyExclusiveOption,
    exclusive_with=["probe"],
    help="Pull once and exit",
)
@click.option(
    "--probe",
    is_flag=True,
    cls=MutuallyExclusiveOption,
    exclusive_with=["once"],
    help="Test the connection and exit",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable DEBUG-level logging",
)
def main(
    server: str,
    username: str,
    password: str,
    interval: int,
    download_dir: str | None,
    once: bool,
    probe: bool,
    verbose: bool,
) -> None:
    """Synchronize the clipboard with a remote clipboard server over HTTP."""
    if not server.strip():
        raise click.UsageError("--server must not be blank")

    configure_logging(verbose)

    store = SettingsStore(
        {
            KEY_SERVER_ADDRESS: server,
            KEY_USERNAME: username,
            KEY_PASSWORD: password,
            KEY_QUICK_SYNC: True,
            KEY_SYNC_INTERVAL: interval,
            KEY_DOWNLOAD_PATH: download_dir,
        }
    )
    _run_mode(store, once, probe)


def _run_mode(store: SettingsStore, once: bool, probe: bool) -> None:
    """Run the selected mode.

    Args:
        store: Settings built from the command line.
        once: Pull once and exit.
        probe: Test the connection and exit.
    """
    import asyncio

    from hclipsync.daemon import run_daemon, run_once, run_probe
    from hclipsync.errors import SyncError

    if probe:
        result = asyncio.run(run_probe(store))
        if not result.ok:
            click.echo(f"Error: {result.message}", err=True)
            sys.exit(1)
        click.echo(result.message)
        return

    try:
        if once:
            outcome = asyncio.run(run_once(store))
            click.echo(f"Pull finished: {outcome.value}")
        else:
            asyncio.run(run_daemon(store))
    except SyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
