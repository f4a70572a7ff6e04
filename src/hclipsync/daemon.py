#!/usr/bin/env python3
"""Desktop daemon and one-shot modes for hclipsync.

The daemon plays the host runtime on a desktop: a PyperclipHost watches the
system clipboard, the engine is connected to it, and the process runs until
SIGINT or SIGTERM.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from hclipsync.engine import SyncEngine
from hclipsync.local_adapter import PyperclipHost
from hclipsync.remote_client import ProbeResult
from hclipsync.settings import SettingsStore
from hclipsync.sync_handlers import PullOutcome

logger = logging.getLogger(__name__)


async def run_daemon(store: SettingsStore, host: PyperclipHost | None = None) -> None:
    """Run bidirectional sync until a shutdown signal arrives.

    Args:
        store: Settings for the engine.
        host: Clipboard host, a PyperclipHost by default.
    """
    host = host or PyperclipHost()
    engine = SyncEngine(host, store)

    # Register signal handlers for clean shutdown
    shutdown_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_requested.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_requested.set)

    engine.start()
    engine.on_connected()
    await host.start()
    try:
        await shutdown_requested.wait()
        logger.debug("Shutdown requested")
    finally:
        loop.remove_signal_handler(signal.SIGINT)
        loop.remove_signal_handler(signal.SIGTERM)
        await host.stop()
        await engine.stop()


async def run_once(store: SettingsStore, host: PyperclipHost | None = None) -> PullOutcome:
    """Run a single pull cycle and return its outcome.

    Raises:
        SyncError: On any pull failure.
    """
    engine = SyncEngine(host or PyperclipHost(), store)
    engine.start()
    try:
        return await engine.pull()
    finally:
        await engine.stop()


async def run_probe(store: SettingsStore) -> ProbeResult:
    """Test the connection to the configured server."""
    engine = SyncEngine(PyperclipHost(), store)
    return await engine.probe()
