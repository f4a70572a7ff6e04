#!/usr/bin/env python3
"""Clipboard sync engine and poll scheduler.

The engine is what the host runtime starts and stops. It registers a
transformer that sees every local clipboard change and spawns a push for
genuine changes, and it runs a single background loop that pulls from the
server every few seconds.

Scheduler states: idle (disabled, no server, display off or disconnected)
and running (poll task active). Any restart stops the previous poll task
first, so two pull loops never run at once.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from hclipsync.constants import POWER_SAVE_INTERVAL, RECOVERY_DELAY
from hclipsync.content import ResourceReader, read_local_resource
from hclipsync.engine_state import EngineState, Observation
from hclipsync.errors import AuthError, ConfigMissing, SyncError
from hclipsync.local_adapter import ClipboardAdapter
from hclipsync.remote_client import ProbeResult, RemoteClient
from hclipsync.settings import RESTART_KEYS, SettingsStore, SyncSettings
from hclipsync.sync_handlers import PullOutcome, pull_once, push_value

if TYPE_CHECKING:
    from hclipsync.local_adapter import ClipboardHost

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str, str], RemoteClient]


class SyncEngine:
    """Bidirectional sync between a clipboard host and a remote server.

    Args:
        host: Host runtime owning the local clipboard.
        store: Settings store, read for every cycle.
        client_factory: Builds a RemoteClient from (address, user, password).
        on_auth_error: Called with the error when credentials are rejected.
        read_resource: Resolver for local file references.
    """

    def __init__(
        self,
        host: ClipboardHost,
        store: SettingsStore,
        client_factory: ClientFactory = RemoteClient,
        on_auth_error: Callable[[AuthError], None] | None = None,
        read_resource: ResourceReader = read_local_resource,
    ) -> None:
        self.host = host
        self.store = store
        self.client_factory = client_factory
        self.on_auth_error = on_auth_error
        self.read_resource = read_resource
        self.state = EngineState()
        self.adapter = ClipboardAdapter(host)
        self.power_save_mode = False
        self._display_on = True
        self._connected = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._poll_task: asyncio.Task | None = None
        self._push_tasks: set[asyncio.Task] = set()
        self._client: RemoteClient | None = None
        self._client_key: tuple[str, str, str] | None = None

    # Host lifecycle

    def start(self) -> None:
        """Bind to the running event loop and watch for settings changes."""
        self._loop = asyncio.get_running_loop()
        self.store.subscribe(self._on_setting_changed)
        logger.debug("Engine started")

    async def stop(self) -> None:
        """Disconnect, stop polling and abandon in-flight pushes."""
        self.store.unsubscribe(self._on_setting_changed)
        tasks = list(self._push_tasks)
        if self._poll_task is not None:
            tasks.append(self._poll_task)
        self.on_disconnected()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if self._client is not None:
            self._client.close()
            self._client = None
            self._client_key = None
        logger.debug("Engine stopped")

    def on_connected(self) -> None:
        """Register the transformer with the host and start polling."""
        self.host.register_transformer(self.on_local_change)
        self._connected = True
        logger.debug("Connected to clipboard host")
        self.start_polling()

    def on_disconnected(self) -> None:
        if self._connected:
            self.host.unregister_transformer(self.on_local_change)
            self._connected = False
            logger.debug("Disconnected from clipboard host")
        self.stop_polling()

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def settings(self) -> SyncSettings:
        return SyncSettings.from_store(self.store)

    def _client_for(self, settings: SyncSettings) -> RemoteClient:
        """Return the client for the configured server, rebuilding it on change.

        Raises:
            ConfigMissing: If no server address is configured.
        """
        key = (settings.server_address.strip(), settings.username, settings.password)
        if self._client is None or key != self._client_key:
            client = self.client_factory(*key)
            if self._client is not None:
                self._client.close()
                if self._client_key is not None and self._client_key[0] != key[0]:
                    # Tokens and hashes of another server mean nothing here
                    self.state.clear()
            self._client = client
            self._client_key = key
        return self._client

    def _report_auth_error(self, error: AuthError) -> None:
        logger.error("Server rejected credentials: %s", error)
        if self.on_auth_error is not None:
            self.on_auth_error(error)

    # Push direction

    def on_local_change(self, value: str) -> str:
        """Transformer called by the host for every local clipboard change.

        Safe to call from any thread. Returns the value unchanged.
        """
        observation = self.state.observe_local(value)
        if observation is not Observation.NEW:
            logger.debug("[Push] Ignoring %s local change", observation.value)
            return value
        logger.debug("[Push] Detected local change, triggering upload")
        self._schedule_push(value)
        return value

    def _schedule_push(self, value: str) -> None:
        if not self.settings().enabled:
            logger.debug("[Push] Sync disabled, skipping upload")
            return
        if self._loop is None or self._loop.is_closed():
            logger.warning("[Push] Engine not started, dropping local change")
            return
        self._loop.call_soon_threadsafe(self._start_push_task, value)

    def _start_push_task(self, value: str) -> None:
        task = asyncio.get_running_loop().create_task(self._push(value))
        self._push_tasks.add(task)
        task.add_done_callback(self._push_tasks.discard)

    async def _push(self, value: str) -> bool:
        """Run one push, logging failures instead of raising them."""
        try:
            client = self._client_for(self.settings())
            return await push_value(self.state, client, value, self.read_resource)
        except AuthError as e:
            self._report_auth_error(e)
        except ConfigMissing:
            logger.debug("[Push] No server configured, skipping upload")
        except SyncError as e:
            logger.error("[Push] Failed to upload clipboard: %s", e)
        return False

    async def wait_for_pushes(self) -> None:
        """Wait until all pushes spawned so far have finished."""
        await asyncio.sleep(0)
        while self._push_tasks:
            await asyncio.gather(*list(self._push_tasks), return_exceptions=True)

    # Pull direction

    async def pull(self, settings: SyncSettings | None = None) -> PullOutcome:
        """Run one pull cycle with the current settings.

        Raises:
            ConfigMissing: If no server address is configured.
            SyncError: On any pull failure.
        """
        settings = settings or self.settings()
        client = self._client_for(settings)
        return await pull_once(self.state, client, self.adapter, settings.download_path)

    def tick_interval(self, settings: SyncSettings) -> float:
        """Sleep before the next tick, read after the cycle completes."""
        if self.power_save_mode:
            return POWER_SAVE_INTERVAL
        return settings.interval

    async def run_tick(self) -> float:
        """Run one scheduler tick.

        Errors never escape: they are logged and the tick asks for the
        recovery delay instead of the normal interval.

        Returns:
            Seconds to sleep before the next tick.
        """
        settings = self.settings()
        try:
            outcome = await self.pull(settings)
            logger.debug("[Pull] Cycle finished: %s", outcome.value)
        except ConfigMissing:
            logger.debug("[Pull] No server configured")
        except AuthError as e:
            self._report_auth_error(e)
            return max(self.tick_interval(settings), RECOVERY_DELAY)
        except SyncError as e:
            logger.error("[Pull] Error checking remote clipboard: %s", e)
            return RECOVERY_DELAY
        except Exception:
            logger.exception("[Pull] Loop error")
            return RECOVERY_DELAY
        return self.tick_interval(settings)

    async def _poll_loop(self) -> None:
        logger.debug("[Pull] Starting periodic sync")
        while True:
            delay = await self.run_tick()
            await asyncio.sleep(delay)

    def start_polling(self) -> None:
        """(Re)start the poll loop if sync is enabled and the display is on."""
        self.stop_polling()
        settings = self.settings()
        if not settings.quick_sync:
            logger.debug("[Pull] Quick sync disabled, stopping background polling")
            return
        if not settings.enabled:
            logger.debug("[Pull] No server configured, not polling")
            return
        if not self._display_on:
            logger.debug("[Pull] Display off, not polling")
            return
        self._poll_task = asyncio.get_running_loop().create_task(self._poll_loop())

    def stop_polling(self) -> None:
        """Cancel the poll loop, interrupting any in-flight sleep."""
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None

    # External signals

    def on_display_off(self) -> None:
        logger.debug("Display off, stopping sync")
        self._display_on = False
        self.stop_polling()

    def on_display_on(self) -> None:
        logger.debug("Display on, restarting sync")
        self._display_on = True
        if self._connected:
            self.start_polling()

    def on_power_save_changed(self, enabled: bool) -> None:
        logger.debug("Power save mode changed to %s, restarting sync", enabled)
        self.power_save_mode = enabled
        if self._connected:
            self.start_polling()

    def _on_setting_changed(self, key: str) -> None:
        """Settings listener; may run on any thread."""
        if key not in RESTART_KEYS or not self._connected or self._loop is None:
            return
        logger.debug("Preference changed: %s, restarting sync", key)
        self._loop.call_soon_threadsafe(self.start_polling)

    # Connectivity test

    async def probe(self) -> ProbeResult:
        """Test the configured server without touching engine state."""
        settings = self.settings()
        try:
            client = self.client_factory(
                settings.server_address, settings.username, settings.password
            )
        except ConfigMissing as e:
            return ProbeResult(False, str(e))
        try:
            return await asyncio.to_thread(client.probe)
        finally:
            client.close()
