#!/usr/bin/env python3
"""User configuration for clipboard sync.

The configuration is owned by the host (a preferences screen on a phone,
command-line options on a desktop). The engine only reads it through a
SettingsStore, a small key-value store that notifies listeners on change,
and snapshots it into a SyncSettings for each cycle.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from hclipsync.constants import DEFAULT_INTERVAL, MAX_INTERVAL, MIN_INTERVAL

logger = logging.getLogger(__name__)

KEY_SERVER_ADDRESS = "server_address"
KEY_USERNAME = "username"
KEY_PASSWORD = "password"
KEY_QUICK_SYNC = "quick_sync"
KEY_SYNC_INTERVAL = "sync_interval"
KEY_DOWNLOAD_PATH = "download_path"

# Changing any of these restarts the poll loop.
RESTART_KEYS: frozenset[str] = frozenset(
    {KEY_QUICK_SYNC, KEY_SYNC_INTERVAL, KEY_SERVER_ADDRESS}
)

SettingsListener = Callable[[str], None]


class SettingsStore:
    """Thread-safe key-value store with per-key change notification."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})
        self._listeners: list[SettingsListener] = []
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a value and notify listeners if it changed."""
        self.update({key: value})

    def update(self, values: Mapping[str, Any]) -> None:
        """Store several values, then notify listeners once per changed key."""
        with self._lock:
            changed = [k for k, v in values.items() if self._values.get(k) != v]
            self._values.update(values)
            listeners = list(self._listeners)
        for key in changed:
            for listener in listeners:
                listener(key)

    def subscribe(self, listener: SettingsListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: SettingsListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)


def clamp_interval(value: Any) -> int:
    """
    Parse and clamp a poll interval.

    Args:
        value: Configured interval (int or numeric string).

    Returns:
        The interval in seconds within [MIN_INTERVAL, MAX_INTERVAL], or
        DEFAULT_INTERVAL if the value is missing or not an integer.
    """
    try:
        interval = int(str(value).strip())
    except (TypeError, ValueError):
        if value is not None:
            logger.warning("Invalid sync interval %r, using %d", value, DEFAULT_INTERVAL)
        return DEFAULT_INTERVAL
    return max(MIN_INTERVAL, min(MAX_INTERVAL, interval))


def _as_flag(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class SyncSettings:
    """Read-only snapshot of the sync configuration.

    Attributes:
        server_address: Server address as typed by the user.
        username: Basic auth user name.
        password: Basic auth password.
        quick_sync: Whether sync is switched on.
        interval: Poll interval in seconds, already clamped.
        download_path: Directory for downloaded file payloads, or None.
    """

    server_address: str = ""
    username: str = ""
    password: str = ""
    quick_sync: bool = True
    interval: int = DEFAULT_INTERVAL
    download_path: str | None = None

    @property
    def enabled(self) -> bool:
        """Sync runs only when switched on and a server is configured."""
        return self.quick_sync and bool(self.server_address.strip())

    @classmethod
    def from_store(cls, store: SettingsStore) -> SyncSettings:
        return cls(
            server_address=str(store.get(KEY_SERVER_ADDRESS) or ""),
            username=str(store.get(KEY_USERNAME) or ""),
            password=str(store.get(KEY_PASSWORD) or ""),
            quick_sync=_as_flag(store.get(KEY_QUICK_SYNC), True),
            interval=clamp_interval(store.get(KEY_SYNC_INTERVAL)),
            download_path=store.get(KEY_DOWNLOAD_PATH) or None,
        )
