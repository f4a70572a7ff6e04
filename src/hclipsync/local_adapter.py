#!/usr/bin/env python3
"""Boundary between the sync engine and the local clipboard host.

The host runtime owns the clipboard. It calls registered transformers with
every new clipboard value and offers methods to set the clipboard. The
engine registers its transformer on connect and writes pulled values through
ClipboardAdapter.

PyperclipHost is a desktop host: it polls the system clipboard through
pyperclip and plays the role of the runtime's change notifications.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Callable, Protocol

import pyperclip

from hclipsync.constants import HOST_POLL_INTERVAL
from hclipsync.content import EntryKind

logger = logging.getLogger(__name__)

Transformer = Callable[[str], str]


class ClipboardHost(Protocol):
    """What the engine needs from the host runtime."""

    def register_transformer(self, transformer: Transformer) -> None: ...

    def unregister_transformer(self, transformer: Transformer) -> None: ...

    def set_text(self, text: str) -> None: ...

    def set_file(self, uri: str) -> None: ...


class ClipboardAdapter:
    """Applies resolved remote values to the local clipboard."""

    def __init__(self, host: ClipboardHost) -> None:
        self.host = host

    def apply(self, kind: EntryKind, value: str) -> bool:
        """Write a pulled value to the local clipboard.

        Args:
            kind: Entry kind; File values are resource references.
            value: Text or file reference to apply.

        Returns:
            True if the host accepted the value.
        """
        try:
            if kind is EntryKind.TEXT:
                self.host.set_text(value)
            else:
                self.host.set_file(value)
        except Exception as e:
            logger.error("[Pull] Failed to update local clipboard: %s", e)
            return False
        logger.debug("[Pull] Local clipboard updated (%s)", kind.value)
        return True


class PyperclipHost:
    """Desktop clipboard host polling the system clipboard via pyperclip.

    Args:
        poll_interval: Seconds between clipboard reads.
    """

    def __init__(self, poll_interval: float = HOST_POLL_INTERVAL) -> None:
        self.poll_interval = poll_interval
        self._transformers: list[Transformer] = []
        self._last_seen: str | None = None
        self._task: asyncio.Task | None = None

    def register_transformer(self, transformer: Transformer) -> None:
        if transformer not in self._transformers:
            self._transformers.append(transformer)

    def unregister_transformer(self, transformer: Transformer) -> None:
        if transformer in self._transformers:
            self._transformers.remove(transformer)

    def set_text(self, text: str) -> None:
        pyperclip.copy(text)

    def set_file(self, uri: str) -> None:
        # No file clipboard through pyperclip; the URI is copied as text.
        pyperclip.copy(uri)

    def read(self) -> str | None:
        """Read the clipboard, returning None if it is empty or unreadable."""
        try:
            content = pyperclip.paste()
        except pyperclip.PyperclipException as e:
            logger.error("Failed to read clipboard: %s", e)
            return None
        return content or None

    def poll_once(self) -> None:
        """Notify transformers if the clipboard changed since the last poll."""
        current = self.read()
        if current is None or current == self._last_seen:
            return
        self._last_seen = current
        value = current
        for transformer in list(self._transformers):
            value = transformer(value)

    async def start(self) -> None:
        """Start polling. The current clipboard content is not reported."""
        if self._task is not None:
            return
        self._last_seen = self.read()
        self._task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _poll_loop(self) -> None:
        while True:
            self.poll_once()
            await asyncio.sleep(self.poll_interval)
