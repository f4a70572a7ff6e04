#!/usr/bin/env python3
"""
Echo-suppression state for bidirectional clipboard sync.

Loop prevention is critical: applying a pulled value to the local clipboard
produces a local-change notification, and pushing a value makes the server
report it back on the next pull. Without tracking, each direction would
re-trigger the other forever.

The state tracks:
- last_local_content: last value considered authoritative locally
- last_remote_content: last value obtained from the remote and applied
- last_remote_version_token: ETag of the last completed pull
- last_remote_hash: content hash of the last entry seen on or sent to the remote

Critical ordering: accept_remote() must be called BEFORE writing the local
clipboard so that the resulting change notification is recognized as an echo.

Push tasks, the pull loop and the host's transformer callback (possibly on a
foreign thread) all share one instance, so every read-modify-write happens
under a single lock.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum


class Observation(Enum):
    """Classification of a locally observed clipboard value."""

    ECHO = "echo"
    DUPLICATE = "duplicate"
    NEW = "new"


@dataclass
class EngineState:
    """
    Last-known local and remote values for loop prevention.

    Created empty at engine start and never persisted, so the first cycle
    after a restart may do one unnecessary round-trip.

    Attributes:
        last_local_content: Last authoritative local value, or None.
        last_remote_content: Last value applied from the remote, or None.
        last_remote_version_token: ETag of the last completed pull, or None.
        last_remote_hash: Hash of the last entry pulled or pushed, or "".
    """

    last_local_content: str | None = None
    last_remote_content: str | None = None
    last_remote_version_token: str | None = None
    last_remote_hash: str = ""
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def observe_local(self, value: str) -> Observation:
        """
        Classify a local clipboard value.

        Rules are evaluated in order, first match wins: equal to the last
        remote value is an ECHO of our own pull, equal to the last local
        value is a DUPLICATE, anything else is NEW and becomes the last
        local value.

        Args:
            value: Value reported by the local clipboard.

        Returns:
            The classification. Only NEW requires a push.
        """
        with self._lock:
            if value == self.last_remote_content:
                return Observation.ECHO
            if value == self.last_local_content:
                return Observation.DUPLICATE
            self.last_local_content = value
            return Observation.NEW

    def accept_remote(self, value: str) -> bool:
        """
        Decide whether a pulled value must be written to the local clipboard.

        If accepted, both last values are set to it so the change
        notification caused by the clipboard write is classified as an echo.

        CRITICAL: Call BEFORE writing the local clipboard.

        Returns:
            True if the value is new and must be applied locally.
        """
        with self._lock:
            if value in (self.last_local_content, self.last_remote_content):
                return False
            self.last_remote_content = value
            self.last_local_content = value
            return True

    def version_token(self) -> str | None:
        """Return the ETag to send with the next conditional fetch."""
        with self._lock:
            return self.last_remote_version_token

    def record_version_token(self, token: str | None) -> None:
        """Remember the ETag to send with the next conditional fetch."""
        if token is None:
            return
        with self._lock:
            self.last_remote_version_token = token

    def is_known_remote_hash(self, content_hash: str) -> bool:
        """Return True if this hash was already pulled or pushed."""
        if not content_hash:
            return False
        with self._lock:
            return content_hash.lower() == self.last_remote_hash.lower()

    def record_remote_hash(self, content_hash: str) -> None:
        """Remember the hash of the entry now on the remote."""
        if not content_hash:
            return
        with self._lock:
            self.last_remote_hash = content_hash

    def is_current_local(self, value: str) -> bool:
        """Return True if value is still the authoritative local value."""
        with self._lock:
            return value == self.last_local_content

    def record_pushed(self, value: str, content_hash: str) -> bool:
        """
        Record a successful push unless it has been superseded.

        A push that finishes after a newer local change or a pull has
        replaced the local value must not overwrite their state.

        Returns:
            True if the push was recorded.
        """
        with self._lock:
            if value != self.last_local_content:
                return False
            if content_hash:
                self.last_remote_hash = content_hash
            return True

    def clear(self) -> None:
        """Reset to the initial empty state."""
        with self._lock:
            self.last_local_content = None
            self.last_remote_content = None
            self.last_remote_version_token = None
            self.last_remote_hash = ""
