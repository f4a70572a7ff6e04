#!/usr/bin/env python3
"""Pytest fixtures for hclipsync tests.

Provides a recording clipboard host, settings stores, fresh engine state,
mocked remote clients and a helper for fake HTTP responses.
"""

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from hclipsync.engine_state import EngineState
from hclipsync.remote_client import RemoteClient
from hclipsync.settings import SettingsStore


class RecordingHost:
    """Clipboard host that records writes and lets tests fire changes."""

    def __init__(self) -> None:
        self.transformers: list[Callable[[str], str]] = []
        self.writes: list[tuple[str, str]] = []

    def register_transformer(self, transformer: Callable[[str], str]) -> None:
        self.transformers.append(transformer)

    def unregister_transformer(self, transformer: Callable[[str], str]) -> None:
        self.transformers.remove(transformer)

    def set_text(self, text: str) -> None:
        self.writes.append(("text", text))

    def set_file(self, uri: str) -> None:
        self.writes.append(("file", uri))

    def copy(self, value: str) -> str:
        """Simulate the user copying value locally."""
        for transformer in self.transformers:
            value = transformer(value)
        return value


def make_response(
    status: int = 200,
    content: bytes = b"",
    headers: dict[str, str] | None = None,
    reason: str = "",
) -> MagicMock:
    """Create a mock requests.Response."""
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.reason = reason
    response.content = content
    response.headers = headers or {}
    return response


@pytest.fixture
def engine_state() -> EngineState:
    """Create a fresh EngineState instance for testing."""
    return EngineState()


@pytest.fixture
def host() -> RecordingHost:
    return RecordingHost()


@pytest.fixture
def store() -> SettingsStore:
    """Settings store with sync enabled against a test server."""
    return SettingsStore(
        {
            "server_address": "sync.example.test:5033",
            "username": "user",
            "password": "secret",
            "quick_sync": True,
            "sync_interval": "3",
        }
    )


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a mock RemoteClient."""
    return MagicMock(spec=RemoteClient)


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock requests.Session."""
    return MagicMock()
