#!/usr/bin/env python3
"""Tests for the clipboard adapter and the pyperclip desktop host."""
from unittest.mock import MagicMock, patch

import pyperclip
import pytest

from hclipsync.content import EntryKind
from hclipsync.local_adapter import ClipboardAdapter, PyperclipHost


def test_adapter_applies_text(host) -> None:
    assert ClipboardAdapter(host).apply(EntryKind.TEXT, "hello") is True
    assert host.writes == [("text", "hello")]


def test_adapter_applies_file_reference(host) -> None:
    ClipboardAdapter(host).apply(EntryKind.FILE, "file:///tmp/a.pdf")
    assert host.writes == [("file", "file:///tmp/a.pdf")]


def test_adapter_logs_host_failure() -> None:
    failing = MagicMock()
    failing.set_text.side_effect = RuntimeError("no clipboard")
    assert ClipboardAdapter(failing).apply(EntryKind.TEXT, "x") is False


def test_pyperclip_host_reports_changes_once() -> None:
    host = PyperclipHost()
    seen: list[str] = []
    host.register_transformer(lambda v: seen.append(v) or v)

    with patch("hclipsync.local_adapter.pyperclip.paste", side_effect=["a", "a", "b", ""]):
        host.poll_once()
        host.poll_once()
        host.poll_once()
        host.poll_once()

    assert seen == ["a", "b"]


def test_pyperclip_host_read_error_returns_none() -> None:
    host = PyperclipHost()
    with patch(
        "hclipsync.local_adapter.pyperclip.paste",
        side_effect=pyperclip.PyperclipException("no backend"),
    ):
        assert host.read() is None


def test_pyperclip_host_set_text_and_file() -> None:
    host = PyperclipHost()
    with patch("hclipsync.local_adapter.pyperclip.copy") as mock_copy:
        host.set_text("hello")
        host.set_file("file:///tmp/x")
    assert [c.args[0] for c in mock_copy.call_args_list] == ["hello", "file:///tmp/x"]


def test_pyperclip_host_unregister() -> None:
    host = PyperclipHost()
    seen: list[str] = []

    def transformer(value: str) -> str:
        seen.append(value)
        return value

    host.register_transformer(transformer)
    host.unregister_transformer(transformer)
    with patch("hclipsync.local_adapter.pyperclip.paste", return_value="x"):
        host.poll_once()
    assert seen == []


@pytest.mark.asyncio
async def test_pyperclip_host_start_does_not_report_initial_content() -> None:
    host = PyperclipHost(poll_interval=0.01)
    seen: list[str] = []
    host.register_transformer(lambda v: seen.append(v) or v)
    with patch("hclipsync.local_adapter.pyperclip.paste", return_value="already there"):
        await host.start()
        host.poll_once()
        await host.stop()
    assert seen == []
