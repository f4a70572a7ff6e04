#!/usr/bin/env python3
"""Tests for the HTTP remote client with a mocked requests.Session."""
import json
import logging
from unittest.mock import MagicMock

import pytest
import requests
from conftest import make_response
from requests.auth import HTTPBasicAuth

from hclipsync.content import ClipboardEntry, EntryKind, file_entry, text_entry
from hclipsync.errors import (
    AuthError,
    ConfigMissing,
    NotFoundError,
    ProtocolError,
    ServerError,
    TransportError,
)
from hclipsync.hashing import hash_file
from hclipsync.remote_client import REQUEST_TIMEOUT, Metadata, NotModified, RemoteClient

METADATA_URL = "http://sync.test/SyncClipboard.json"


@pytest.fixture
def client(mock_session: MagicMock) -> RemoteClient:
    return RemoteClient("sync.test", "user", "secret", session=mock_session)


def _metadata_body(**fields: object) -> bytes:
    return json.dumps(fields).encode("utf-8")


def test_client_uses_basic_auth(client: RemoteClient, mock_session: MagicMock) -> None:
    assert mock_session.auth == HTTPBasicAuth("user", "secret")


def test_client_blank_server_raises_config_missing(mock_session: MagicMock) -> None:
    with pytest.raises(ConfigMissing):
        RemoteClient(" ", session=mock_session)


def test_fetch_metadata_returns_entry_and_etag(
    client: RemoteClient, mock_session: MagicMock
) -> None:
    mock_session.request.return_value = make_response(
        200, _metadata_body(Type="Text", Text="hello", Hash="h1"), {"ETag": '"v2"'}
    )
    result = client.fetch_metadata()

    assert isinstance(result, Metadata)
    assert result.entry.text == "hello"
    assert result.version_token == '"v2"'
    mock_session.request.assert_called_once_with(
        "GET", METADATA_URL, timeout=REQUEST_TIMEOUT, headers={}
    )


def test_fetch_metadata_sends_if_none_match(
    client: RemoteClient, mock_session: MagicMock
) -> None:
    mock_session.request.return_value = make_response(304)
    result = client.fetch_metadata('"v1"')

    assert result == NotModified('"v1"')
    _, kwargs = mock_session.request.call_args
    assert kwargs["headers"] == {"If-None-Match": '"v1"'}


def test_fetch_metadata_malformed_body_is_protocol_error(
    client: RemoteClient, mock_session: MagicMock
) -> None:
    mock_session.request.return_value = make_response(200, b"<html>oops</html>")
    with pytest.raises(ProtocolError):
        client.fetch_metadata()


@pytest.mark.parametrize(
    ("status", "error"),
    [(401, AuthError), (403, AuthError), (404, NotFoundError), (500, ServerError), (503, ServerError)],
)
def test_fetch_metadata_maps_status_codes(
    client: RemoteClient, mock_session: MagicMock, status: int, error: type
) -> None:
    mock_session.request.return_value = make_response(status, reason="nope")
    with pytest.raises(error) as exc_info:
        client.fetch_metadata()
    assert exc_info.value.status == status


@pytest.mark.parametrize(
    "exc", [requests.ConnectionError("refused"), requests.Timeout("slow")]
)
def test_transport_failures_are_typed(
    client: RemoteClient, mock_session: MagicMock, exc: Exception
) -> None:
    mock_session.request.side_effect = exc
    with pytest.raises(TransportError):
        client.fetch_metadata()


def test_fetch_payload_verified(client: RemoteClient, mock_session: MagicMock, caplog) -> None:
    data = b"pdf bytes"
    entry = file_entry("report.pdf", data)
    mock_session.request.return_value = make_response(200, data)

    with caplog.at_level(logging.WARNING):
        assert client.fetch_payload(entry) == data

    mock_session.request.assert_called_once_with(
        "GET", "http://sync.test/file/report.pdf", timeout=REQUEST_TIMEOUT
    )
    assert "IntegrityWarning" not in caplog.text


def test_fetch_payload_hash_mismatch_logs_and_returns(
    client: RemoteClient, mock_session: MagicMock, caplog
) -> None:
    """Test a mismatching payload is returned with one integrity warning."""
    entry = file_entry("report.pdf", b"original")
    mock_session.request.return_value = make_response(200, b"corrupted")

    with caplog.at_level(logging.WARNING):
        assert client.fetch_payload(entry) == b"corrupted"

    warnings = [r for r in caplog.records if "IntegrityWarning" in r.getMessage()]
    assert len(warnings) == 1
    assert warnings[0].levelno == logging.WARNING
    assert "[Pull] Hash mismatch for report.pdf" in warnings[0].getMessage()


def test_fetch_payload_text_hash_is_plain_sha256(
    client: RemoteClient, mock_session: MagicMock, caplog
) -> None:
    text = "long text payload"
    entry = ClipboardEntry(
        EntryKind.TEXT, "", text_entry(text).content_hash, 17, True, "text.txt"
    )
    mock_session.request.return_value = make_response(200, text.encode("utf-8"))
    with caplog.at_level(logging.WARNING):
        client.fetch_payload(entry)
    assert "IntegrityWarning" not in caplog.text


def test_fetch_payload_without_name_is_rejected(client: RemoteClient) -> None:
    with pytest.raises(ProtocolError):
        client.fetch_payload(text_entry("no payload"))


def test_upload_text_puts_metadata_only(client: RemoteClient, mock_session: MagicMock) -> None:
    mock_session.request.return_value = make_response(200)
    entry = text_entry("hello")
    client.upload_entry(entry)

    mock_session.request.assert_called_once()
    method, url = mock_session.request.call_args.args
    assert (method, url) == ("PUT", METADATA_URL)
    sent = json.loads(mock_session.request.call_args.kwargs["data"])
    assert sent["Text"] == "hello"
    assert sent["Hash"] == entry.content_hash


def test_upload_file_puts_payload_then_metadata(
    client: RemoteClient, mock_session: MagicMock
) -> None:
    mock_session.request.return_value = make_response(201)
    data = b"bytes"
    client.upload_entry(file_entry("a.bin", data), data)

    calls = [c.args for c in mock_session.request.call_args_list]
    assert calls == [("PUT", "http://sync.test/file/a.bin"), ("PUT", METADATA_URL)]
    assert mock_session.request.call_args_list[0].kwargs["data"] == data
    sent = json.loads(mock_session.request.call_args_list[1].kwargs["data"])
    assert sent["Hash"] == hash_file("a.bin", data)
    assert sent["HasData"] is True


def test_upload_payload_failure_skips_metadata(
    client: RemoteClient, mock_session: MagicMock
) -> None:
    """Test a failed payload upload never advertises the payload."""
    mock_session.request.return_value = make_response(500)
    with pytest.raises(ServerError):
        client.upload_entry(file_entry("a.bin", b"x"), b"x")
    assert mock_session.request.call_count == 1


def test_upload_metadata_failure_raises(client: RemoteClient, mock_session: MagicMock) -> None:
    mock_session.request.return_value = make_response(401)
    with pytest.raises(AuthError):
        client.upload_entry(text_entry("x"))


def test_probe_success(client: RemoteClient, mock_session: MagicMock) -> None:
    mock_session.request.return_value = make_response(200, b"{}")
    result = client.probe()
    assert result.ok is True
    assert result.status == 200


def test_probe_reports_status(client: RemoteClient, mock_session: MagicMock) -> None:
    mock_session.request.return_value = make_response(401, reason="Unauthorized")
    result = client.probe()
    assert result.ok is False
    assert result.status == 401
    assert "401" in result.message


def test_probe_reports_transport_error(client: RemoteClient, mock_session: MagicMock) -> None:
    mock_session.request.side_effect = requests.ConnectionError("refused")
    result = client.probe()
    assert result.ok is False
    assert result.status is None
