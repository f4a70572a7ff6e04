#!/usr/bin/env python3
"""Tests for server address normalization."""
import pytest

from hclipsync.endpoints import payload_url, resolve_endpoints
from hclipsync.errors import ConfigMissing


@pytest.mark.parametrize(
    "address",
    [
        "192.168.1.5:5033",
        "192.168.1.5:5033/",
        "http://192.168.1.5:5033",
        "http://192.168.1.5:5033//",
        "http://192.168.1.5:5033/SyncClipboard.json",
        "  192.168.1.5:5033/syncclipboard.json  ",
    ],
)
def test_resolve_endpoints_same_pair(address: str) -> None:
    """Test bare hosts and metadata URLs resolve to the same pair."""
    base, metadata = resolve_endpoints(address)
    assert base == "http://192.168.1.5:5033/"
    assert metadata == "http://192.168.1.5:5033/SyncClipboard.json"


def test_resolve_endpoints_keeps_https_and_path() -> None:
    base, metadata = resolve_endpoints("https://dav.example.com/clip")
    assert base == "https://dav.example.com/clip/"
    assert metadata == "https://dav.example.com/clip/SyncClipboard.json"


@pytest.mark.parametrize("address", ["", "   "])
def test_resolve_endpoints_blank_is_config_missing(address: str) -> None:
    with pytest.raises(ConfigMissing):
        resolve_endpoints(address)


def test_payload_url_quotes_name() -> None:
    url = payload_url("http://host/", "my report.pdf")
    assert url == "http://host/file/my%20report.pdf"
