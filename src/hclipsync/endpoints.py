#!/usr/bin/env python3
"""Server address normalization.

Users type anything from "192.168.1.5:5033" to the full metadata URL. Both
must end up at the same (base URL, metadata URL) pair so the payload
resources can be derived from the base.
"""

from __future__ import annotations

from typing import NamedTuple
from urllib.parse import quote

from hclipsync.errors import ConfigMissing
from hclipsync.protocol import METADATA_NAME, PAYLOAD_PREFIX


class Endpoints(NamedTuple):
    """Resolved server locations."""

    base_url: str
    metadata_url: str


def _with_scheme(url: str) -> str:
    if url.lower().startswith(("http://", "https://")):
        return url
    return f"http://{url}"


def resolve_endpoints(server_url: str) -> Endpoints:
    """Normalize a user-supplied server address.

    Adds http:// when no scheme is given, guarantees exactly one trailing
    slash on the base, and accepts an address that already points at the
    metadata resource.

    Args:
        server_url: Address from the configuration.

    Returns:
        Endpoints with base_url ending in "/" and the metadata URL.

    Raises:
        ConfigMissing: If the address is blank.
    """
    url = server_url.strip()
    if not url:
        raise ConfigMissing("No server address configured")
    url = _with_scheme(url)
    if url.lower().endswith(METADATA_NAME.lower()):
        url = url[: -len(METADATA_NAME)]
    base_url = url.rstrip("/") + "/"
    return Endpoints(base_url, f"{base_url}{METADATA_NAME}")


def payload_url(base_url: str, name: str) -> str:
    """Return the URL of the payload resource for a file name."""
    return f"{base_url}{PAYLOAD_PREFIX}{quote(name, safe='')}"
