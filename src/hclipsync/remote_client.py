#!/usr/bin/env python3
"""HTTP client for the remote clipboard server.

Wraps a requests.Session with Basic authentication and short fixed timeouts.
All calls block; the engine runs them in worker threads. Every failure is
translated into the hclipsync.errors taxonomy so no requests exception ever
leaks out of this module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Union

import requests
from requests.auth import HTTPBasicAuth

from hclipsync.content import ClipboardEntry, EntryKind
from hclipsync.endpoints import payload_url, resolve_endpoints
from hclipsync.errors import (
    ProtocolError,
    SyncError,
    TransportError,
    error_for_status,
)
from hclipsync.hashing import compute_hash, hash_file, hashes_match
from hclipsync.protocol import (
    JSON_CONTENT_TYPE,
    MAX_PAYLOAD_SIZE,
    OCTET_STREAM_TYPE,
    decode_metadata,
    encode_metadata,
)

logger = logging.getLogger(__name__)

# (connect, read) timeouts in seconds.
REQUEST_TIMEOUT: tuple[float, float] = (10.0, 30.0)


@dataclass(frozen=True)
class NotModified:
    """Server confirmed nothing changed since the given version token."""

    version_token: str | None = None


@dataclass(frozen=True)
class Metadata:
    """Current metadata and the version token to send next time."""

    entry: ClipboardEntry
    version_token: str | None = None


MetadataResult = Union[NotModified, Metadata]


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a connectivity test."""

    ok: bool
    message: str
    status: int | None = None


def verify_payload(entry: ClipboardEntry, data: bytes) -> bool:
    """Check downloaded bytes against the hash declared in the metadata.

    Text payloads hash their raw bytes, file payloads hash name and bytes,
    the same rule used when uploading.
    """
    if entry.kind is EntryKind.TEXT:
        actual = compute_hash(data)
    else:
        actual = hash_file(entry.payload_name, data)
    return hashes_match(entry.content_hash, actual)


class RemoteClient:
    """Client for one clipboard server.

    Args:
        server_url: Address as configured by the user.
        username: Basic auth user name.
        password: Basic auth password.
        session: Optional pre-built session (used by tests).

    Raises:
        ConfigMissing: If server_url is blank.
    """

    def __init__(
        self,
        server_url: str,
        username: str = "",
        password: str = "",
        session: requests.Session | None = None,
    ) -> None:
        self.base_url, self.metadata_url = resolve_endpoints(server_url)
        self.session = session if session is not None else requests.Session()
        self.session.auth = HTTPBasicAuth(username, password)

    def close(self) -> None:
        self.session.close()

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Send one request, mapping transport failures to TransportError."""
        try:
            return self.session.request(method, url, timeout=REQUEST_TIMEOUT, **kwargs)
        except requests.Timeout as e:
            raise TransportError(f"{method} {url} timed out: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        if not response.ok:
            raise error_for_status(response.status_code, response.reason or "")

    def fetch_metadata(self, previous_token: str | None = None) -> MetadataResult:
        """Conditionally fetch the metadata document.

        Args:
            previous_token: ETag from the last successful fetch, if any.

        Returns:
            NotModified on 304, otherwise Metadata with the parsed entry.

        Raises:
            SyncError: Typed transport, status or protocol failure.
        """
        headers = {"If-None-Match": previous_token} if previous_token else {}
        logger.debug("[Pull] Fetching %s", self.metadata_url)
        response = self._request("GET", self.metadata_url, headers=headers)
        if response.status_code == 304:
            logger.debug("[Pull] Not modified")
            return NotModified(previous_token)
        if not response.ok:
            logger.error("[Pull] Failed: %d %s", response.status_code, response.reason)
        self._raise_for_status(response)
        entry = decode_metadata(response.content)
        return Metadata(entry, response.headers.get("ETag"))

    def fetch_payload(self, entry: ClipboardEntry) -> bytes:
        """Download the payload of an entry and verify its hash.

        A hash mismatch is logged as an integrity warning; the bytes are
        still returned.

        Raises:
            ProtocolError: If the entry has no payload name or the payload
                exceeds MAX_PAYLOAD_SIZE.
            SyncError: Typed transport or status failure.
        """
        entry.validate()
        if not entry.payload_name:
            raise ProtocolError("Entry has no payload to fetch")
        url = payload_url(self.base_url, entry.payload_name)
        logger.debug("[Pull] Downloading payload from %s", url)
        response = self._request("GET", url)
        self._raise_for_status(response)
        data = response.content
        if len(data) > MAX_PAYLOAD_SIZE:
            raise ProtocolError(f"Payload size {len(data)} exceeds limit {MAX_PAYLOAD_SIZE}")
        if not verify_payload(entry, data):
            logger.warning(
                "IntegrityWarning: [Pull] Hash mismatch for %s, expected %s",
                entry.payload_name,
                entry.content_hash,
            )
        return data

    def upload_entry(self, entry: ClipboardEntry, payload: bytes | None = None) -> None:
        """Upload an entry, payload first.

        The metadata is only written once the payload upload succeeded, so
        the server never advertises a payload it does not have.

        Raises:
            ProtocolError: If the entry is invalid or the payload too large.
            SyncError: Typed transport or status failure.
        """
        entry.validate()
        if payload is not None:
            if len(payload) > MAX_PAYLOAD_SIZE:
                raise ProtocolError(f"Payload size {len(payload)} exceeds limit {MAX_PAYLOAD_SIZE}")
            url = payload_url(self.base_url, entry.payload_name)
            logger.debug("[Push] Uploading payload %s (%d bytes)", entry.payload_name, len(payload))
            response = self._request(
                "PUT", url, data=payload, headers={"Content-Type": OCTET_STREAM_TYPE}
            )
            self._raise_for_status(response)

        response = self._request(
            "PUT",
            self.metadata_url,
            data=encode_metadata(entry).encode("utf-8"),
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )
        self._raise_for_status(response)
        logger.debug("[Push] Uploaded %s entry (%d bytes)", entry.kind.value, entry.size)

    def probe(self) -> ProbeResult:
        """Test connectivity and credentials with a single GET.

        Never raises; failures are reported in the result.
        """
        logger.debug("[Test] Testing connection to %s", self.metadata_url)
        try:
            response = self._request("GET", self.metadata_url)
            self._raise_for_status(response)
        except SyncError as e:
            logger.error("[Test] Failed: %s", e)
            return ProbeResult(False, str(e), getattr(e, "status", None))
        return ProbeResult(True, f"Connection successful: {response.status_code}", response.status_code)
