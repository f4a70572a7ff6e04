#!/usr/bin/env python3
"""Content model for synchronized clipboard entries.

A ClipboardEntry is what travels between the device and the server. Text
entries carry their content inline. File entries carry a reference (a local
URI before upload, the remote file name after download) and their bytes
travel separately as a payload.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable
from urllib.parse import unquote, urlparse

from hclipsync.errors import ContentError, ProtocolError
from hclipsync.hashing import hash_file, hash_text

logger = logging.getLogger(__name__)

LOCAL_REFERENCE_SCHEMES: tuple[str, ...] = ("file://", "content://")


class EntryKind(str, Enum):
    """Kind of a clipboard entry as named on the wire."""

    TEXT = "Text"
    FILE = "File"

    @classmethod
    def from_wire(cls, value: str) -> EntryKind:
        """Map a wire "Type" value to a kind; anything but Text is file-like."""
        if value.lower() == cls.TEXT.value.lower():
            return cls.TEXT
        return cls.FILE


@dataclass(frozen=True)
class ClipboardEntry:
    """A clipboard value as described by the server metadata.

    Attributes:
        kind: Text or File.
        text: Literal text for Text entries, file reference for File entries.
        content_hash: Hex SHA-256 of the canonical bytes, empty if unknown.
        size: Byte length of the canonical bytes.
        has_payload: Whether the bytes live in a separate payload resource.
        payload_name: Name of the payload resource on the server.
    """

    kind: EntryKind = EntryKind.TEXT
    text: str = ""
    content_hash: str = ""
    size: int = 0
    has_payload: bool = False
    payload_name: str = ""

    def validate(self) -> None:
        """Reject entries that advertise a payload without naming it.

        Raises:
            ProtocolError: If has_payload is set and payload_name is empty.
        """
        if self.has_payload and not self.payload_name:
            raise ProtocolError("Entry advertises a payload but has no payload name")


@dataclass(frozen=True)
class LocalContent:
    """An entry built from a local clipboard value plus its payload bytes."""

    entry: ClipboardEntry
    payload: bytes | None = None


ResourceReader = Callable[[str], tuple[str, bytes]]


def is_local_reference(value: str) -> bool:
    """Return True if the clipboard value is a local resource URI."""
    return value.startswith(LOCAL_REFERENCE_SCHEMES)


def read_local_resource(uri: str) -> tuple[str, bytes]:
    """Read the name and bytes of a local file:// resource.

    Args:
        uri: A file:// URI taken from the clipboard.

    Returns:
        Tuple of (file name, file bytes).

    Raises:
        ContentError: If the URI is not a readable file.
    """
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ContentError(f"Unsupported resource reference: {uri}")
    path = Path(unquote(parsed.path))
    try:
        data = path.read_bytes()
    except OSError as e:
        raise ContentError(f"Cannot read {path}: {e}") from e
    return path.name or "unknown_file", data


def text_entry(text: str) -> ClipboardEntry:
    """Build a metadata-only Text entry."""
    return ClipboardEntry(
        kind=EntryKind.TEXT,
        text=text,
        content_hash=hash_text(text),
        size=len(text.encode("utf-8")),
    )


def file_entry(name: str, data: bytes) -> ClipboardEntry:
    """Build a File entry whose bytes are uploaded as a payload."""
    return ClipboardEntry(
        kind=EntryKind.FILE,
        text=name,
        content_hash=hash_file(name, data),
        size=len(data),
        has_payload=True,
        payload_name=name,
    )


def classify_and_hash(
    raw: str, read_resource: ResourceReader = read_local_resource
) -> LocalContent:
    """Turn a local clipboard value into an entry ready for upload.

    Values that look like local resource references become File entries
    whose payload is the referenced bytes; everything else is Text.

    Args:
        raw: Clipboard value reported by the host.
        read_resource: Callable resolving a reference to (name, bytes).

    Returns:
        LocalContent with the entry and, for files, the payload bytes.

    Raises:
        ContentError: If a file reference cannot be read.
    """
    if not is_local_reference(raw):
        return LocalContent(entry=text_entry(raw))

    name, data = read_resource(raw)
    name = os.path.basename(name) or "unknown_file"
    logger.debug("Classified %s as file %s (%d bytes)", raw, name, len(data))
    return LocalContent(entry=file_entry(name, data), payload=data)
