#!/usr/bin/env python3
"""
JSON wire format for the clipboard metadata resource.

The server exposes one JSON document describing the current clipboard:

    {"Type": "Text", "Text": "hello", "Hash": "...", "HasData": false,
     "DataName": "", "Size": 5}

File entries set HasData and DataName; their bytes live at file/<DataName>
next to the metadata document. First-generation servers only know the
"Clipboard" and "File" keys, which are accepted as fallbacks.

Decoding is lenient the way a forward-compatible client has to be: unknown
keys are ignored, null means "use the default", and a UTF-8 byte-order mark
in front of the body is stripped. Anything that is not a JSON object with
fields of the expected types is a ProtocolError.
"""
from __future__ import annotations

import json
from typing import Any

from hclipsync.content import ClipboardEntry, EntryKind
from hclipsync.errors import ProtocolError

# Name of the metadata resource below the server base URL.
METADATA_NAME: str = "SyncClipboard.json"

# Path prefix of payload resources below the server base URL.
PAYLOAD_PREFIX: str = "file/"

JSON_CONTENT_TYPE: str = "application/json; charset=utf-8"
OCTET_STREAM_TYPE: str = "application/octet-stream"

# Largest payload accepted for upload or download (100 MiB).
MAX_PAYLOAD_SIZE: int = 100 * 1024 * 1024

BOM: str = "\ufeff"

# Primary wire key first, first-generation fallback second.
_TEXT_KEYS = ("Text", "Clipboard")
_NAME_KEYS = ("DataName", "File")


def _pick(data: dict[str, Any], keys: tuple[str, ...]) -> Any:
    """Return the first non-null value among keys, or None."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ProtocolError(f"Field {field} must be a string, got {type(value).__name__}")
    return value


def _as_bool(value: Any, field: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ProtocolError(f"Field {field} must be a boolean, got {type(value).__name__}")
    return value


def _as_int(value: Any, field: str) -> int:
    if value is None:
        return 0
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise ProtocolError(f"Field {field} must be an integer, got {type(value).__name__}")
    return value


def decode_metadata(body: bytes | str) -> ClipboardEntry:
    """
    Parse a metadata document into a ClipboardEntry.

    Args:
        body: Raw response body.

    Returns:
        The validated entry.

    Raises:
        ProtocolError: On invalid encoding, invalid JSON, wrong field types,
            or an entry with a payload flag but no payload name.
    """
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Metadata is not valid UTF-8: {e}") from e
    if body.startswith(BOM):
        body = body[len(BOM):]
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"Failed to parse metadata JSON: {e}") from e
    if not isinstance(data, dict):
        raise ProtocolError(f"Metadata must be a JSON object, got {type(data).__name__}")

    kind_value = _as_str(data.get("Type"), "Type") or EntryKind.TEXT.value
    legacy_file = "DataName" not in data and data.get("File")
    payload_name = _as_str(_pick(data, _NAME_KEYS), "DataName")
    entry = ClipboardEntry(
        kind=EntryKind.from_wire(kind_value),
        text=_as_str(_pick(data, _TEXT_KEYS), "Text"),
        content_hash=_as_str(data.get("Hash"), "Hash"),
        size=_as_int(data.get("Size"), "Size"),
        has_payload=_as_bool(data.get("HasData"), "HasData") or bool(legacy_file),
        payload_name=payload_name,
    )
    entry.validate()
    return entry


def encode_metadata(entry: ClipboardEntry) -> str:
    """
    Serialize an entry to the metadata JSON document.

    All fields are always written so older and newer servers both find
    what they expect.
    """
    return json.dumps(
        {
            "Type": entry.kind.value,
            "Text": entry.text,
            "Hash": entry.content_hash,
            "HasData": entry.has_payload,
            "DataName": entry.payload_name,
            "Size": entry.size,
        },
        ensure_ascii=False,
    )
