#!/usr/bin/env python3
"""Saving downloaded file payloads to the download directory."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def save_payload(download_dir: str, name: str, data: bytes) -> str | None:
    """Write a downloaded payload into the download directory.

    An existing file with the same name is replaced. Directory components in
    the name are dropped so a server cannot write outside the directory.

    Args:
        download_dir: Target directory, created if missing.
        name: Payload name from the metadata.
        data: Payload bytes.

    Returns:
        file:// URI of the saved file, or None if saving failed.
    """
    safe_name = os.path.basename(name.replace("\\", "/")) or "unknown_file"
    target = Path(download_dir).expanduser() / safe_name
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as e:
        logger.error("[Pull] Failed to save %s: %s", target, e)
        return None
    logger.debug("[Pull] Saved payload to %s", target)
    return target.resolve().as_uri()
