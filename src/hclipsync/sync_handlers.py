#!/usr/bin/env python3
"""Push and pull handlers for clipboard synchronization.

This module provides one handler per direction:
- push_value: upload a genuine local change to the remote
- pull_once: run one pull cycle and apply a new remote value locally

Both go through the shared EngineState so neither direction re-triggers
the other. Blocking HTTP calls run in worker threads.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from hclipsync.constants import (
    PUSH_ATTEMPTS,
    PUSH_INITIAL_WAIT,
    PUSH_MAX_WAIT,
    PUSH_WAIT_MULTIPLIER,
)
from hclipsync.content import (
    ClipboardEntry,
    EntryKind,
    LocalContent,
    ResourceReader,
    classify_and_hash,
    read_local_resource,
)
from hclipsync.errors import ServerError, TransportError
from hclipsync.file_store import save_payload
from hclipsync.remote_client import NotModified

if TYPE_CHECKING:
    from hclipsync.engine_state import EngineState
    from hclipsync.local_adapter import ClipboardAdapter
    from hclipsync.remote_client import RemoteClient

logger = logging.getLogger(__name__)


class PullOutcome(Enum):
    """What a pull cycle ended up doing."""

    NOT_MODIFIED = "not_modified"
    UNCHANGED = "unchanged"
    EMPTY = "empty"
    DUPLICATE = "duplicate"
    APPLIED = "applied"


@retry(
    wait=wait_exponential(
        multiplier=PUSH_WAIT_MULTIPLIER,
        min=PUSH_INITIAL_WAIT,
        max=PUSH_MAX_WAIT,
    ),
    retry=retry_if_exception_type((TransportError, ServerError)),
    stop=stop_after_attempt(PUSH_ATTEMPTS),
    reraise=True,
)
async def upload_with_retry(
    state: EngineState, client: RemoteClient, value: str, local: LocalContent
) -> bool:
    """Upload an entry, retrying transient failures.

    Each attempt first checks that value is still the current local value;
    a superseded push is abandoned since only the latest value matters.

    Returns:
        True if uploaded, False if abandoned.

    Raises:
        SyncError: When the last attempt fails or the error is not transient.
    """
    if not state.is_current_local(value):
        logger.debug("[Push] Superseded by a newer value, abandoning")
        return False
    await asyncio.to_thread(client.upload_entry, local.entry, local.payload)
    return True


async def push_value(
    state: EngineState,
    client: RemoteClient,
    value: str,
    read_resource: ResourceReader = read_local_resource,
) -> bool:
    """Push a local clipboard value that was classified as new.

    Args:
        state: Shared engine state.
        client: Remote client for the configured server.
        value: Local clipboard value (text or local resource reference).
        read_resource: Resolver for local resource references.

    Returns:
        True if the push was uploaded and recorded.

    Raises:
        ContentError: If a file reference cannot be read.
        SyncError: On upload failure after retries.
    """
    local = await asyncio.to_thread(classify_and_hash, value, read_resource)
    logger.debug(
        "[Push] Uploading %s (%d bytes)", local.entry.kind.value, local.entry.size
    )
    if not await upload_with_retry(state, client, value, local):
        return False
    if not state.record_pushed(value, local.entry.content_hash):
        logger.debug("[Push] Uploaded, but local value changed meanwhile")
        return False
    logger.debug("[Push] Success")
    return True


async def resolve_payload(
    entry: ClipboardEntry, data: bytes, download_path: str | None
) -> str:
    """Turn downloaded payload bytes into the value to apply locally.

    Text payloads become the decoded text. File payloads are saved to the
    download directory and become its file:// URI; without a directory, or
    if saving fails, the file name from the metadata is kept.
    """
    if entry.kind is EntryKind.TEXT:
        return data.decode("utf-8", errors="replace")
    if not download_path:
        logger.warning("[Pull] No download directory set, skipping file save")
        return entry.text
    uri = await asyncio.to_thread(save_payload, download_path, entry.payload_name, data)
    return uri if uri is not None else entry.text


async def pull_once(
    state: EngineState,
    client: RemoteClient,
    adapter: ClipboardAdapter,
    download_path: str | None = None,
) -> PullOutcome:
    """Run one pull cycle.

    Steps: conditional metadata fetch, skip if the hash was already seen,
    fetch the payload if any, classify against the engine state, and apply
    the value locally only if it is new.

    Args:
        state: Shared engine state.
        client: Remote client for the configured server.
        adapter: Writes values to the local clipboard.
        download_path: Directory for file payloads, or None.

    Returns:
        The outcome of the cycle.

    Raises:
        SyncError: On transport, status or protocol failure.
    """
    result = await asyncio.to_thread(client.fetch_metadata, state.version_token())
    if isinstance(result, NotModified):
        return PullOutcome.NOT_MODIFIED

    entry = result.entry
    if state.is_known_remote_hash(entry.content_hash):
        logger.debug("[Pull] Hash unchanged, skipping")
        state.record_version_token(result.version_token)
        return PullOutcome.UNCHANGED

    value = entry.text
    if entry.has_payload:
        data = await asyncio.to_thread(client.fetch_payload, entry)
        value = await resolve_payload(entry, data, download_path)
    # Only once the payload is in hand, or a failed download would turn into 304s
    state.record_version_token(result.version_token)
    state.record_remote_hash(entry.content_hash)

    if not value:
        return PullOutcome.EMPTY
    # Must happen before the clipboard write so the resulting change is an echo
    if not state.accept_remote(value):
        logger.debug("[Pull] Remote value already current locally")
        return PullOutcome.DUPLICATE

    logger.debug("[Pull] Remote content changed, updating local (%s)", entry.kind.value)
    adapter.apply(entry.kind, value)
    return PullOutcome.APPLIED
