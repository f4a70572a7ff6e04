#!/usr/bin/env python3
"""
SHA-256 hashing of clipboard entries.

Hashes are how the client and the server agree on identity. Text entries
hash their UTF-8 bytes. File entries hash the file name together with the
file bytes, so two files with identical bytes but different names are
different entries.
"""
import hashlib

__all__ = ["compute_hash", "hash_text", "hash_file", "hashes_match"]


def compute_hash(data: bytes) -> str:
    """
    Compute SHA-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash.

    Returns:
        Lowercase hexadecimal string of the SHA-256 digest.
    """
    return hashlib.sha256(data).hexdigest()


def hash_text(text: str) -> str:
    """Hash a text entry over its UTF-8 encoding."""
    return compute_hash(text.encode("utf-8"))


def hash_file(name: str, data: bytes) -> str:
    """
    Hash a file entry keyed by its name.

    The canonical form is "<name>|<CONTENT_DIGEST>" with the inner digest in
    upper case, which is what SyncClipboard servers compute.

    Args:
        name: File name as advertised in the metadata (no directory part).
        data: Raw file bytes.

    Returns:
        Lowercase hexadecimal SHA-256 digest of the canonical form.
    """
    content_digest = compute_hash(data).upper()
    return hash_text(f"{name}|{content_digest}")


def hashes_match(expected: str, actual: str) -> bool:
    """
    Compare two hex digests ignoring case.

    An empty expected hash means the server declared nothing to verify,
    which counts as a match.
    """
    if not expected:
        return True
    return expected.lower() == actual.lower()
