#!/usr/bin/env python3
"""
Error taxonomy for clipboard synchronization.

Every failure that crosses the remote client boundary is one of these types,
so callers never have to know about requests exceptions:
- TransportError: connection refused, DNS failure, timeout (retried next cycle)
- AuthError: credentials rejected by the server (401/403)
- NotFoundError: resource missing on the server (404)
- ServerError: any other non-success status, typically 5xx
- ProtocolError: response body that does not match the wire schema
- ContentError: local clipboard value that cannot be turned into an entry
- ConfigMissing: no server address configured (sync disabled, not a fault)

A payload hash mismatch is not an error: it is logged with an
"IntegrityWarning" prefix and the value is still applied.
"""


class SyncError(Exception):
    """Base class for all synchronization errors."""

    pass


class TransportError(SyncError):
    """Connection-level failure (refused, reset, DNS, timeout)."""

    pass


class HTTPStatusError(SyncError):
    """
    Server answered with a non-success status.

    Attributes:
        status: HTTP status code returned by the server.
    """

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class AuthError(HTTPStatusError):
    """Credentials were rejected (401/403)."""

    pass


class NotFoundError(HTTPStatusError):
    """Requested resource does not exist on the server (404)."""

    pass


class ServerError(HTTPStatusError):
    """Server-side failure or any other unexpected status."""

    pass


class ProtocolError(SyncError):
    """Malformed or schema-violating server response."""

    pass


class ContentError(SyncError):
    """Local clipboard value could not be read or classified."""

    pass


class ConfigMissing(SyncError):
    """No server address configured; sync is disabled."""

    pass


def error_for_status(status: int, reason: str = "") -> HTTPStatusError:
    """
    Map an HTTP status code to the matching error type.

    Args:
        status: Non-success HTTP status code.
        reason: Reason phrase from the response, if any.

    Returns:
        An AuthError, NotFoundError or ServerError instance (not raised).
    """
    message = f"HTTP {status}: {reason}" if reason else f"HTTP {status}"
    if status in (401, 403):
        return AuthError(status, message)
    if status == 404:
        return NotFoundError(status, message)
    return ServerError(status, message)
