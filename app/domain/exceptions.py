from __future__ import annotations

from typing import Any


class CallableError(Exception):
    """Base for failures surfaced to callers through the callable error envelope.

    `status` is the canonical error name the client matches on; `http_status`
    is the transport status code.
    """

    status = "INTERNAL"
    http_status = 500

    def __init__(self, message: str, *, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class AuthenticationError(CallableError):
    """Raised when the caller identity is missing or cannot be verified."""

    status = "UNAUTHENTICATED"
    http_status = 401


class InvalidArgumentError(CallableError):
    """Raised when a required payload field is missing."""

    status = "INVALID_ARGUMENT"
    http_status = 400


class InternalError(CallableError):
    """Raised when the upstream model call fails; never retried."""

    status = "INTERNAL"
    http_status = 502
