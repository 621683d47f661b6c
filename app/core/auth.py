from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request
from jose import JWTError, jwt

from app.core.settings import get_settings

logger = logging.getLogger("app.auth")

APP_CHECK_HEADER = "X-Firebase-AppCheck"


@dataclass(frozen=True)
class Caller:
    """Verified identity of the caller (anonymous accounts included)."""

    uid: str


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def verify_id_token(token: str) -> Caller | None:
    """Return the caller encoded in `token`, or None when it does not verify.

    Expired, tampered or otherwise invalid tokens are treated exactly like a
    missing token.
    """

    settings = get_settings()
    if not settings.auth_jwt_secret:
        return None

    options = {"verify_aud": settings.auth_jwt_audience is not None}
    try:
        claims = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=settings.auth_jwt_algorithms,
            audience=settings.auth_jwt_audience,
            options=options,
        )
    except JWTError:
        return None

    uid = claims.get("sub") or claims.get("user_id")
    if not isinstance(uid, str) or not uid:
        return None
    return Caller(uid=uid)


def get_caller(request: Request) -> Caller | None:
    """
    Dependency resolving the authenticated caller from the invocation envelope.

    Returns None instead of raising so the service decides when to reject the
    call (before any outbound work).
    """

    token = _bearer_token(request)
    if token is None:
        return None
    return verify_id_token(token)


def observe_app_check(request: Request, *, operation: str) -> bool:
    """Record whether an app attestation token was presented. Monitoring only, never blocks."""

    present = bool(request.headers.get(APP_CHECK_HEADER))
    if not present:
        logger.warning(
            "Callable invoked without app check token",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "operation": operation,
                "app_check": False,
            },
        )
    return present
