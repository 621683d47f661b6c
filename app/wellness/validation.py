from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.core.auth import Caller
from app.domain.exceptions import AuthenticationError, InvalidArgumentError


def require_caller(caller: Caller | None) -> Caller:
    if caller is None:
        raise AuthenticationError("Missing auth.")
    return caller


def require_checkin(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return `data.checkin`; only its presence as an object is checked."""

    checkin = data.get("checkin")
    if not isinstance(checkin, Mapping):
        raise InvalidArgumentError("Expected data.checkin to be an object.")
    return dict(checkin)
