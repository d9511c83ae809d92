"""Shared-secret check for ingestion requests."""

from __future__ import annotations

import hmac
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Mapping

API_KEY_HEADER: Final[str] = "X-ContentPulse-Key"
API_KEY_PARAM: Final[str] = "api_key"


def provided_api_key(headers: Mapping[str, str], query: Mapping[str, str]) -> str:
    """Header first, then the ``api_key`` query parameter. Header names are case-insensitive."""

    wanted = API_KEY_HEADER.lower()
    for name, value in headers.items():
        if name.lower() == wanted and value:
            return value
    return query.get(API_KEY_PARAM, "")


def check_api_key(stored_key: str, provided_key: str) -> bool:
    """Constant-time comparison; an empty stored key rejects everything."""

    if not stored_key:
        return False
    return hmac.compare_digest(stored_key.encode(), provided_key.encode())
