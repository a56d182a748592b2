"""Test helper functions shared by the unit and integration suites."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

DEFAULT_PASSWORD = "correct-horse-battery"


def create_test_token(
    secret: str,
    *,
    expired: bool = False,
    algorithm: str = "HS256",
    **claim_overrides: Any,
) -> str:
    """
    Sign an arbitrary claim set, bypassing ``TokenService``.

    Start from a valid USER claim set and apply *claim_overrides*; an
    override of ``None`` removes the claim entirely.
    """
    now = datetime.now(timezone.utc)
    expiry_time = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    payload: dict[str, Any] = {
        "sub": "1",
        "fullName": "User One Example",
        "username": "user_one_account",
        "role": "USER",
        "iat": int(now.timestamp()),
        "exp": int(expiry_time.timestamp()),
    }
    for claim, value in claim_overrides.items():
        if value is None:
            payload.pop(claim, None)
        else:
            payload[claim] = value
    return jwt.encode(payload, secret, algorithm=algorithm)


def auth_headers(token: str) -> dict[str, str]:
    """Build common JSON API headers with bearer token auth."""
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
