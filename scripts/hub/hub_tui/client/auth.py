"""Login, health check and bearer-token expiry."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from hub_tui.client import HubClient
from hub_tui.errors import APIError, AuthError

EXPIRY_MARGIN = timedelta(seconds=30)


@dataclass
class LoginResponse:
    token: str
    expires_at: str = ""


def login(client: HubClient, username: str, password: str) -> LoginResponse:
    try:
        body = client.request("POST", "/auth/login", {"username": username, "password": password})
    except AuthError as exc:
        # A rejected login is a bad credential, not an expired session.
        raise APIError(401, "invalid username or password") from exc
    token = str(body.get("token") or "")
    if not token:
        raise APIError(200, "login response carried no token")
    return LoginResponse(token=token, expires_at=str(body.get("expires_at") or ""))


def health(client: HubClient) -> None:
    client.request("GET", "/health")


def token_expiry(token: str) -> datetime | None:
    """Return the ``exp`` claim of a JWT, or None when it has none or cannot be read."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    payload = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(payload.encode("ascii")))
    except (binascii.Error, ValueError, UnicodeEncodeError):
        return None
    exp = claims.get("exp") if isinstance(claims, dict) else None
    if not isinstance(exp, (int, float)):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)


def is_token_expired(token: str, now: datetime | None = None) -> bool:
    """Treat the token as expired 30 seconds early; tokens without ``exp`` never expire."""
    if not token:
        return True
    expiry = token_expiry(token)
    if expiry is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now > expiry - EXPIRY_MARGIN
