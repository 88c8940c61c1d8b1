from __future__ import annotations

import hmac
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Protocol

import jwt

from tutorial_portal.core.config import get_settings


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class AuthError(Exception):
    """Raised when a caller presents missing or invalid credentials."""


class Role(str, Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {role.value for role in cls}


def create_access_token(
    subject: str,
    *,
    roles: Sequence[str],
    email: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Generate a signed JWT access token."""
    settings = get_settings()

    invalid_roles = [role for role in roles if role not in settings.allowed_roles]
    if invalid_roles:
        joined_roles = ", ".join(invalid_roles)
        raise TokenError(f"Unsupported role(s): {joined_roles}")

    now = datetime.now(UTC)
    ttl = expires_delta or timedelta(seconds=settings.access_token_ttl_seconds)
    payload = {
        "sub": subject,
        "roles": list(roles),
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "iss": settings.app_name,
    }

    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and validate a JWT access token."""
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "roles", "exp"]},
        )
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    _ensure_roles(payload.get("roles", []))
    return payload


def _ensure_roles(roles: Iterable[str]) -> None:
    for role in roles:
        if not Role.contains(role):
            raise TokenError(f"Unsupported role: {role}")


class ApiKeyValidator(Protocol):
    """Decides whether a presented automation key grants access."""

    def validate(self, key: str | None) -> bool: ...


class StaticApiKeyValidator:
    """Accepts exactly one shared secret; an empty secret accepts nothing."""

    def __init__(self, expected_key: str | None = None) -> None:
        self.expected_key = (
            expected_key if expected_key is not None else get_settings().release_api_key
        )

    def validate(self, key: str | None) -> bool:
        if not key or not self.expected_key:
            return False
        return hmac.compare_digest(key.encode("utf-8"), self.expected_key.encode("utf-8"))


def extract_api_key(x_api_key: str | None, authorization: str | None) -> str | None:
    """Pull the automation key from ``x-api-key`` or ``Authorization: Bearer <key>``."""
    if x_api_key:
        return x_api_key.strip()
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return None


def ensure_api_key(validator: ApiKeyValidator, key: str | None) -> None:
    """Raise ``AuthError`` unless ``validator`` accepts ``key``."""
    if not key:
        raise AuthError("no key provided")
    if not validator.validate(key):
        raise AuthError("key provided but incorrect")
