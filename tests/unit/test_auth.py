from __future__ import annotations

import pytest

from tutorial_portal.core.auth import (
    AuthError,
    StaticApiKeyValidator,
    TokenError,
    create_access_token,
    decode_access_token,
    ensure_api_key,
    extract_api_key,
)
from tutorial_portal.domain.models import User


def test_create_and_decode_token_roundtrip() -> None:
    token = create_access_token("user-123", roles=["employee"], email="user@portal.com.br")

    payload = decode_access_token(token)

    assert payload["sub"] == "user-123"
    assert payload["roles"] == ["employee"]
    assert payload["email"] == "user@portal.com.br"


def test_create_token_rejects_unknown_role() -> None:
    with pytest.raises(TokenError):
        create_access_token("user-123", roles=["student"])


def test_decode_rejects_garbage() -> None:
    with pytest.raises(TokenError):
        decode_access_token("not-a-jwt")


def test_static_validator_accepts_only_the_configured_key() -> None:
    validator = StaticApiKeyValidator("s3cret")

    assert validator.validate("s3cret")
    assert not validator.validate("s3cret ")
    assert not validator.validate("other")
    assert not validator.validate(None)


def test_static_validator_with_empty_key_rejects_everything() -> None:
    validator = StaticApiKeyValidator("")

    assert not validator.validate("")
    assert not validator.validate("anything")


@pytest.mark.parametrize(
    ("x_api_key", "authorization", "expected"),
    [
        ("abc", None, "abc"),
        ("abc", "Bearer xyz", "abc"),
        (None, "Bearer xyz", "xyz"),
        (None, "bearer  xyz ", "xyz"),
        (None, "Basic xyz", None),
        (None, "Bearer ", None),
        (None, None, None),
    ],
)
def test_extract_api_key(x_api_key, authorization, expected) -> None:
    assert extract_api_key(x_api_key, authorization) == expected


def test_ensure_api_key_distinguishes_missing_from_wrong() -> None:
    validator = StaticApiKeyValidator("s3cret")

    with pytest.raises(AuthError, match="no key provided"):
        ensure_api_key(validator, None)
    with pytest.raises(AuthError, match="incorrect"):
        ensure_api_key(validator, "wrong")
    ensure_api_key(validator, "s3cret")


def test_admin_flag_follows_roles() -> None:
    assert User(user_id="u1", roles=["employee", "admin"]).is_admin
    assert not User(user_id="u2", roles=["employee"]).is_admin
    assert not User(user_id="u3").is_admin
