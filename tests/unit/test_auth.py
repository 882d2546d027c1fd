from datetime import timedelta

import jwt
import pytest
from src.core.auth import (
    TokenError,
    TokenExpiredError,
    create_access_token,
    verify_access_token,
)
from src.core.config import get_settings


def test_create_and_verify_token_roundtrip() -> None:
    token = create_access_token("user-123", role="learner")

    claim = verify_access_token(token)

    assert claim.subject_id == "user-123"
    assert claim.role == "learner"
    assert claim.expires_at.tzinfo is not None


def test_expired_token_is_reported_separately() -> None:
    token = create_access_token("user-123", role="learner", expires_delta=timedelta(seconds=-5))

    with pytest.raises(TokenExpiredError):
        verify_access_token(token)


def test_token_signed_with_other_secret_is_invalid_but_not_expired() -> None:
    settings = get_settings()
    forged = jwt.encode(
        {"sub": "user-123", "role": "admin", "exp": 4102444800},
        "some-other-secret",
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(TokenError) as excinfo:
        verify_access_token(forged)

    assert not isinstance(excinfo.value, TokenExpiredError)


def test_malformed_token_is_invalid() -> None:
    with pytest.raises(TokenError):
        verify_access_token("not-a-jwt")


def test_token_with_unknown_role_is_invalid() -> None:
    settings = get_settings()
    token = jwt.encode(
        {"sub": "user-1", "role": "superuser", "exp": 4102444800},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    with pytest.raises(TokenError):
        verify_access_token(token)


def test_create_token_rejects_unsupported_role() -> None:
    with pytest.raises(TokenError):
        create_access_token("user-1", role="superuser")
