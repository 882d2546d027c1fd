from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

import jwt
from src.core.config import get_settings


class TokenError(Exception):
    """Raised when a token cannot be decoded or validated."""


class TokenExpiredError(TokenError):
    """Raised when a structurally valid token is past its expiry."""


class Role(str, Enum):
    LEARNER = "learner"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"

    @classmethod
    def contains(cls, value: str) -> bool:
        return value in {role.value for role in cls}


@dataclass(frozen=True, slots=True)
class CredentialClaim:
    """Decoded token payload; consumed once per request and never stored."""

    subject_id: str
    role: str
    expires_at: datetime


def create_access_token(
    subject: str,
    *,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Generate a signed JWT access token."""
    settings = get_settings()

    if role not in settings.allowed_roles:
        raise TokenError(f"Unsupported role: {role}")

    now = datetime.now(UTC)
    ttl = expires_delta if expires_delta is not None else timedelta(
        seconds=settings.access_token_ttl_seconds
    )
    payload = {
        "sub": subject,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "iss": settings.app_name,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> CredentialClaim:
    """Decode and validate a JWT access token.

    Expiry is reported as ``TokenExpiredError`` so callers can tell
    "log in again" apart from every other verification failure.
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "role", "exp"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenExpiredError("Token has expired") from exc
    except jwt.PyJWTError as exc:  # pragma: no cover - third-party raises numerous subclasses
        raise TokenError("Invalid token") from exc

    subject = payload.get("sub")
    role = payload.get("role")
    if not isinstance(subject, str) or not subject:
        raise TokenError("Token missing subject")
    if not isinstance(role, str) or not Role.contains(role):
        raise TokenError(f"Unsupported role: {role}")

    return CredentialClaim(
        subject_id=subject,
        role=role,
        expires_at=datetime.fromtimestamp(payload["exp"], UTC),
    )
