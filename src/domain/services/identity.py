"""Resolve the acting identity for a request from its bearer credential."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from src.core.auth import TokenError, TokenExpiredError, verify_access_token
from src.core.errors import AuthenticationFailed, AuthenticationRequired, ExpiredCredential
from src.core.pipeline import RequestContext, Step
from src.domain.models import Identity
from src.infrastructure.db.models import UserModel
from src.infrastructure.db.session import bounded

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from src.core.auth import CredentialClaim

logger = structlog.get_logger(__name__)


def identity_from_user(user: UserModel) -> Identity:
    return Identity(
        user_id=user.id,
        role=user.role.value,
        is_email_verified=user.is_email_verified,
        enrolled_courses=frozenset(enrollment.course_id for enrollment in user.enrollments or []),
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
    )


class IdentityResolver:
    """Turns a bearer credential into an ``Identity``.

    ``resolve_required`` loads the stored user record; ``resolve_optional``
    trusts the token alone and never touches storage.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def resolve_required(self, token: str | None) -> Identity:
        if token is None:
            raise AuthenticationRequired()

        try:
            claim = verify_access_token(token)
        except TokenExpiredError as exc:
            await logger.awarning("auth_token_expired")
            raise ExpiredCredential() from exc
        except TokenError as exc:
            await logger.awarning("auth_token_invalid", reason=str(exc))
            raise AuthenticationFailed() from exc

        user = await self._load_user(claim)
        if user is None:
            await logger.awarning("auth_user_missing", user_id=claim.subject_id)
            raise AuthenticationFailed("User no longer exists")

        return identity_from_user(user)

    async def resolve_optional(self, token: str | None) -> Identity | None:
        if token is None:
            return None

        try:
            claim = verify_access_token(token)
        except TokenExpiredError as exc:
            await logger.awarning("optional_auth_token_expired")
            raise ExpiredCredential() from exc
        except TokenError as exc:
            await logger.ainfo("optional_auth_token_ignored", reason=str(exc))
            return None

        return Identity(user_id=claim.subject_id, role=claim.role)

    async def _load_user(self, claim: CredentialClaim) -> UserModel | None:
        stmt = (
            select(UserModel)
            .options(selectinload(UserModel.enrollments))
            .where(UserModel.id == claim.subject_id)
        )
        result = await bounded(self.session.execute(stmt), operation="identity_lookup")
        return result.scalar_one_or_none()

    def required_step(self, token: str | None) -> Step:
        async def step(context: RequestContext) -> RequestContext:
            return context.with_identity(await self.resolve_required(token))

        return step

    def optional_step(self, token: str | None) -> Step:
        async def step(context: RequestContext) -> RequestContext:
            return context.with_identity(await self.resolve_optional(token))

        return step
