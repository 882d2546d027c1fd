from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.auth import Role
from src.core.errors import (
    AuthenticationFailed,
    AuthenticationRequired,
    DependencyFailure,
    ExpiredCredential,
)
from src.core.pipeline import RequestContext
from src.domain.services.identity import IdentityResolver

from tests.utils import Catalog, auth_headers, enroll, expired_headers


def _token(headers: dict[str, str]) -> str:
    return headers["Authorization"].removeprefix("Bearer ")


class TestResolveRequired:
    async def test_missing_credential_requires_authentication(self, db: AsyncSession) -> None:
        with pytest.raises(AuthenticationRequired):
            await IdentityResolver(db).resolve_required(None)

    async def test_expired_credential_is_distinct(self, db: AsyncSession, catalog: Catalog) -> None:
        with pytest.raises(ExpiredCredential) as excinfo:
            await IdentityResolver(db).resolve_required(_token(expired_headers(catalog.learner.id)))

        assert excinfo.value.status_code == 406

    async def test_invalid_credential_fails_authentication(self, db: AsyncSession) -> None:
        with pytest.raises(AuthenticationFailed):
            await IdentityResolver(db).resolve_required("garbage.token.value")

    async def test_deleted_user_no_longer_exists(self, db: AsyncSession) -> None:
        with pytest.raises(AuthenticationFailed, match="User no longer exists"):
            await IdentityResolver(db).resolve_required(_token(auth_headers("ghost-user")))

    async def test_loads_full_identity(self, db: AsyncSession, catalog: Catalog) -> None:
        await enroll(db, user=catalog.learner, course=catalog.course)

        identity = await IdentityResolver(db).resolve_required(
            _token(auth_headers(catalog.learner.id))
        )

        assert identity.user_id == catalog.learner.id
        assert identity.role == "learner"
        assert identity.is_email_verified is True
        assert identity.enrolled_courses == frozenset({catalog.course.id})
        assert identity.first_name == "Ada"

    async def test_enrolled_courses_default_to_empty(
        self, db: AsyncSession, catalog: Catalog
    ) -> None:
        identity = await IdentityResolver(db).resolve_required(
            _token(auth_headers(catalog.admin.id, Role.ADMIN))
        )

        assert identity.enrolled_courses == frozenset()
        assert identity.role == "admin"

    async def test_storage_failure_is_a_dependency_failure(self) -> None:
        session = AsyncMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("db down"))

        with pytest.raises(DependencyFailure):
            await IdentityResolver(session).resolve_required(_token(auth_headers("user-1")))

    async def test_required_step_attaches_identity(self, db: AsyncSession, catalog: Catalog) -> None:
        step = IdentityResolver(db).required_step(_token(auth_headers(catalog.learner.id)))

        context = await step(RequestContext(request_id="req-1"))

        assert context.identity is not None
        assert context.identity.user_id == catalog.learner.id


class TestResolveOptional:
    async def test_missing_credential_is_anonymous(self, db: AsyncSession) -> None:
        assert await IdentityResolver(db).resolve_optional(None) is None

    async def test_invalid_credential_is_anonymous(self, db: AsyncSession) -> None:
        assert await IdentityResolver(db).resolve_optional("garbage.token.value") is None

    async def test_expired_credential_is_still_surfaced(self) -> None:
        session = AsyncMock()

        with pytest.raises(ExpiredCredential):
            await IdentityResolver(session).resolve_optional(_token(expired_headers("user-1")))

    async def test_uses_claim_without_storage_lookup(self) -> None:
        session = AsyncMock()

        identity = await IdentityResolver(session).resolve_optional(
            _token(auth_headers("user-1", Role.ADMIN))
        )

        assert identity is not None
        assert (identity.user_id, identity.role) == ("user-1", "admin")
        assert identity.enrolled_courses == frozenset()
        session.execute.assert_not_called()
