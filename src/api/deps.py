from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Coroutine
from typing import Any
from uuid import uuid4

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.pipeline import RequestContext, Step, run_pipeline
from src.domain.services.identity import IdentityResolver
from src.infrastructure.db.session import get_session

bearer_scheme = HTTPBearer(auto_error=False)

ContextDependency = Callable[..., Coroutine[Any, Any, RequestContext]]


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in get_session():
        yield session


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials is None or not credentials.credentials:
        return None
    return credentials.credentials


def _base_context(request: Request) -> RequestContext:
    request_id = getattr(request.state, "request_id", None) or str(uuid4())
    return RequestContext(request_id=request_id)


def authenticated(*policies: Step) -> ContextDependency:
    """Dependency factory: full authentication followed by ``policies`` in order."""

    async def dependency(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
        session: AsyncSession = Depends(get_db_session),  # noqa: B008
    ) -> RequestContext:
        resolver = IdentityResolver(session)
        steps = [resolver.required_step(_bearer_token(credentials)), *policies]
        return await run_pipeline(_base_context(request), steps)

    return dependency


def optionally_authenticated(*policies: Step) -> ContextDependency:
    """Dependency factory for routes that also serve anonymous callers."""

    async def dependency(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
        session: AsyncSession = Depends(get_db_session),  # noqa: B008
    ) -> RequestContext:
        resolver = IdentityResolver(session)
        steps = [resolver.optional_step(_bearer_token(credentials)), *policies]
        return await run_pipeline(_base_context(request), steps)

    return dependency
