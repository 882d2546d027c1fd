"""Authorization gates applied after identity resolution.

Each gate is a pipeline step: it returns the context untouched or raises.
"""

from __future__ import annotations

from collections.abc import Iterable

from src.core.errors import AuthenticationRequired, Forbidden
from src.core.pipeline import RequestContext, Step


def require_role(allowed: Iterable[str]) -> Step:
    allowed_roles = frozenset(allowed)

    async def gate(context: RequestContext) -> RequestContext:
        identity = context.identity
        if identity is None or identity.role not in allowed_roles:
            raise Forbidden()
        return context

    return gate


async def require_email_verified(context: RequestContext) -> RequestContext:
    if context.identity is None:
        raise AuthenticationRequired("Authentication required")
    if not context.identity.is_email_verified:
        raise Forbidden("Please verify your email first")
    return context


def require_enrollment(course_id: str) -> Step:
    async def gate(context: RequestContext) -> RequestContext:
        if context.identity is None:
            raise AuthenticationRequired("Authentication required")
        if not context.identity.is_enrolled_in(course_id):
            raise Forbidden("You are not enrolled in this course")
        return context

    return gate
