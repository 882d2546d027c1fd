"""Ordered request pipeline.

Each step receives the current ``RequestContext`` and returns the context the
next step should see. A step ends the pipeline by raising a ``ServiceError``;
later steps never run.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, replace

from src.domain.models import Identity

Step = Callable[["RequestContext"], Awaitable["RequestContext"]]


@dataclass(frozen=True, slots=True)
class RequestContext:
    request_id: str
    identity: Identity | None = None

    def with_identity(self, identity: Identity | None) -> RequestContext:
        return replace(self, identity=identity)

    @property
    def is_anonymous(self) -> bool:
        return self.identity is None


async def run_pipeline(context: RequestContext, steps: Iterable[Step]) -> RequestContext:
    for step in steps:
        context = await step(context)
    return context
