from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from src.core.errors import Forbidden
from src.infrastructure.repositories.catalog import CatalogRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger(__name__)


class EligibilityChecker:
    """Decides whether a learner may review a module.

    A progress record for (user, course, module) is the only gating fact. Every
    call hits storage; completion can change between requests.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.catalog = CatalogRepository(session)

    async def check_completed(self, user_id: str, course_id: str, module_id: str) -> bool:
        return await self.catalog.progress_exists(
            user_id=user_id, course_id=course_id, module_id=module_id
        )

    async def ensure_completed(self, user_id: str, course_id: str, module_id: str) -> None:
        if not await self.check_completed(user_id, course_id, module_id):
            await logger.ainfo(
                "review_not_eligible",
                user_id=user_id,
                course_id=course_id,
                module_id=module_id,
            )
            raise Forbidden("You must complete this module before reviewing it")
