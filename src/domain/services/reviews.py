"""Review lifecycle: submit (upsert), fetch, soft delete."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from src.core.errors import DependencyFailure, NotFound
from src.domain.services.eligibility import EligibilityChecker
from src.domain.validation import ReviewSubmission, validate_payload
from src.infrastructure.repositories.catalog import CatalogRepository
from src.infrastructure.repositories.reviews import ReviewRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from src.infrastructure.db.models import Module, ModuleReview

logger = structlog.get_logger(__name__)


async def require_module(catalog: CatalogRepository, *, course_id: str, module_id: str) -> Module:
    module = await catalog.get_module(course_id=course_id, module_id=module_id)
    if module is None:
        raise NotFound("Module not found")
    return module


def review_to_dict(review: ModuleReview) -> dict[str, Any]:
    return {
        "id": review.id,
        "rating": review.rating,
        "feedback": review.feedback,
        "created_at": review.created_at,
        "updated_at": review.updated_at,
    }


class ReviewService:
    """Per-user, per-module review records keyed by (user, module, course)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.reviews = ReviewRepository(session)
        self.catalog = CatalogRepository(session)
        self.eligibility = EligibilityChecker(session)

    async def submit(
        self, *, user_id: str, course_id: str, module_id: str, payload: Any
    ) -> dict[str, Any]:
        """Create the review or overwrite the existing one.

        Resubmitting after a soft delete restores the review with the new values.
        """
        submission = validate_payload(ReviewSubmission, payload)
        await require_module(self.catalog, course_id=course_id, module_id=module_id)
        await self.eligibility.ensure_completed(user_id, course_id, module_id)

        review = await self.reviews.upsert(
            user_id=user_id,
            course_id=course_id,
            module_id=module_id,
            rating=submission.rating,
            feedback=submission.feedback,
        )
        await logger.ainfo(
            "review_submitted",
            review_id=review.id,
            user_id=user_id,
            course_id=course_id,
            module_id=module_id,
            rating=review.rating,
        )
        result = review_to_dict(review)
        await self._refresh_module_rating(course_id=course_id, module_id=module_id)
        return result

    async def fetch_own(
        self, *, user_id: str, course_id: str, module_id: str
    ) -> dict[str, Any] | None:
        review = await self.reviews.get(user_id=user_id, course_id=course_id, module_id=module_id)
        return review_to_dict(review) if review is not None else None

    async def soft_delete(self, *, user_id: str, course_id: str, module_id: str) -> dict[str, Any]:
        review = await self.reviews.soft_delete(
            user_id=user_id, course_id=course_id, module_id=module_id
        )
        if review is None:
            raise NotFound("Review not found")

        await logger.ainfo("review_soft_deleted", review_id=review.id, user_id=user_id)
        result = review_to_dict(review)
        await self._refresh_module_rating(course_id=course_id, module_id=module_id)
        return result

    async def soft_delete_by_id(
        self, *, review_id: str, course_id: str, module_id: str, admin_id: str | None = None
    ) -> dict[str, Any]:
        """Administrative delete, still fenced to the module so ids cannot be guessed across it."""
        await require_module(self.catalog, course_id=course_id, module_id=module_id)
        review = await self.reviews.soft_delete_by_id(
            review_id=review_id, course_id=course_id, module_id=module_id
        )
        if review is None:
            raise NotFound("Review not found")

        await logger.ainfo("review_soft_deleted_by_admin", review_id=review.id, admin_user=admin_id)
        result = review_to_dict(review)
        await self._refresh_module_rating(course_id=course_id, module_id=module_id)
        return result

    async def _refresh_module_rating(self, *, course_id: str, module_id: str) -> None:
        # The review is already committed and serialized; a stale average is tolerable.
        try:
            average = await self.reviews.average_rating(course_id=course_id, module_id=module_id)
            await self.catalog.set_module_rating(module_id, round(average or 0.0, 2))
        except DependencyFailure as exc:
            await self.session.rollback()
            await logger.awarning(
                "module_rating_refresh_failed", module_id=module_id, error=exc.message
            )
