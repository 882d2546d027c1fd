"""Paginated review listings for the public and for administrators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from src.domain.models import RatingBucket
from src.domain.pagination import PageRequest, Pagination
from src.domain.services.reviews import require_module
from src.infrastructure.repositories.catalog import CatalogRepository
from src.infrastructure.repositories.reviews import ReviewQuery, ReviewRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from src.infrastructure.db.models import ModuleReview

RATING_SCALE = (1, 2, 3, 4, 5)


def rating_distribution(counts: dict[int, int]) -> list[RatingBucket]:
    """Zero-filled 1..5 histogram in ascending rating order."""
    return [RatingBucket(rating=rating, count=counts.get(rating, 0)) for rating in RATING_SCALE]


def _public_row(review: ModuleReview) -> dict[str, Any]:
    # Only the first name leaves the service for anonymous readers.
    return {
        "id": review.id,
        "user": {"name": review.user.first_name},
        "rating": review.rating,
        "feedback": review.feedback,
        "created_at": review.created_at,
    }


def _reviewer(review: ModuleReview) -> dict[str, Any]:
    return {
        "id": review.user.id,
        "name": review.user.full_name,
        "email": review.user.email,
    }


class ReviewListingService:
    def __init__(self, session: AsyncSession) -> None:
        self.reviews = ReviewRepository(session)
        self.catalog = CatalogRepository(session)

    async def list_public(
        self, *, course_id: str, module_id: str, page: PageRequest
    ) -> dict[str, Any]:
        module = await require_module(self.catalog, course_id=course_id, module_id=module_id)
        query = ReviewQuery(course_id=course_id, module_id=module_id)

        total = await self.reviews.count(query)
        rows = await self.reviews.find(query, offset=page.offset, limit=page.limit)
        counts = await self.reviews.rating_counts(query)

        return {
            "module": {
                "id": module.id,
                "title": module.title,
                "average_rating": module.rating or 0,
            },
            "summary": {
                "total_reviews": total,
                "rating_distribution": [
                    {"rating": bucket.rating, "count": bucket.count}
                    for bucket in rating_distribution(counts)
                ],
            },
            "reviews": [_public_row(review) for review in rows],
            "pagination": Pagination.build(page, total).as_dict(),
        }

    async def list_for_module_admin(
        self, *, course_id: str, module_id: str, page: PageRequest
    ) -> dict[str, Any]:
        module = await require_module(self.catalog, course_id=course_id, module_id=module_id)
        query = ReviewQuery(course_id=course_id, module_id=module_id)

        total = await self.reviews.count(query)
        rows = await self.reviews.find(query, offset=page.offset, limit=page.limit)

        return {
            "module": {"id": module.id, "title": module.title},
            "reviews": [
                {
                    "id": review.id,
                    "user": _reviewer(review),
                    "rating": review.rating,
                    "feedback": review.feedback,
                    "created_at": review.created_at,
                    "updated_at": review.updated_at,
                }
                for review in rows
            ],
            "pagination": Pagination.build(page, total).as_dict(),
        }

    async def list_all_admin(self, *, query: ReviewQuery, page: PageRequest) -> dict[str, Any]:
        total = await self.reviews.count(query)
        rows = await self.reviews.find(
            query,
            offset=page.offset,
            limit=page.limit,
            with_module=True,
            with_course=True,
        )

        return {
            "reviews": [
                {
                    "id": review.id,
                    "rating": review.rating,
                    "feedback": review.feedback,
                    "is_deleted": review.is_deleted,
                    "user": _reviewer(review),
                    "module": {"id": review.module.id, "title": review.module.title},
                    "course": {"id": review.course.id, "title": review.course.title},
                    "created_at": review.created_at,
                    "updated_at": review.updated_at,
                }
                for review in rows
            ],
            "pagination": Pagination.build(page, total).as_dict(),
            "filters": query.applied(),
        }
