"""Module review routes: learner submissions, public listing, admin moderation."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import authenticated, get_db_session, optionally_authenticated
from src.api.schemas.common import MessageResponse
from src.api.schemas.reviews import (
    AdminModuleReviewPage,
    AdminModuleReviewsResponse,
    AdminReviewPage,
    AdminReviewsResponse,
    PublicReviewPage,
    PublicReviewsResponse,
    ReviewData,
    ReviewEnvelope,
)
from src.core.auth import Role
from src.core.pipeline import RequestContext
from src.domain.pagination import PageRequest
from src.domain.policy import require_role
from src.domain.services.review_listing import ReviewListingService
from src.domain.services.reviews import ReviewService
from src.infrastructure.repositories.reviews import ReviewQuery

logger = structlog.get_logger()

router = APIRouter(prefix="/courses/{course_id}/modules/{module_id}/reviews", tags=["Reviews"])
admin_router = APIRouter(prefix="/admin/reviews", tags=["Reviews"])

admin_only = authenticated(require_role({Role.ADMIN.value}))


@router.post("", response_model=ReviewEnvelope, summary="Create or update own review")
async def submit_review(
    course_id: str,
    module_id: str,
    payload: Any = Body(None),  # noqa: B008
    context: RequestContext = Depends(authenticated()),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> ReviewEnvelope:
    """Submit a review; resubmitting replaces the previous one (and restores it if deleted)."""
    review = await ReviewService(session).submit(
        user_id=context.identity.user_id,
        course_id=course_id,
        module_id=module_id,
        payload=payload,
    )
    return ReviewEnvelope(message="Module review submitted successfully", data=ReviewData(**review))


@router.get("/me", response_model=ReviewEnvelope, summary="Get own review")
async def get_own_review(
    course_id: str,
    module_id: str,
    context: RequestContext = Depends(authenticated()),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> ReviewEnvelope:
    review = await ReviewService(session).fetch_own(
        user_id=context.identity.user_id, course_id=course_id, module_id=module_id
    )
    if review is None:
        return ReviewEnvelope(message="No review found", data=None)
    return ReviewEnvelope(message="Module review fetched successfully", data=ReviewData(**review))


@router.delete("/me", response_model=MessageResponse, summary="Delete own review")
async def delete_own_review(
    course_id: str,
    module_id: str,
    context: RequestContext = Depends(authenticated()),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> MessageResponse:
    await ReviewService(session).soft_delete(
        user_id=context.identity.user_id, course_id=course_id, module_id=module_id
    )
    return MessageResponse(message="Module review deleted successfully")


@router.get("", response_model=PublicReviewsResponse, summary="Public module reviews")
async def list_public_reviews(
    course_id: str,
    module_id: str,
    page: str | None = Query(None),
    limit: str | None = Query(None),
    context: RequestContext = Depends(optionally_authenticated()),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> PublicReviewsResponse:
    """List live reviews newest first, with the rating histogram. Reviewers show by first name."""
    result = await ReviewListingService(session).list_public(
        course_id=course_id, module_id=module_id, page=PageRequest.parse(page, limit)
    )
    return PublicReviewsResponse(data=PublicReviewPage(**result))


@router.get("/admin", response_model=AdminModuleReviewsResponse, summary="Admin module reviews")
async def list_module_reviews_admin(
    course_id: str,
    module_id: str,
    page: str | None = Query(None),
    limit: str | None = Query(None),
    context: RequestContext = Depends(admin_only),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> AdminModuleReviewsResponse:
    result = await ReviewListingService(session).list_for_module_admin(
        course_id=course_id, module_id=module_id, page=PageRequest.parse(page, limit)
    )
    return AdminModuleReviewsResponse(data=AdminModuleReviewPage(**result))


@router.delete("/{review_id}", response_model=MessageResponse, summary="Admin delete review")
async def delete_review_admin(
    course_id: str,
    module_id: str,
    review_id: str,
    context: RequestContext = Depends(admin_only),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> MessageResponse:
    await ReviewService(session).soft_delete_by_id(
        review_id=review_id,
        course_id=course_id,
        module_id=module_id,
        admin_id=context.identity.user_id,
    )
    return MessageResponse(message="Module review deleted successfully by admin")


@admin_router.get("", response_model=AdminReviewsResponse, summary="All reviews (admin)")
async def list_all_reviews_admin(
    page: str | None = Query(None),
    limit: str | None = Query(None),
    rating: int | None = Query(None),
    course_id: str | None = Query(None, alias="courseId"),
    module_id: str | None = Query(None, alias="moduleId"),
    search: str | None = Query(None),
    show_deleted: str | None = Query(None, alias="showDeleted"),
    context: RequestContext = Depends(admin_only),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> AdminReviewsResponse:
    """Filters combine; soft-deleted reviews are hidden unless ``showDeleted=true``."""
    query = ReviewQuery(
        course_id=course_id or None,
        module_id=module_id or None,
        rating=rating,
        search=search or None,
        include_deleted=show_deleted == "true",
    )
    result = await ReviewListingService(session).list_all_admin(
        query=query, page=PageRequest.parse(page, limit)
    )
    logger.info(
        "admin_reviews_listed",
        admin_user=context.identity.user_id,
        filters=result["filters"],
        total=result["pagination"]["total_reviews"],
    )
    return AdminReviewsResponse(data=AdminReviewPage(**result))
