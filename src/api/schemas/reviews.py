"""Pydantic schemas for review endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from .common import CamelModel, PaginationResponse


class ReviewData(CamelModel):
    id: str
    rating: int
    feedback: str | None = None
    created_at: datetime
    updated_at: datetime


class ReviewEnvelope(CamelModel):
    message: str
    data: ReviewData | None = None


class PublicReviewer(CamelModel):
    name: str | None = Field(None, description="Reviewer's first name only")


class PublicReview(CamelModel):
    id: str
    user: PublicReviewer
    rating: int
    feedback: str | None = None
    created_at: datetime


class RatingBucketResponse(CamelModel):
    rating: int
    count: int


class ReviewSummary(CamelModel):
    total_reviews: int
    rating_distribution: list[RatingBucketResponse]


class PublicModule(CamelModel):
    id: str
    title: str
    average_rating: float


class PublicReviewPage(CamelModel):
    module: PublicModule
    summary: ReviewSummary
    reviews: list[PublicReview]
    pagination: PaginationResponse


class Reviewer(CamelModel):
    id: str
    name: str
    email: str


class AdminModuleReview(CamelModel):
    id: str
    user: Reviewer
    rating: int
    feedback: str | None = None
    created_at: datetime
    updated_at: datetime


class ModuleRef(CamelModel):
    id: str
    title: str


class AdminModuleReviewPage(CamelModel):
    module: ModuleRef
    reviews: list[AdminModuleReview]
    pagination: PaginationResponse


class AdminReview(CamelModel):
    id: str
    rating: int
    feedback: str | None = None
    is_deleted: bool
    user: Reviewer
    module: ModuleRef
    course: ModuleRef
    created_at: datetime
    updated_at: datetime


class AdminReviewPage(CamelModel):
    reviews: list[AdminReview]
    pagination: PaginationResponse
    filters: dict[str, Any]


class PublicReviewsResponse(CamelModel):
    message: str = "Module reviews fetched successfully"
    data: PublicReviewPage


class AdminModuleReviewsResponse(CamelModel):
    message: str = "Module reviews fetched successfully"
    data: AdminModuleReviewPage


class AdminReviewsResponse(CamelModel):
    message: str = "All reviews fetched successfully"
    data: AdminReviewPage
