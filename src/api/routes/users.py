"""Learner profile and course progress routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from src.api.deps import authenticated, get_db_session
from src.api.schemas.users import (
    CourseProgressData,
    CourseProgressResponse,
    EnrolledCourse,
    EnrolledCoursesResponse,
    ProfileData,
    ProfileResponse,
)
from src.core.pipeline import RequestContext, run_pipeline
from src.domain.policy import require_email_verified, require_enrollment
from src.domain.services.learners import LearnerService

router = APIRouter(prefix="/users/me", tags=["Users"])


@router.get("", response_model=ProfileResponse, summary="Get own profile")
async def get_profile(
    context: RequestContext = Depends(authenticated()),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> ProfileResponse:
    profile = await LearnerService(session).get_profile(context.identity.user_id)
    return ProfileResponse(message="Profile retrieved successfully", data=ProfileData(**profile))


@router.patch("", response_model=ProfileResponse, summary="Update own profile")
async def update_profile(
    payload: Any = Body(None),  # noqa: B008
    context: RequestContext = Depends(authenticated()),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> ProfileResponse:
    profile = await LearnerService(session).update_profile(context.identity.user_id, payload)
    return ProfileResponse(message="Profile updated successfully", data=ProfileData(**profile))


@router.get("/courses", response_model=EnrolledCoursesResponse, summary="Enrolled courses")
async def list_enrolled_courses(
    context: RequestContext = Depends(authenticated()),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> EnrolledCoursesResponse:
    courses = await LearnerService(session).enrolled_courses(context.identity.user_id)
    return EnrolledCoursesResponse(data=[EnrolledCourse(**course) for course in courses])


@router.get(
    "/courses/{course_id}/progress",
    response_model=CourseProgressResponse,
    summary="Progress in an enrolled course",
)
async def get_course_progress(
    course_id: str,
    context: RequestContext = Depends(authenticated(require_email_verified)),  # noqa: B008
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> CourseProgressResponse:
    context = await run_pipeline(context, [require_enrollment(course_id)])
    progress = await LearnerService(session).course_progress(
        user_id=context.identity.user_id, course_id=course_id
    )
    return CourseProgressResponse(data=CourseProgressData(**progress))
