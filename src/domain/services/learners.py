"""Learner-facing profile and course progress views."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select
from src.core.errors import NotFound
from src.domain.validation import ProfileUpdate, validate_payload
from src.infrastructure.db.models import UserModel
from src.infrastructure.db.session import bounded
from src.infrastructure.repositories.catalog import CatalogRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger(__name__)


def overall_progress(completed_lessons: int, total_lessons: int) -> float:
    """Percentage of lessons completed, clamped to [0, 100]; 0 for a course without lessons."""
    if total_lessons <= 0:
        return 0.0
    percentage = completed_lessons / total_lessons * 100
    return round(min(max(percentage, 0.0), 100.0), 2)


def _profile_to_dict(user: UserModel) -> dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone_number": user.phone_number,
        "role": user.role.value,
        "is_email_verified": user.is_email_verified,
        "created_at": user.created_at,
    }


class LearnerService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.catalog = CatalogRepository(session)

    async def get_profile(self, user_id: str) -> dict[str, Any]:
        return _profile_to_dict(await self._require_user(user_id))

    async def update_profile(self, user_id: str, payload: Any) -> dict[str, Any]:
        update = validate_payload(ProfileUpdate, payload)
        user = await self._require_user(user_id)

        changes = update.model_dump(exclude_unset=True)
        for field_name, value in changes.items():
            setattr(user, field_name, value)
        await bounded(self.session.commit(), operation="profile_update")
        await self.session.refresh(user)

        await logger.ainfo("profile_updated", user_id=user_id, updated_fields=sorted(changes))
        return _profile_to_dict(user)

    async def enrolled_courses(self, user_id: str) -> list[dict[str, Any]]:
        enrollments = await self.catalog.enrollments_for_user(user_id)
        courses: list[dict[str, Any]] = []
        for enrollment in enrollments:
            records = await self.catalog.progress_for_course(
                user_id=user_id, course_id=enrollment.course_id
            )
            progress = None
            if records:
                progress = {
                    "completed_lessons": sum(record.completed_lessons for record in records),
                    "completed_quizzes": sum(record.completed_quizzes for record in records),
                    "last_accessed": max(record.last_accessed for record in records),
                }
            courses.append(
                {
                    "course": {
                        "id": enrollment.course.id,
                        "title": enrollment.course.title,
                        "description": enrollment.course.description,
                    },
                    "enrolled_at": enrollment.enrolled_at,
                    "progress": progress,
                }
            )
        return courses

    async def course_progress(self, *, user_id: str, course_id: str) -> dict[str, Any]:
        """Progress across a course's live modules. Enrollment is checked by the caller."""
        course = await self.catalog.get_course(course_id, with_modules=True)
        if course is None:
            raise NotFound("Course not found")

        records = await self.catalog.progress_for_course(user_id=user_id, course_id=course_id)
        if not records:
            raise NotFound("Progress not found")

        by_module = {record.module_id: record for record in records}
        modules = [module for module in course.modules if not module.is_deleted]
        module_progress = []
        for module in modules:
            record = by_module.get(module.id)
            completed = min(record.completed_lessons, module.lesson_count) if record else 0
            module_progress.append(
                {
                    "module_id": module.id,
                    "module_name": module.title,
                    "completed_lessons": completed,
                    "total_lessons": module.lesson_count,
                }
            )

        completed_lessons = sum(entry["completed_lessons"] for entry in module_progress)
        total_lessons = sum(module.lesson_count for module in modules)
        return {
            "course_id": course.id,
            "completed_lessons": completed_lessons,
            "completed_quizzes": sum(record.completed_quizzes for record in records),
            "overall_progress": overall_progress(completed_lessons, total_lessons),
            "last_accessed": max(record.last_accessed for record in records),
            "module_progress": module_progress,
        }

    async def _require_user(self, user_id: str) -> UserModel:
        user = await bounded(
            self.session.scalar(select(UserModel).where(UserModel.id == user_id)),
            operation="user_lookup",
        )
        if user is None:
            raise NotFound("User not found")
        return user
