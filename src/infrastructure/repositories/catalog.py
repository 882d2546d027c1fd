"""Read-only lookups for courses, modules and learner progress."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select, update
from sqlalchemy.orm import selectinload
from src.infrastructure.db.models import Course, CourseEnrollment, Module, Progress
from src.infrastructure.db.session import bounded

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class CatalogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_course(self, course_id: str, *, with_modules: bool = False) -> Course | None:
        stmt = select(Course).where(
            Course.id == course_id, Course.is_deleted == False  # noqa: E712
        )
        if with_modules:
            stmt = stmt.options(selectinload(Course.modules))
        result = await bounded(self.session.execute(stmt), operation="course_lookup")
        return result.scalar_one_or_none()

    async def get_module(self, *, course_id: str, module_id: str) -> Module | None:
        """Return the module only if it is live and belongs to ``course_id``."""
        stmt = select(Module).where(
            Module.id == module_id,
            Module.course_id == course_id,
            Module.is_deleted == False,  # noqa: E712
        )
        result = await bounded(self.session.execute(stmt), operation="module_lookup")
        return result.scalar_one_or_none()

    async def set_module_rating(self, module_id: str, rating: float) -> None:
        await bounded(
            self.session.execute(
                update(Module).where(Module.id == module_id).values(rating=rating)
            ),
            operation="module_rating_update",
        )
        await bounded(self.session.commit(), operation="module_rating_update")

    async def progress_exists(self, *, user_id: str, course_id: str, module_id: str) -> bool:
        stmt = (
            select(Progress.id)
            .where(
                Progress.user_id == user_id,
                Progress.course_id == course_id,
                Progress.module_id == module_id,
            )
            .limit(1)
        )
        found = await bounded(self.session.scalar(stmt), operation="progress_lookup")
        return found is not None

    async def progress_for_course(self, *, user_id: str, course_id: str) -> list[Progress]:
        stmt = select(Progress).where(Progress.user_id == user_id, Progress.course_id == course_id)
        result = await bounded(self.session.execute(stmt), operation="progress_lookup")
        return list(result.scalars().all())

    async def enrollments_for_user(self, user_id: str) -> list[CourseEnrollment]:
        """Enrollments whose course is still live, oldest first."""
        stmt = (
            select(CourseEnrollment)
            .join(Course, Course.id == CourseEnrollment.course_id)
            .options(selectinload(CourseEnrollment.course))
            .where(CourseEnrollment.user_id == user_id, Course.is_deleted == False)  # noqa: E712
            .order_by(CourseEnrollment.enrolled_at)
        )
        result = await bounded(self.session.execute(stmt), operation="enrollment_lookup")
        return list(result.scalars().all())
