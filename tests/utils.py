from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession
from src.core.auth import Role, create_access_token
from src.infrastructure.db.models import (
    Course,
    CourseEnrollment,
    Module,
    ModuleReview,
    Progress,
    UserModel,
    UserRole,
)


def auth_headers(user_id: str, role: Role = Role.LEARNER, ttl: timedelta | None = None) -> dict[str, str]:
    token = create_access_token(user_id, role=role.value, expires_delta=ttl)
    return {"Authorization": f"Bearer {token}"}


def expired_headers(user_id: str, role: Role = Role.LEARNER) -> dict[str, str]:
    return auth_headers(user_id, role, ttl=timedelta(seconds=-60))


@dataclass
class Catalog:
    learner: UserModel
    other_learner: UserModel
    admin: UserModel
    course: Course
    module: Module
    other_module: Module

    def reviews_url(self, module: Module | None = None) -> str:
        module = module or self.module
        return f"/courses/{self.course.id}/modules/{module.id}/reviews"


async def create_user(
    session: AsyncSession,
    *,
    email: str,
    first_name: str = "Ada",
    last_name: str = "Lovelace",
    role: UserRole = UserRole.LEARNER,
    verified: bool = True,
) -> UserModel:
    user = UserModel(
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
        is_email_verified=verified,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def create_progress(
    session: AsyncSession,
    *,
    user: UserModel,
    module: Module,
    completed_lessons: int = 1,
    completed_quizzes: int = 0,
) -> Progress:
    progress = Progress(
        user_id=user.id,
        course_id=module.course_id,
        module_id=module.id,
        completed_lessons=completed_lessons,
        completed_quizzes=completed_quizzes,
    )
    session.add(progress)
    await session.commit()
    return progress


async def enroll(session: AsyncSession, *, user: UserModel, course: Course) -> None:
    session.add(CourseEnrollment(user_id=user.id, course_id=course.id))
    await session.commit()


async def add_review(
    session: AsyncSession,
    *,
    user: UserModel,
    module: Module,
    rating: int,
    feedback: str | None = None,
    is_deleted: bool = False,
    created_at: datetime | None = None,
) -> ModuleReview:
    review = ModuleReview(
        user_id=user.id,
        module_id=module.id,
        course_id=module.course_id,
        rating=rating,
        feedback=feedback,
        is_deleted=is_deleted,
    )
    if created_at is not None:
        review.created_at = created_at
        review.updated_at = created_at
    session.add(review)
    await session.commit()
    await session.refresh(review)
    return review


async def seed_catalog(session: AsyncSession) -> Catalog:
    learner = await create_user(session, email="ada@example.com")
    other_learner = await create_user(
        session, email="grace@example.com", first_name="Grace", last_name="Hopper"
    )
    admin = await create_user(
        session, email="admin@example.com", first_name="Alan", last_name="Turing", role=UserRole.ADMIN
    )

    course = Course(title="Distributed Systems")
    session.add(course)
    await session.flush()

    module = Module(course_id=course.id, title="Consensus", position=1, lesson_count=4)
    other_module = Module(course_id=course.id, title="Replication", position=2, lesson_count=6)
    session.add_all([module, other_module])
    await session.commit()
    for instance in (course, module, other_module):
        await session.refresh(instance)

    return Catalog(
        learner=learner,
        other_learner=other_learner,
        admin=admin,
        course=course,
        module=module,
        other_module=other_module,
    )
