"""Storage adapter for module reviews.

Reads exclude soft-deleted rows unless the caller asks for them explicitly.
The natural key (user, module, course) is enforced by a unique constraint and
written through the database's atomic ``INSERT ... ON CONFLICT DO UPDATE``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import selectinload
from src.infrastructure.db.models import ModuleReview
from src.infrastructure.db.session import bounded

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@dataclass(frozen=True, slots=True)
class ReviewQuery:
    """Composable filter set for review listings; ``None`` means "do not filter"."""

    course_id: str | None = None
    module_id: str | None = None
    rating: int | None = None
    search: str | None = None
    include_deleted: bool = False

    def applied(self) -> dict[str, Any]:
        applied: dict[str, Any] = {}
        if self.rating is not None:
            applied["rating"] = self.rating
        if self.course_id is not None:
            applied["courseId"] = self.course_id
        if self.module_id is not None:
            applied["moduleId"] = self.module_id
        if self.search:
            applied["search"] = self.search
        if not self.include_deleted:
            applied["isDeleted"] = False
        return applied


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ReviewRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def upsert(
        self,
        *,
        user_id: str,
        course_id: str,
        module_id: str,
        rating: int,
        feedback: str | None,
    ) -> ModuleReview:
        """Create or overwrite the review for the natural key and clear ``is_deleted``."""
        dialect = self.session.get_bind().dialect.name
        try:
            insert = _UPSERT_DIALECTS[dialect]
        except KeyError as exc:
            raise RuntimeError(f"Review upsert is not supported on the {dialect} dialect") from exc

        stmt = insert(ModuleReview).values(
            id=str(uuid.uuid4()),
            user_id=user_id,
            module_id=module_id,
            course_id=course_id,
            rating=rating,
            feedback=feedback,
            is_deleted=False,
        )
        # ON CONFLICT DO UPDATE skips Column.onupdate, so updated_at is set here.
        stmt = stmt.on_conflict_do_update(
            index_elements=[ModuleReview.user_id, ModuleReview.module_id, ModuleReview.course_id],
            set_={
                "rating": stmt.excluded.rating,
                "feedback": stmt.excluded.feedback,
                "is_deleted": False,
                "updated_at": func.now(),
            },
        )
        await bounded(self.session.execute(stmt), operation="review_upsert")
        await bounded(self.session.commit(), operation="review_upsert")

        review = await self.get(
            user_id=user_id, course_id=course_id, module_id=module_id, include_deleted=True
        )
        if review is None:  # pragma: no cover - the upsert above guarantees a row
            raise RuntimeError("Review upsert did not persist a row")
        return review

    async def get(
        self,
        *,
        user_id: str,
        course_id: str,
        module_id: str,
        include_deleted: bool = False,
    ) -> ModuleReview | None:
        stmt = select(ModuleReview).where(
            ModuleReview.user_id == user_id,
            ModuleReview.module_id == module_id,
            ModuleReview.course_id == course_id,
        )
        if not include_deleted:
            stmt = stmt.where(ModuleReview.is_deleted == False)  # noqa: E712
        # populate_existing refreshes rows already in the identity map after an upsert
        stmt = stmt.execution_options(populate_existing=True)
        result = await bounded(self.session.execute(stmt), operation="review_get")
        return result.scalar_one_or_none()

    async def soft_delete(
        self, *, user_id: str, course_id: str, module_id: str
    ) -> ModuleReview | None:
        return await self._soft_delete_where(
            ModuleReview.user_id == user_id,
            ModuleReview.module_id == module_id,
            ModuleReview.course_id == course_id,
        )

    async def soft_delete_by_id(
        self, *, review_id: str, course_id: str, module_id: str
    ) -> ModuleReview | None:
        return await self._soft_delete_where(
            ModuleReview.id == review_id,
            ModuleReview.module_id == module_id,
            ModuleReview.course_id == course_id,
        )

    async def _soft_delete_where(self, *criteria: Any) -> ModuleReview | None:
        stmt = (
            update(ModuleReview)
            .where(*criteria, ModuleReview.is_deleted == False)  # noqa: E712
            .values(is_deleted=True, updated_at=func.now())
            .returning(ModuleReview.id)
        )
        result = await bounded(self.session.execute(stmt), operation="review_soft_delete")
        review_id = result.scalar_one_or_none()
        await bounded(self.session.commit(), operation="review_soft_delete")
        if review_id is None:
            return None

        refreshed = await bounded(
            self.session.execute(
                select(ModuleReview)
                .where(ModuleReview.id == review_id)
                .execution_options(populate_existing=True)
            ),
            operation="review_get",
        )
        return refreshed.scalar_one()

    async def count(self, query: ReviewQuery) -> int:
        stmt = self._filtered(select(func.count(ModuleReview.id)), query)
        total = await bounded(self.session.scalar(stmt), operation="review_count")
        return int(total or 0)

    async def find(
        self,
        query: ReviewQuery,
        *,
        offset: int,
        limit: int,
        with_module: bool = False,
        with_course: bool = False,
    ) -> list[ModuleReview]:
        """Newest first, with the reviewer (and optionally module/course) loaded."""
        options = [selectinload(ModuleReview.user)]
        if with_module:
            options.append(selectinload(ModuleReview.module))
        if with_course:
            options.append(selectinload(ModuleReview.course))

        stmt = (
            self._filtered(select(ModuleReview), query)
            .options(*options)
            .order_by(ModuleReview.created_at.desc(), ModuleReview.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await bounded(self.session.execute(stmt), operation="review_find")
        return list(result.scalars().all())

    async def rating_counts(self, query: ReviewQuery) -> dict[int, int]:
        stmt = self._filtered(
            select(ModuleReview.rating, func.count(ModuleReview.id)), query
        ).group_by(ModuleReview.rating)
        result = await bounded(self.session.execute(stmt), operation="review_rating_counts")
        return {int(rating): int(count) for rating, count in result.all()}

    async def average_rating(self, *, course_id: str, module_id: str) -> float | None:
        stmt = self._filtered(
            select(func.avg(ModuleReview.rating)),
            ReviewQuery(course_id=course_id, module_id=module_id),
        )
        average = await bounded(self.session.scalar(stmt), operation="review_average")
        return float(average) if average is not None else None

    @staticmethod
    def _filtered(stmt: Select[Any], query: ReviewQuery) -> Select[Any]:
        if query.course_id is not None:
            stmt = stmt.where(ModuleReview.course_id == query.course_id)
        if query.module_id is not None:
            stmt = stmt.where(ModuleReview.module_id == query.module_id)
        if query.rating is not None:
            stmt = stmt.where(ModuleReview.rating == query.rating)
        if query.search:
            pattern = f"%{_escape_like(query.search)}%"
            stmt = stmt.where(ModuleReview.feedback.ilike(pattern, escape="\\"))
        if not query.include_deleted:
            stmt = stmt.where(ModuleReview.is_deleted == False)  # noqa: E712
        return stmt
