"""Page/limit parsing and page metadata shared by every review listing."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass

from src.core.config import get_settings

DEFAULT_PAGE = 1


def _positive_int(raw: str | int | None) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


@dataclass(frozen=True, slots=True)
class PageRequest:
    page: int
    limit: int

    @classmethod
    def parse(cls, page: str | int | None, limit: str | int | None) -> PageRequest:
        """Absent, non-numeric or non-positive values fall back to page 1 / the default size."""
        return cls(
            page=_positive_int(page) or DEFAULT_PAGE,
            limit=_positive_int(limit) or get_settings().default_page_size,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True, slots=True)
class Pagination:
    current_page: int
    total_pages: int
    total_reviews: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, request: PageRequest, total: int) -> Pagination:
        total_pages = math.ceil(total / request.limit)
        return cls(
            current_page=request.page,
            total_pages=total_pages,
            total_reviews=total,
            has_next_page=request.page < total_pages,
            has_prev_page=request.page > 1,
        )

    def as_dict(self) -> dict[str, int | bool]:
        return asdict(self)
