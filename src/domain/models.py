from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Identity:
    """The actor a request runs as; immutable for the lifetime of that request.

    Full authentication fills every field from the stored user record. Optional
    authentication only knows what the token carries (``user_id`` and ``role``).
    """

    user_id: str
    role: str
    is_email_verified: bool = False
    enrolled_courses: frozenset[str] = field(default_factory=frozenset)
    email: str = ""
    first_name: str | None = None
    last_name: str | None = None

    def is_enrolled_in(self, course_id: str) -> bool:
        return course_id in self.enrolled_courses


@dataclass(frozen=True, slots=True)
class RatingBucket:
    rating: int
    count: int
