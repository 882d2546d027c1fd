from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response base: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginationResponse(CamelModel):
    current_page: int
    total_pages: int
    total_reviews: int
    has_next_page: bool
    has_prev_page: bool


class MessageResponse(CamelModel):
    message: str
