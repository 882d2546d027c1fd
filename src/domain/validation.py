"""Request payload validators.

The pydantic models here are built once at import time and are immutable;
``validate_payload`` reports every violated field in a single
``ValidationFailed`` rather than stopping at the first one.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from src.core.errors import FieldError, ValidationFailed

ModelT = TypeVar("ModelT", bound=BaseModel)

PHONE_PATTERN = r"^[+]?[(]?[0-9]{3}[)]?[-\s.]?[0-9]{3}[-\s.]?[0-9]{4,6}$"


class ReviewSubmission(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    rating: int = Field(..., ge=1, le=5)
    feedback: str | None = None

    @field_validator("rating", mode="before")
    @classmethod
    def _reject_boolean(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("must be a number")
        return value


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    first_name: str | None = Field(None, alias="firstName", min_length=2, max_length=50)
    last_name: str | None = Field(None, alias="lastName", min_length=2, max_length=50)
    phone_number: str | None = Field(None, alias="phoneNumber", pattern=PHONE_PATTERN)

    @field_validator("first_name", "last_name", "phone_number", mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may not be null")
        return value


def field_errors(exc: ValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    for error in exc.errors():
        location = [str(part) for part in error["loc"]]
        errors.append(FieldError(field=".".join(location) or "body", message=error["msg"]))
    return errors


def validate_payload(model: type[ModelT], payload: Any) -> ModelT:
    if not isinstance(payload, dict):
        raise ValidationFailed([FieldError(field="body", message="Request body must be an object")])
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailed(field_errors(exc)) from exc
