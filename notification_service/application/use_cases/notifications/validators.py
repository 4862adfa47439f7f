"""Validation helpers shared by the notification use cases."""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

from notification_service.domain.entities import SortDirection
from notification_service.domain.errors import InvalidTarget, ValidationError
from notification_service.infrastructure.repositories import SORTABLE_COLUMNS

E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: type[E], value: object, *, field_name: str) -> E:
    """Return ``value`` as a member of ``enum_cls`` or raise :class:`ValidationError`."""

    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        candidate = value.strip().upper().replace("-", "_")
        try:
            return enum_cls(candidate)
        except ValueError:
            pass
    allowed = ", ".join(member.value for member in enum_cls)
    raise ValidationError(f"Unsupported {field_name} '{value}'. Allowed values: {allowed}")


def coerce_optional_enum(enum_cls: type[E], value: object, *, field_name: str) -> E | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return coerce_enum(enum_cls, value, field_name=field_name)


def ensure_single_target(user_id: int | None, role: object | None) -> None:
    """Reject notifications addressed to both or neither of a user and a role."""

    if (user_id is None) == (role is None):
        raise InvalidTarget("Exactly one of user_id or role must be provided")


def ensure_text(value: str | None, *, field_name: str, max_length: int) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field_name} must not be empty")
    if len(text) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return text


def ensure_days(value: int, *, field_name: str = "older_than_days") -> int:
    if value < 0:
        raise ValidationError(f"{field_name} must be zero or positive")
    return value


def ensure_page_request(
    page: int, page_size: int, sort_by: str, sort_dir: object, *, max_page_size: int
) -> SortDirection:
    """Validate pagination and sorting arguments, returning the sort direction."""

    if page < 0:
        raise ValidationError("page must be zero or positive")
    if page_size < 1 or page_size > max_page_size:
        raise ValidationError(f"page_size must be between 1 and {max_page_size}")
    if sort_by not in SORTABLE_COLUMNS:
        allowed = ", ".join(sorted(SORTABLE_COLUMNS))
        raise ValidationError(f"Unsupported sort_by '{sort_by}'. Allowed values: {allowed}")
    return coerce_enum(SortDirection, sort_dir, field_name="sort_dir")


__all__ = [
    "coerce_enum",
    "coerce_optional_enum",
    "ensure_days",
    "ensure_page_request",
    "ensure_single_target",
    "ensure_text",
]
