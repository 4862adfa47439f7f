"""Error taxonomy raised by the notification core.

Every error derives from :class:`ValueError` so callers that treat domain
failures as bad input keep working; routes map the concrete classes to
HTTP status codes.
"""

from __future__ import annotations


class NotificationError(ValueError):
    """Base class for notification domain failures."""

    code = "NOTIFICATION_ERROR"


class NotFound(NotificationError):
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class AlreadyDeleted(NotificationError):
    """The target of a mutation disappeared between lookup and write."""

    code = "ALREADY_DELETED"

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} {entity_id} was already deleted")
        self.entity = entity
        self.entity_id = entity_id


class InvalidTarget(NotificationError):
    code = "INVALID_TARGET"


class ValidationError(NotificationError):
    code = "VALIDATION_ERROR"


class CohortResolutionFailure(NotificationError):
    code = "COHORT_RESOLUTION_FAILURE"


class RetentionSweepFailure(NotificationError):
    code = "RETENTION_SWEEP_FAILURE"


__all__ = [
    "AlreadyDeleted",
    "CohortResolutionFailure",
    "InvalidTarget",
    "NotFound",
    "NotificationError",
    "RetentionSweepFailure",
    "ValidationError",
]
