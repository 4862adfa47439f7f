"""User directory collaborators used to resolve role cohorts."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from notification_service.domain.entities import NotificationRole
from notification_service.infrastructure.models import UserDirectoryEntryModel


class UserDirectory(Protocol):
    """Resolve a role into the ids of the users currently holding it."""

    def resolve_cohort(self, role: NotificationRole) -> list[int]: ...


class SqlUserDirectory:
    """Directory backed by the ``user_directory`` membership mirror."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def resolve_cohort(self, role: NotificationRole) -> list[int]:
        query = (
            select(UserDirectoryEntryModel.user_id)
            .where(UserDirectoryEntryModel.is_active.is_(True))
            .order_by(UserDirectoryEntryModel.user_id)
        )
        if role != NotificationRole.ALL:
            query = query.where(UserDirectoryEntryModel.role == role.value)
        return list(self.session.scalars(query))


class StaticUserDirectory:
    """Directory over an in-memory ``role -> user ids`` mapping."""

    def __init__(self, members: Mapping[NotificationRole, Iterable[int]]) -> None:
        self._members = {
            NotificationRole(role): list(user_ids) for role, user_ids in members.items()
        }

    def resolve_cohort(self, role: NotificationRole) -> list[int]:
        if role == NotificationRole.ALL:
            everyone: list[int] = []
            for user_ids in self._members.values():
                everyone.extend(user_ids)
            return sorted(set(everyone))
        return list(self._members.get(role, []))


__all__ = ["SqlUserDirectory", "StaticUserDirectory", "UserDirectory"]
