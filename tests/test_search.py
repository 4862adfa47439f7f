"""Tests for filtered, paginated notification search."""

from __future__ import annotations

from datetime import timedelta, timezone

import pytest

from notification_service.application.use_cases.notifications import (
    create_notification,
    dismiss,
    list_receipts,
    mark_read,
    search_notifications,
)
from notification_service.domain.entities import (
    NotificationCategory,
    NotificationFilter,
    SortDirection,
)
from notification_service.domain.errors import ValidationError
from notification_service.infrastructure.repositories import ReceiptRepository
from notification_service.utils import now_in_app_naive_datetime


def _send(session, user_id: int = 1, **overrides) -> int:
    payload = {"category": "order", "title": "Order update", "message": "On its way"}
    payload.update(overrides)
    notification = create_notification(session, user_id=user_id, **payload)
    return list_receipts(session, notification.id)[0].id


def _notification_id(session, receipt_id: int) -> int:
    return ReceiptRepository(session).get(receipt_id).notification_id


def test_category_and_read_filters_share_totals_with_content(session):
    unread_orders = [_send(session, title=f"Order {index}") for index in range(3)]
    read_order = _send(session, title="Read order")
    mark_read(session, read_order)
    _send(session, category="finance", title="Payout")

    page = search_notifications(
        session,
        NotificationFilter(user_id=1, category=NotificationCategory.ORDER, is_read=False),
    )

    assert page.total_elements == 3
    assert sorted(view.id for view in page.content) == sorted(unread_orders)
    assert all(view.category is NotificationCategory.ORDER for view in page.content)


def test_pagination_reports_total_pages(session):
    for index in range(5):
        _send(session, title=f"Order {index}")

    first = search_notifications(session, NotificationFilter(user_id=1), page=0, page_size=2)
    last = search_notifications(session, NotificationFilter(user_id=1), page=2, page_size=2)
    beyond = search_notifications(session, NotificationFilter(user_id=1), page=3, page_size=2)

    assert first.total_elements == 5
    assert first.total_pages == 3
    assert len(first.content) == 2
    assert len(last.content) == 1
    assert beyond.content == []
    assert beyond.total_elements == 5


def test_empty_result_has_zero_pages(session):
    page = search_notifications(session, NotificationFilter(user_id=404))

    assert page.total_elements == 0
    assert page.total_pages == 0
    assert page.content == []


def test_dismissed_receipts_hidden_unless_requested(session):
    visible = _send(session)
    hidden = _send(session)
    dismiss(session, hidden)

    default = search_notifications(session, NotificationFilter(user_id=1))
    including = search_notifications(
        session, NotificationFilter(user_id=1, include_dismissed=True)
    )

    assert [view.id for view in default.content] == [visible]
    assert sorted(view.id for view in including.content) == sorted([visible, hidden])


def test_expired_notifications_hidden_unless_requested(session):
    live = _send(session)
    expired = _send(session, expires_at=now_in_app_naive_datetime() - timedelta(minutes=5))

    default = search_notifications(session, NotificationFilter(user_id=1))
    including = search_notifications(
        session, NotificationFilter(user_id=1, include_expired=True)
    )

    assert [view.id for view in default.content] == [live]
    assert sorted(view.id for view in including.content) == sorted([live, expired])


def test_search_term_is_case_insensitive_over_title_and_message(session):
    by_title = _send(session, title="Refund issued", message="Check your card")
    by_message = _send(session, title="Support", message="Your REFUND is on its way")
    _send(session, title="Order placed", message="Thanks")

    page = search_notifications(session, NotificationFilter(search_term="refund"))

    assert sorted(view.id for view in page.content) == sorted([by_title, by_message])


def test_search_term_treats_wildcards_literally(session):
    _send(session, title="Half price", message="Everything")
    percent = _send(session, title="50% off", message="Today only")

    page = search_notifications(session, NotificationFilter(search_term="50%"))

    assert [view.id for view in page.content] == [percent]


def test_sort_direction_orders_by_created_at(session, backdate):
    older = _send(session, title="Older")
    newer = _send(session, title="Newer")
    older_notification = _notification_id(session, older)
    backdate.notification(
        older_notification, created_at=now_in_app_naive_datetime() - timedelta(hours=1)
    )

    descending = search_notifications(session, NotificationFilter(user_id=1))
    ascending = search_notifications(
        session, NotificationFilter(user_id=1), sort_dir=SortDirection.ASC
    )

    assert [view.id for view in descending.content] == [newer, older]
    assert [view.id for view in ascending.content] == [older, newer]


def test_sort_by_priority(session):
    low = _send(session, priority="low")
    urgent = _send(session, priority="urgent")
    normal = _send(session)

    page = search_notifications(
        session, NotificationFilter(user_id=1), sort_by="priority", sort_dir="desc"
    )

    assert [view.id for view in page.content] == [urgent, normal, low]


def test_role_and_order_filters(session, directory):
    broadcast = create_notification(
        session,
        category="delivery",
        title="Rain",
        message="Drive safe",
        role="COURIER",
        directory=directory,
    )
    targeted = _send(session, user_id=10, order_id=555)

    by_role = search_notifications(session, NotificationFilter(role="COURIER"))
    by_order = search_notifications(session, NotificationFilter(order_id=555))

    assert by_role.total_elements == 3
    assert {view.notification_id for view in by_role.content} == {broadcast.id}
    assert [view.id for view in by_order.content] == [targeted]


def test_date_range_filter(session, backdate):
    old = _send(session, title="Old")
    recent = _send(session, title="Recent")
    backdate.notification(
        _notification_id(session, old),
        created_at=now_in_app_naive_datetime() - timedelta(days=10),
    )

    page = search_notifications(
        session,
        NotificationFilter(date_from=now_in_app_naive_datetime() - timedelta(days=1)),
    )

    assert [view.id for view in page.content] == [recent]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"page": -1},
        {"page_size": 0},
        {"page_size": 101},
        {"sort_by": "title"},
        {"sort_dir": "sideways"},
    ],
)
def test_invalid_page_requests_are_rejected(session, kwargs):
    with pytest.raises(ValidationError):
        search_notifications(session, NotificationFilter(), **kwargs)


def test_inverted_date_range_is_rejected(session):
    now = now_in_app_naive_datetime()

    with pytest.raises(ValidationError):
        search_notifications(
            session, NotificationFilter(date_from=now, date_to=now - timedelta(days=1))
        )



def test_mixed_aware_and_naive_date_range(session):
    receipt_id = _send(session)
    now = now_in_app_naive_datetime()

    page = search_notifications(
        session,
        NotificationFilter(
            date_from=(now - timedelta(days=1)).replace(tzinfo=timezone.utc),
            date_to=now + timedelta(days=1),
        ),
    )

    assert [view.id for view in page.content] == [receipt_id]


def test_mixed_inverted_date_range_is_rejected(session):
    now = now_in_app_naive_datetime()

    with pytest.raises(ValidationError):
        search_notifications(
            session,
            NotificationFilter(
                date_from=now.replace(tzinfo=timezone.utc),
                date_to=now - timedelta(days=1),
            ),
        )
