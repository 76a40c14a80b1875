"""Order lifecycle model.

An order moves between a small set of field combinations:

    created (pending) -> active
    active -> soft-deleted by admin      (status=deleted, deletedFrom=admin)
    active -> soft-deleted from a card   (isDeleted, scheduledForDeletion,
                                          deletedAt, deletedFrom=orderCard)
    soft-deleted -> restored             (status=pending, flags cleared)
    active or card-deleted -> archived   (isArchived, by the daily sweep)
    any -> permanently deleted           (row removed)

Payment is a separate axis: marking an order paid confirms it and stamps
``paid_at``, which is never cleared afterwards.

Transitions are pure functions returning the column changes to apply, so the
service can issue each one as a single UPDATE. The predicates below are the
SQL filters behind each view.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import ColumnElement, and_, or_

from app.models.order import DeletionOrigin, Order, OrderStatus, PaymentStatus

DEFAULT_ARCHIVE_AFTER = timedelta(hours=24)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def parse_origin(value: str | DeletionOrigin | None) -> DeletionOrigin:
    """Anything other than ``orderCard`` is treated as an admin deletion."""
    if value == DeletionOrigin.ORDER_CARD:
        return DeletionOrigin.ORDER_CARD
    return DeletionOrigin.ADMIN


def mark_paid_changes(now: datetime, payment_method: str | None = None) -> dict[str, Any]:
    changes: dict[str, Any] = {
        "payment_status": PaymentStatus.PAID,
        "status": OrderStatus.CONFIRMED,
        "paid_at": now,
    }
    if payment_method:
        changes["payment_method"] = payment_method
    return changes


def soft_delete_changes(origin: DeletionOrigin, now: datetime) -> dict[str, Any]:
    if origin == DeletionOrigin.ORDER_CARD:
        return {
            "is_deleted": True,
            "scheduled_for_deletion": True,
            "deleted_at": now,
            "deleted_from": DeletionOrigin.ORDER_CARD,
        }
    # Admin deletions record no deleted_at; trash ordering relies on that staying so.
    return {
        "status": OrderStatus.DELETED,
        "deleted_from": DeletionOrigin.ADMIN,
    }


def restore_changes() -> dict[str, Any]:
    return {
        "deleted_from": None,
        "is_deleted": False,
        "scheduled_for_deletion": False,
        "status": OrderStatus.PENDING,
    }


def archive_changes() -> dict[str, Any]:
    return {"is_archived": True}


def archive_cutoff(now: datetime, archive_after: timedelta = DEFAULT_ARCHIVE_AFTER) -> datetime:
    # stored timestamps are compared as UTC wall-clock values
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc) - archive_after


def not_admin_deleted() -> ColumnElement[bool]:
    # deleted_from is NULL for orders that were never soft-deleted
    return or_(Order.deleted_from.is_(None), Order.deleted_from != DeletionOrigin.ADMIN)


def active_filter(exclude_card_deleted: bool = False) -> ColumnElement[bool]:
    if exclude_card_deleted:
        origin_clause = Order.deleted_from.is_(None)
    else:
        origin_clause = not_admin_deleted()
    return and_(Order.is_archived.is_(False), origin_clause)


def trash_filter() -> ColumnElement[bool]:
    return Order.deleted_from == DeletionOrigin.ADMIN


def purge_filter() -> ColumnElement[bool]:
    return Order.deleted_from.in_([DeletionOrigin.ADMIN, DeletionOrigin.ORDER_CARD])


def archive_eligible_filter(cutoff: datetime) -> ColumnElement[bool]:
    return and_(
        Order.created_at <= cutoff,
        Order.is_archived.is_(False),
        not_admin_deleted(),
    )
