import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, ValidationError
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.order import DeletionOrigin, Order
from app.observability import log_event, metrics_store
from app.schemas.order import OrderCreate, OrderUpdate
from app.services.csv_export import render_orders_csv
from app.services.errors import OrderNotFoundError, OrderStoreError, OrderValidationError
from app.services.lifecycle import (
    DEFAULT_ARCHIVE_AFTER,
    active_filter,
    archive_changes,
    archive_cutoff,
    archive_eligible_filter,
    mark_paid_changes,
    now_utc,
    parse_origin,
    purge_filter,
    restore_changes,
    soft_delete_changes,
    trash_filter,
)

Clock = Callable[[], datetime]

_BULK = {"synchronize_session": False}


def _validate(model: type[BaseModel], payload: BaseModel | dict[str, Any]) -> Any:
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise OrderValidationError(str(exc)) from exc


def _parse_id(order_id: uuid.UUID | str) -> uuid.UUID:
    if isinstance(order_id, uuid.UUID):
        return order_id
    try:
        return uuid.UUID(str(order_id))
    except ValueError as exc:
        raise OrderNotFoundError(order_id) from exc


def _column_changes(payload: OrderUpdate) -> dict[str, Any]:
    changes = payload.model_dump(exclude_unset=True, exclude={"customer"})
    if "customer" in payload.model_fields_set:
        customer = payload.customer
        if customer is None:
            changes["customer_name"] = None
            changes["customer_phone"] = None
        else:
            fields_set = customer.model_fields_set
            if "name" in fields_set:
                changes["customer_name"] = customer.name
            if "phone" in fields_set:
                changes["customer_phone"] = customer.phone
    return changes


class OrderLifecycleService:
    """All reads and writes of order records.

    Built per unit of work from an explicit session and clock, so the HTTP
    layer and the archive sweep share this interface without sharing state.
    Every operation is a single statement against the store; concurrent
    writers to the same order are last-write-wins.
    """

    def __init__(
        self,
        db: Session,
        clock: Clock = now_utc,
        archive_after: timedelta = DEFAULT_ARCHIVE_AFTER,
    ) -> None:
        self.db = db
        self.clock = clock
        self.archive_after = archive_after

    @contextmanager
    def _store_call(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise OrderStoreError(action, str(exc)) from exc

    def _apply(self, order_id: uuid.UUID | str, changes: dict[str, Any], action: str) -> Order:
        uid = _parse_id(order_id)
        with self._store_call(action):
            result = self.db.execute(
                update(Order).where(Order.id == uid).values(**changes).execution_options(**_BULK)
            )
            if result.rowcount == 0:
                self.db.rollback()
                raise OrderNotFoundError(uid)
            self.db.commit()
            return self._load(uid)

    def _load(self, uid: uuid.UUID) -> Order:
        order = self.db.get(Order, uid, populate_existing=True)
        if order is None:
            raise OrderNotFoundError(uid)
        return order

    def create_order(self, payload: OrderCreate | dict[str, Any]) -> Order:
        data: OrderCreate = _validate(OrderCreate, payload)
        customer = data.customer
        order = Order(
            order_number=data.order_number,
            customer_name=customer.name if customer else None,
            customer_phone=customer.phone if customer else None,
            order_type=data.order_type,
            table_number=data.table_number,
            items=[item.model_dump() for item in data.items],
            total_amount=data.total_amount,
            status=data.status,
            payment_status=data.payment_status,
            payment_method=data.payment_method,
            is_archived=False,
            is_deleted=False,
            scheduled_for_deletion=False,
            created_at=self.clock(),
        )
        with self._store_call("create order"):
            self.db.add(order)
            self.db.commit()
            self.db.refresh(order)

        metrics_store.increment("orders_created_total")
        log_event("order_created", order_id=str(order.id))
        return order

    def get_order(self, order_id: uuid.UUID | str) -> Order:
        uid = _parse_id(order_id)
        with self._store_call("get order"):
            return self._load(uid)

    def list_active_orders(self, exclude_card_deleted: bool = False) -> list[Order]:
        query = (
            select(Order)
            .where(active_filter(exclude_card_deleted))
            .order_by(Order.created_at.desc())
        )
        with self._store_call("get orders"):
            return list(self.db.scalars(query))

    def list_all_orders(self) -> list[Order]:
        with self._store_call("get admin orders"):
            return list(self.db.scalars(select(Order).order_by(Order.created_at.desc())))

    def list_deleted_orders(self) -> list[Order]:
        """Admin trash view. Orders deleted from an order card are not listed here."""
        query = (
            select(Order)
            .where(trash_filter())
            .order_by(Order.deleted_at.desc().nulls_last(), Order.created_at.desc())
        )
        with self._store_call("fetch deleted orders"):
            return list(self.db.scalars(query))

    def update_fields(
        self, order_id: uuid.UUID | str, payload: OrderUpdate | dict[str, Any]
    ) -> Order:
        data: OrderUpdate = _validate(OrderUpdate, payload)
        changes = _column_changes(data)
        if not changes:
            return self.get_order(order_id)
        order = self._apply(order_id, changes, "update order")
        log_event("order_updated", order_id=str(order.id))
        return order

    def mark_paid(self, order_id: uuid.UUID | str, payment_method: str | None = None) -> Order:
        order = self._apply(
            order_id, mark_paid_changes(self.clock(), payment_method), "mark order as paid"
        )
        log_event("order_paid", order_id=str(order.id))
        return order

    def soft_delete(
        self, order_id: uuid.UUID | str, origin: str | DeletionOrigin | None = None
    ) -> Order:
        resolved = parse_origin(origin)
        order = self._apply(
            order_id, soft_delete_changes(resolved, self.clock()), "delete order"
        )
        log_event("order_soft_deleted", order_id=str(order.id), origin=resolved.value)
        return order

    def restore(self, order_id: uuid.UUID | str) -> Order:
        order = self._apply(order_id, restore_changes(), "restore order")
        log_event("order_restored", order_id=str(order.id))
        return order

    def permanent_delete(self, order_id: uuid.UUID | str) -> None:
        uid = _parse_id(order_id)
        with self._store_call("delete order"):
            result = self.db.execute(
                delete(Order).where(Order.id == uid).execution_options(**_BULK)
            )
            if result.rowcount == 0:
                self.db.rollback()
                raise OrderNotFoundError(uid)
            self.db.commit()
        log_event("order_permanently_deleted", order_id=str(uid))

    def empty_trash(self) -> int:
        with self._store_call("empty trash"):
            pending = self.db.scalar(
                select(func.count()).select_from(Order).where(purge_filter())
            )
            if not pending:
                self.db.rollback()
                return 0
            result = self.db.execute(delete(Order).where(purge_filter()).execution_options(**_BULK))
            self.db.commit()

        metrics_store.increment("orders_purged_total", result.rowcount)
        log_event("trash_emptied", count=result.rowcount)
        return result.rowcount

    def archive_stale(self, now: datetime | None = None) -> int:
        cutoff = archive_cutoff(now or self.clock(), self.archive_after)
        with self._store_call("archive old orders"):
            result = self.db.execute(
                update(Order)
                .where(archive_eligible_filter(cutoff))
                .values(**archive_changes())
                .execution_options(**_BULK)
            )
            self.db.commit()

        metrics_store.increment("orders_archived_total", result.rowcount)
        return result.rowcount

    def export_csv(self) -> str:
        with self._store_call("export orders"):
            orders = list(self.db.scalars(select(Order).order_by(Order.created_at.desc())))
        return render_orders_csv(orders)
