import csv
import io
from collections.abc import Iterable
from datetime import datetime, timezone

from app.models.order import Order

CSV_HEADERS = [
    "orderId",
    "orderNumber",
    "customerName",
    "customerPhone",
    "orderType",
    "tableNumber",
    "status",
    "paymentStatus",
    "totalAmount",
    "items",
    "createdAt",
    "paidAt",
]


def format_number(value: float | int | None) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return ""
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def format_items(items: list[dict] | None) -> str:
    if not items:
        return ""
    return "; ".join(
        f"{item.get('quantity', '')}x {item.get('name', '')} "
        f"({item.get('size') or ''}) @ {format_number(item.get('price'))}"
        for item in items
    )


def _enum_value(value) -> str:
    if value is None:
        return ""
    return getattr(value, "value", value)


def order_row(order: Order) -> list[str]:
    return [
        str(order.id),
        order.order_number or "",
        order.customer_name or "",
        order.customer_phone or "",
        order.order_type or "",
        order.table_number or "",
        _enum_value(order.status),
        _enum_value(order.payment_status),
        format_number(order.total_amount),
        format_items(order.items),
        format_timestamp(order.created_at),
        format_timestamp(order.paid_at),
    ]


def render_orders_csv(orders: Iterable[Order]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for order in orders:
        writer.writerow(order_row(order))
    # rows are newline-separated, with no terminator after the last one
    return buffer.getvalue().removesuffix("\n")
