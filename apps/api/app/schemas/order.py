import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.order import DeletionOrigin, OrderStatus, PaymentStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ResponseModel(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _coerce_label(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


class Customer(CamelModel):
    name: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)

    @field_validator("name", "phone")
    @classmethod
    def strip_strings(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return value.strip()


class OrderItem(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    quantity: int = Field(default=1, ge=1)
    size: str | None = Field(default=None, max_length=32)
    price: float = Field(ge=0)


class OrderCreate(RequestModel):
    order_number: str | None = Field(default=None, max_length=64)
    customer: Customer | None = None
    order_type: str | None = Field(default=None, max_length=50)
    table_number: str | None = Field(default=None, max_length=32)
    items: list[OrderItem] = Field(default_factory=list)
    total_amount: float = Field(default=0.0, ge=0)
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    payment_method: str | None = Field(default=None, max_length=50)

    @field_validator("order_number", "table_number", mode="before")
    @classmethod
    def coerce_labels(cls, value):
        return _coerce_label(value)


class OrderUpdate(RequestModel):
    """Partial update; only fields present in the request body are written."""

    order_number: str | None = Field(default=None, max_length=64)
    customer: Customer | None = None
    order_type: str | None = Field(default=None, max_length=50)
    table_number: str | None = Field(default=None, max_length=32)
    items: list[OrderItem] | None = None
    total_amount: float | None = Field(default=None, ge=0)
    status: OrderStatus | None = None
    payment_status: PaymentStatus | None = None
    payment_method: str | None = Field(default=None, max_length=50)
    is_archived: bool | None = None

    @field_validator("order_number", "table_number", mode="before")
    @classmethod
    def coerce_labels(cls, value):
        return _coerce_label(value)

    @field_validator("status", "payment_status", "items", "total_amount", "is_archived")
    @classmethod
    def reject_explicit_null(cls, value):
        if value is None:
            raise ValueError("field may be omitted but not set to null")
        return value


class OrderDeleteRequest(CamelModel):
    deleted_from: str | None = None


class MarkPaidRequest(CamelModel):
    payment_method: str | None = Field(default=None, max_length=50)


class OrderResponse(ResponseModel):
    id: uuid.UUID
    order_number: str | None
    customer: Customer
    order_type: str | None
    table_number: str | None
    items: list[OrderItem]
    total_amount: float
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: str | None
    is_archived: bool
    is_deleted: bool
    scheduled_for_deletion: bool
    deleted_from: DeletionOrigin | None
    created_at: datetime
    deleted_at: datetime | None
    paid_at: datetime | None

    @field_validator("created_at", "deleted_at", "paid_at")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        # SQLite returns naive values; everything is stored as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class OrderActionResponse(ResponseModel):
    success: bool
    message: str


class OrderRestoreResponse(ResponseModel):
    message: str
    restored_order: OrderResponse


class EmptyTrashResponse(ResponseModel):
    message: str
    deleted_count: int


class ErrorResponse(BaseModel):
    error: str
    message: str
