from app.schemas.health import HealthResponse, ReadinessCheck, ReadinessResponse
from app.schemas.metrics import MetricsResponse, TimingStats
from app.schemas.order import (
    Customer,
    EmptyTrashResponse,
    ErrorResponse,
    MarkPaidRequest,
    OrderActionResponse,
    OrderCreate,
    OrderDeleteRequest,
    OrderItem,
    OrderResponse,
    OrderRestoreResponse,
    OrderUpdate,
)

__all__ = [
    "Customer",
    "OrderItem",
    "OrderCreate",
    "OrderUpdate",
    "OrderDeleteRequest",
    "MarkPaidRequest",
    "OrderResponse",
    "OrderActionResponse",
    "OrderRestoreResponse",
    "EmptyTrashResponse",
    "ErrorResponse",
    "HealthResponse",
    "ReadinessCheck",
    "ReadinessResponse",
    "MetricsResponse",
    "TimingStats",
]
