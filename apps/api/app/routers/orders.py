from fastapi import APIRouter, Body, Depends, Query, Response

from app.dependencies import get_order_service
from app.schemas.order import (
    EmptyTrashResponse,
    ErrorResponse,
    MarkPaidRequest,
    OrderActionResponse,
    OrderCreate,
    OrderDeleteRequest,
    OrderResponse,
    OrderRestoreResponse,
    OrderUpdate,
)
from app.services.orders_service import OrderLifecycleService

router = APIRouter(
    prefix="/orders",
    tags=["orders"],
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post("", response_model=OrderResponse, summary="Create order", status_code=201)
def create_order_endpoint(
    payload: OrderCreate,
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderResponse:
    return OrderResponse.model_validate(service.create_order(payload))


@router.get("", response_model=list[OrderResponse], summary="List active orders")
def list_orders_endpoint(
    exclude_order_card_deleted: bool = Query(default=False, alias="excludeOrderCardDeleted"),
    service: OrderLifecycleService = Depends(get_order_service),
) -> list[OrderResponse]:
    orders = service.list_active_orders(exclude_card_deleted=exclude_order_card_deleted)
    return [OrderResponse.model_validate(order) for order in orders]


@router.get("/admin", response_model=list[OrderResponse], summary="List every order")
def list_admin_orders_endpoint(
    service: OrderLifecycleService = Depends(get_order_service),
) -> list[OrderResponse]:
    return [OrderResponse.model_validate(order) for order in service.list_all_orders()]


@router.get(
    "/export",
    summary="Export every order as CSV",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
)
def export_orders_endpoint(
    service: OrderLifecycleService = Depends(get_order_service),
) -> Response:
    return Response(
        content=service.export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="orders.csv"'},
    )


@router.get("/trash", response_model=list[OrderResponse], summary="List admin-deleted orders")
def list_trash_endpoint(
    service: OrderLifecycleService = Depends(get_order_service),
) -> list[OrderResponse]:
    return [OrderResponse.model_validate(order) for order in service.list_deleted_orders()]


@router.post("/trash/empty", response_model=EmptyTrashResponse, summary="Empty trash")
def empty_trash_endpoint(
    service: OrderLifecycleService = Depends(get_order_service),
) -> EmptyTrashResponse:
    deleted_count = service.empty_trash()
    if deleted_count == 0:
        return EmptyTrashResponse(message="Trash already empty", deleted_count=0)
    return EmptyTrashResponse(message="Trash emptied successfully", deleted_count=deleted_count)


@router.get("/{order_id}", response_model=OrderResponse, summary="Get order")
def get_order_endpoint(
    order_id: str,
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderResponse:
    return OrderResponse.model_validate(service.get_order(order_id))


@router.api_route(
    "/{order_id}",
    methods=["PATCH", "PUT"],
    response_model=OrderResponse,
    summary="Update order fields",
)
def update_order_endpoint(
    order_id: str,
    payload: OrderUpdate,
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderResponse:
    return OrderResponse.model_validate(service.update_fields(order_id, payload))


@router.delete("/{order_id}", response_model=OrderActionResponse, summary="Delete order")
def delete_order_endpoint(
    order_id: str,
    permanent: bool = Query(default=False),
    deleted_from: str | None = Query(default=None, alias="deletedFrom"),
    payload: OrderDeleteRequest | None = Body(default=None),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderActionResponse:
    if permanent:
        service.permanent_delete(order_id)
        return OrderActionResponse(success=True, message="Order permanently deleted")

    origin = (payload.deleted_from if payload else None) or deleted_from
    service.soft_delete(order_id, origin)
    return OrderActionResponse(success=True, message="Order soft-deleted")


@router.post(
    "/{order_id}/restore", response_model=OrderRestoreResponse, summary="Restore order"
)
def restore_order_endpoint(
    order_id: str,
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderRestoreResponse:
    restored = service.restore(order_id)
    return OrderRestoreResponse(
        message="Order restored",
        restored_order=OrderResponse.model_validate(restored),
    )


@router.api_route(
    "/{order_id}/pay",
    methods=["POST", "PATCH"],
    response_model=OrderResponse,
    summary="Mark order as paid",
)
def mark_order_paid_endpoint(
    order_id: str,
    payload: MarkPaidRequest | None = Body(default=None),
    service: OrderLifecycleService = Depends(get_order_service),
) -> OrderResponse:
    payment_method = payload.payment_method if payload else None
    return OrderResponse.model_validate(service.mark_paid(order_id, payment_method))
