"""Order endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from restopos.api.deps import get_owned_order, http_error, resolve_order_id
from restopos.core.security import get_current_business_id, get_optional_customer
from restopos.db.session import get_db
from restopos.models.business import Customer
from restopos.models.order import Order
from restopos.schemas.order import (
    ItemStatusResponse,
    OrderCreate,
    OrderItemRead,
    OrderMutationResponse,
    OrderRead,
    OrderStatusResponse,
    OrderUpdate,
    StatusUpdate,
    TableRead,
)
from restopos.services import order_service
from restopos.services.order_service import OrderServiceError, format_order_id

router: APIRouter = APIRouter()


def _serialize_order(order: Order) -> dict:
    return {
        "id": order.id,
        "order_id": format_order_id(order.id),
        "customer_name": order.customer_name,
        "table_number": order.table_number,
        "total_amount": order.total_amount,
        "discount_amount": order.discount_amount,
        "payment_method": order.payment_method,
        "status": order.status,
        "estimated_time": order.estimated_time,
        "created_at": order.created_at,
        "items": [OrderItemRead.model_validate(item) for item in order.items],
        "points_used": order.points_used,
        "table": TableRead.model_validate(order.table) if order.table is not None else None,
    }


@router.post("", response_model=OrderMutationResponse, status_code=status.HTTP_201_CREATED)
def place_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    customer: Customer | None = Depends(get_optional_customer),
) -> OrderMutationResponse:
    """Place an order from a table; a customer token earns loyalty points."""
    try:
        order = order_service.place_order(db, payload, customer)
    except OrderServiceError as exc:
        raise http_error(exc) from exc
    return OrderMutationResponse(message="Order placed successfully", **_serialize_order(order))


@router.get("", response_model=list[OrderRead])
def list_orders(
    day: date | None = Query(default=None, alias="date"),
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> list[OrderRead]:
    orders = order_service.list_business_orders(db, business_id, day)
    return [OrderRead(**_serialize_order(order)) for order in orders]


@router.get("/{orderId}", response_model=OrderRead)
def get_order(orderId: str, db: Session = Depends(get_db)) -> OrderRead:
    try:
        order = order_service.get_order(db, resolve_order_id(orderId))
    except OrderServiceError as exc:
        raise http_error(exc) from exc
    return OrderRead(**_serialize_order(order))


@router.put("/{orderId}", response_model=OrderMutationResponse)
def update_order(orderId: str, payload: OrderUpdate, db: Session = Depends(get_db)) -> OrderMutationResponse:
    """Replace the lines of an order; ``businessId`` in the body must own it."""
    try:
        order = order_service.update_order(db, resolve_order_id(orderId), payload)
    except OrderServiceError as exc:
        raise http_error(exc) from exc
    return OrderMutationResponse(message="Order updated successfully", **_serialize_order(order))


@router.patch("/{orderId}/status", response_model=OrderStatusResponse)
def update_order_status(
    payload: StatusUpdate,
    order: Order = Depends(get_owned_order),
    db: Session = Depends(get_db),
) -> OrderStatusResponse:
    try:
        order_status = order_service.set_order_status(db, order, payload.status)
    except OrderServiceError as exc:
        raise http_error(exc) from exc
    return OrderStatusResponse(
        order_id=format_order_id(order.id),
        status=order_status,
        message="Order status updated",
    )


@router.patch("/{orderId}/items/{productId}/status", response_model=ItemStatusResponse)
def update_item_status(
    productId: int,
    payload: StatusUpdate,
    order: Order = Depends(get_owned_order),
    db: Session = Depends(get_db),
) -> ItemStatusResponse:
    try:
        order_status = order_service.set_product_item_status(db, order, productId, payload.status)
    except OrderServiceError as exc:
        raise http_error(exc) from exc
    return ItemStatusResponse(
        message="Item status updated",
        product_id=productId,
        status=payload.status,
        order_status=order_status,
        points_used=order.points_used,
    )


@router.patch("/{orderId}/complete-all", response_model=OrderStatusResponse)
def complete_all_items(order: Order = Depends(get_owned_order), db: Session = Depends(get_db)) -> OrderStatusResponse:
    order_status = order_service.complete_all_items(db, order)
    return OrderStatusResponse(
        order_id=format_order_id(order.id),
        status=order_status,
        message="All items marked as Completed",
    )
