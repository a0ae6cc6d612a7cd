"""Shared API dependencies and service error translation."""

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from restopos.core.security import get_current_business_id
from restopos.db.session import get_db
from restopos.models.order import Order
from restopos.services.bill_service import BillNotFoundError
from restopos.services.order_service import (
    OrderAccessDeniedError,
    OrderNotFoundError,
    OrderServiceError,
    OrderValidationError,
    get_business_order,
    parse_order_id,
)


def http_error(exc: Exception) -> HTTPException:
    """Map a service exception to the HTTP error the client sees."""
    if isinstance(exc, (OrderNotFoundError, BillNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, OrderAccessDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, (OrderValidationError, OrderServiceError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal Server Error")


def resolve_order_id(raw: str) -> int:
    try:
        return parse_order_id(raw)
    except OrderServiceError as exc:
        raise http_error(exc) from exc


def get_owned_order(
    orderId: str,
    business_id: int = Depends(get_current_business_id),
    db: Session = Depends(get_db),
) -> Order:
    """Order addressed by the ``orderId`` path parameter, restricted to the caller's business."""
    order_id = resolve_order_id(orderId)
    try:
        return get_business_order(db, order_id, business_id)
    except OrderServiceError as exc:
        raise http_error(exc) from exc
