"""Order placement, editing and status handling."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from restopos.core.config import settings
from restopos.models.bill import Bill
from restopos.models.business import Business, Customer
from restopos.models.order import ORDER_STATUS_COMPLETED, Order, OrderItem
from restopos.models.table import DiningTable
from restopos.schemas.order import CartItemPayload, OrderCreate, OrderUpdate
from restopos.services import inventory_service, loyalty_service
from restopos.services.billing import TaxRates, base_amount, calculate_totals, round_money, to_decimal
from restopos.services.order_status import is_valid_item_status, refresh_order_status, set_all_item_statuses
from restopos.utils.time import local_day_window_utc

logger = logging.getLogger(__name__)


class OrderServiceError(Exception):
    """Base class for order errors carrying a client-facing message."""


class OrderValidationError(OrderServiceError):
    """Raised for semantically invalid order input."""


class InvalidOrderIdError(OrderValidationError):
    """Raised when an order id is neither ``ORD00012`` nor ``12``."""


class TableUnavailableError(OrderValidationError):
    """Raised when the requested table is already booked."""


class OrderNotFoundError(OrderServiceError):
    """Raised when an order, its line, its table or its business does not exist."""


class OrderAccessDeniedError(OrderServiceError):
    """Raised when an order belongs to another business."""


def format_order_id(order_id: int) -> str:
    return f"{settings.order_number_prefix}{order_id:0{settings.order_number_width}d}"


def parse_order_id(raw: str | int) -> int:
    """Accept both the ``ORD``-prefixed rendering and the bare numeric id."""
    text = str(raw).strip()
    if text.upper().startswith(settings.order_number_prefix):
        text = text[len(settings.order_number_prefix):]
    if not text.isdigit():
        raise InvalidOrderIdError("Invalid order ID")
    return int(text)


def get_order(db: Session, order_id: int) -> Order:
    order: Order | None = db.scalar(
        select(Order).options(selectinload(Order.items)).where(Order.id == order_id)
    )
    if order is None:
        raise OrderNotFoundError("Order not found")
    return order


def get_business_order(db: Session, order_id: int, business_id: int) -> Order:
    """Load an order and make sure it belongs to the caller's business."""
    order = get_order(db, order_id)
    if order.business_id != business_id:
        raise OrderAccessDeniedError("Not allowed to access this order")
    return order


def list_business_orders(db: Session, business_id: int, day: date | None = None) -> list[Order]:
    """Orders of a business, newest first, optionally limited to one local calendar day."""
    query = (
        select(Order)
        .options(selectinload(Order.items))
        .where(Order.business_id == business_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    if day is not None:
        start, end = local_day_window_utc(day, settings.business_utc_offset_minutes)
        query = query.where(Order.created_at >= start, Order.created_at < end)
    return list(db.scalars(query).all())


def _validate_cart(cart_items: list[CartItemPayload]) -> None:
    if not cart_items:
        raise OrderValidationError("Cart items must be a non-empty array")
    for item in cart_items:
        if not is_valid_item_status(item.status):
            raise OrderValidationError(f"Invalid item status: {item.status}")


def _build_items(cart_items: Iterable[CartItemPayload]) -> list[OrderItem]:
    return [
        OrderItem(
            product_id=item.product_id,
            name=item.name,
            price=round_money(to_decimal(item.price)),
            quantity=item.quantity,
            status=item.status,
        )
        for item in cart_items
    ]


def _order_total(payload: OrderCreate | OrderUpdate, items: list[OrderItem]) -> Decimal:
    if payload.total_amount is not None:
        return round_money(to_decimal(payload.total_amount))
    return round_money(base_amount(items) - to_decimal(payload.discount_amount))


def _reserve_table(db: Session, table_id: int, business_id: int) -> DiningTable:
    table: DiningTable | None = db.get(DiningTable, table_id)
    if table is None or table.business_id != business_id:
        raise OrderNotFoundError("Table not found")
    if table.is_booked:
        raise TableUnavailableError("Table already booked")
    return table


def place_order(db: Session, payload: OrderCreate, customer: Customer | None = None) -> Order:
    """Persist a new order with its lines and run the bookkeeping that follows it.

    Table booking, loyalty redemption/accrual and inventory decrement are part
    of the same transaction as the order itself.
    """
    if payload.business_id is None:
        raise OrderValidationError("Missing business ID")
    if db.get(Business, payload.business_id) is None:
        raise OrderNotFoundError("Business not found")
    if payload.table_number is None and payload.table_id is None:
        raise OrderValidationError("Either table_number or tableId is required")
    _validate_cart(payload.cart_items)

    table: DiningTable | None = None
    if payload.table_id is not None:
        table = _reserve_table(db, payload.table_id, payload.business_id)

    if customer is not None and customer.business_id != payload.business_id:
        logger.warning("[ORDERS] Customer %s belongs to another business; placing as guest", customer.id)
        customer = None

    items = _build_items(payload.cart_items)
    total_amount = _order_total(payload, items)
    order = Order(
        business_id=payload.business_id,
        table_number=payload.table_number if payload.table_number is not None else table.number,
        table_id=table.id if table is not None else None,
        customer_id=customer.id if customer is not None else None,
        customer_name=(customer.name if customer is not None else None) or payload.customer_name,
        total_amount=total_amount,
        discount_amount=round_money(to_decimal(payload.discount_amount)),
        points_used=payload.points_used,
        payment_method=payload.payment_method,
        estimated_time=payload.estimated_time,
        items=items,
    )
    refresh_order_status(order)
    db.add(order)
    db.flush()

    if table is not None:
        table.is_booked = True
        table.order_id = order.id

    if customer is not None:
        if payload.points_used > 0:
            loyalty_service.redeem_points(db, customer.id, payload.points_used)
        loyalty_service.accrue_order(db, customer.id, total_amount)

    inventory_service.decrement_for_lines(db, payload.business_id, payload.cart_items)

    db.commit()
    db.refresh(order)
    logger.info("[ORDERS] Placed order %s for business %s", format_order_id(order.id), order.business_id)
    return order


def update_order(db: Session, order_id: int, payload: OrderUpdate) -> Order:
    """Replace the lines and editable fields of an order.

    Only points beyond those already redeemed for this order are subtracted
    again. Inventory is decremented for the replacement lines. An existing bill
    is recomputed with its stored rates and its total becomes the order total.
    """
    if payload.business_id is None:
        raise OrderValidationError("Missing business ID")
    _validate_cart(payload.cart_items)

    order = get_order(db, order_id)
    if order.business_id != payload.business_id:
        raise OrderAccessDeniedError("Not allowed to update this order")

    previous_points = order.points_used
    order.items.clear()
    db.flush()
    items = _build_items(payload.cart_items)
    order.items.extend(items)

    if payload.table_number is not None:
        order.table_number = payload.table_number
    order.total_amount = _order_total(payload, items)
    order.discount_amount = round_money(to_decimal(payload.discount_amount))
    order.payment_method = payload.payment_method
    order.estimated_time = payload.estimated_time
    order.customer_id = payload.customer_id or order.customer_id
    order.points_used = payload.points_used or previous_points
    refresh_order_status(order)

    extra_points = order.points_used - previous_points
    if order.customer_id is not None and extra_points > 0:
        loyalty_service.redeem_points(db, order.customer_id, extra_points)

    inventory_service.decrement_for_lines(db, order.business_id, payload.cart_items)

    bill = db.scalar(select(Bill).where(Bill.order_id == order.id))
    if bill is not None:
        bill.total_amount = calculate_totals(base_amount(order.items), TaxRates.from_bill(bill)).total_amount
        order.total_amount = bill.total_amount

    db.commit()
    db.refresh(order)
    logger.info("[ORDERS] Updated order %s", format_order_id(order.id))
    return order


def set_product_item_status(db: Session, order: Order, product_id: int, status: str) -> str:
    """Set the status of the order's lines for one product and refresh the order status.

    Both writes are committed together.
    """
    if not is_valid_item_status(status):
        raise OrderValidationError(f"Invalid item status: {status}")
    lines = [item for item in order.items if item.product_id == product_id]
    if not lines:
        raise OrderNotFoundError("Item not found in order")
    for line in lines:
        line.status = status
    order_status = refresh_order_status(order)
    db.commit()
    return order_status


def set_order_status(db: Session, order: Order, status: str) -> str:
    """Apply a status to every line; the order status follows from the lines."""
    if not is_valid_item_status(status):
        raise OrderValidationError(f"Invalid status: {status}")
    order_status = set_all_item_statuses(order, status)
    db.commit()
    return order_status


def complete_all_items(db: Session, order: Order) -> str:
    return set_order_status(db, order, ORDER_STATUS_COMPLETED)


def release_table(db: Session, table: DiningTable) -> DiningTable:
    table.is_booked = False
    table.order_id = None
    db.commit()
    db.refresh(table)
    return table
