"""Bill creation, charge updates, item edits and image link bookkeeping."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from restopos.core.config import settings
from restopos.models.bill import Bill
from restopos.models.order import ORDER_STATUS_COMPLETED, ORDER_STATUS_PENDING, Order, OrderItem
from restopos.schemas.bill import BillItemPayload
from restopos.services.billing import (
    BillPreview,
    BillTotals,
    PricedLine,
    TaxRates,
    base_amount,
    calculate_preview,
    calculate_totals,
    round_money,
    to_decimal,
)
from restopos.services.order_service import format_order_id
from restopos.services.order_status import refresh_order_status, set_all_item_statuses
from restopos.utils.time import as_utc, utc_now

logger = logging.getLogger(__name__)

RATE_FIELDS: tuple[str, ...] = ("vat_low", "vat_high", "service_tax", "service_charge")


class BillNotFoundError(Exception):
    """Raised when an order has no bill yet."""


def get_bill(db: Session, order_id: int) -> Bill | None:
    return db.scalar(select(Bill).where(Bill.order_id == order_id))


def is_expired(bill: Bill, now: datetime | None = None) -> bool:
    if bill.expires_at is None:
        return False
    return as_utc(bill.expires_at) < (now or utc_now())


def visible_links(bill: Bill, now: datetime | None = None) -> tuple[str | None, str | None]:
    """Plain and modified links, hidden once the bill has expired."""
    if is_expired(bill, now):
        return None, None
    return bill.bill_store_link, bill.modified_bill_store_link


def order_totals(order: Order, bill: Bill | None) -> tuple[Decimal, TaxRates, BillTotals]:
    """Base amount, effective rates and calculator output for an order."""
    base = base_amount(order.items)
    rates = TaxRates.from_bill(bill)
    return base, rates, calculate_totals(base, rates)


def _apply_total(order: Order, bill: Bill, lines: Iterable[PricedLine]) -> Decimal:
    total = calculate_totals(base_amount(lines), TaxRates.from_bill(bill)).total_amount
    bill.total_amount = total
    order.total_amount = total
    return total


def _new_bill(order: Order) -> Bill:
    bill = Bill(order_id=order.id, business_id=order.business_id, total_amount=Decimal("0.00"))
    order.bill = bill
    return bill


def create_bill(db: Session, order: Order, rates: dict[str, Any]) -> Bill:
    """Create (or finalize a lazily created) bill with the given tax rates.

    Settling the bill serves every line, so the order status becomes Completed
    whenever it has lines. Bill and order are written in one transaction.
    """
    bill = get_bill(db, order.id) or _new_bill(order)
    for field in RATE_FIELDS:
        value = rates.get(field)
        setattr(bill, field, None if value is None else to_decimal(value))
    _apply_total(order, bill, order.items)
    set_all_item_statuses(order, ORDER_STATUS_COMPLETED)
    db.add(bill)
    db.commit()
    db.refresh(bill)
    logger.info("[BILLS] Bill %s settled for order %s total=%s", bill.id, format_order_id(order.id), bill.total_amount)
    return bill


def update_charges(db: Session, order: Order, rate_updates: dict[str, Any]) -> Bill:
    """Change some rates and recompute the totals.

    Only the rates present in ``rate_updates`` change; a ``None`` value clears
    a rate. Calling twice with the same rates yields the same total.
    """
    bill = get_bill(db, order.id)
    if bill is None:
        raise BillNotFoundError("Bill not found")
    for field, value in rate_updates.items():
        if field in RATE_FIELDS:
            setattr(bill, field, None if value is None else to_decimal(value))
    _apply_total(order, bill, order.items)
    db.commit()
    db.refresh(bill)
    return bill


def store_link(
    db: Session,
    order: Order,
    link: str,
    public_id: str,
    is_modified: bool = False,
    now: datetime | None = None,
) -> tuple[Bill, bool]:
    """Record where a rendered bill image lives and restart its expiry clock.

    Returns the bill and whether it had to be created.
    """
    expires_at = (now or utc_now()) + timedelta(hours=settings.bill_link_ttl_hours)
    bill = get_bill(db, order.id)
    created = bill is None
    if bill is None:
        bill = _new_bill(order)
        _apply_total(order, bill, order.items)
        db.add(bill)

    if is_modified:
        bill.modified_bill_store_link = link
        bill.modified_bill_store_public_id = public_id
    else:
        bill.bill_store_link = link
        bill.bill_store_public_id = public_id
    bill.expires_at = expires_at

    db.commit()
    db.refresh(bill)
    logger.info(
        "[BILLS] Stored %s link for order %s, expires %s",
        "modified" if is_modified else "original",
        format_order_id(order.id),
        expires_at.isoformat(),
    )
    return bill, created


def replace_items(db: Session, order: Order, items: list[BillItemPayload]) -> Bill:
    """Swap the order lines for a modified bill and keep bill and order totals in sync."""
    order.items.clear()
    db.flush()
    order.items.extend(
        OrderItem(
            product_id=item.product_id,
            name=item.name,
            price=round_money(to_decimal(item.price)),
            quantity=item.quantity,
            status=ORDER_STATUS_PENDING,
        )
        for item in items
    )
    bill = get_bill(db, order.id)
    if bill is None:
        bill = _new_bill(order)
        db.add(bill)
    _apply_total(order, bill, order.items)
    refresh_order_status(order)
    db.commit()
    db.refresh(bill)
    return bill


def preview(order: Order, bill: Bill | None, extra_lines: Iterable[PricedLine]) -> BillPreview:
    return calculate_preview(base_amount(order.items), TaxRates.from_bill(bill), extra_lines)
