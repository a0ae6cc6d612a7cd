"""Order status derivation helpers."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from restopos.models.order import ORDER_STATUS_COMPLETED, ORDER_STATUS_PENDING, ORDER_STATUSES, Order


class StatusCarrier(Protocol):
    status: str


def is_valid_item_status(status: str) -> bool:
    return status in ORDER_STATUSES


def derive_order_status(items: Iterable[StatusCarrier]) -> str:
    """Return Completed iff there is at least one item and all are Completed."""
    seen_any = False
    for item in items:
        seen_any = True
        if item.status != ORDER_STATUS_COMPLETED:
            return ORDER_STATUS_PENDING
    return ORDER_STATUS_COMPLETED if seen_any else ORDER_STATUS_PENDING


def refresh_order_status(order: Order) -> str:
    """Recompute and store the cached status of an order from its loaded items."""
    order.status = derive_order_status(order.items)
    return order.status


def set_all_item_statuses(order: Order, status: str) -> str:
    """Apply one status to every line, then refresh the order status."""
    for item in order.items:
        item.status = status
    return refresh_order_status(order)
