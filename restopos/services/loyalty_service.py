"""Loyalty points bookkeeping for customers."""

from __future__ import annotations

import logging
from decimal import ROUND_FLOOR, Decimal

from sqlalchemy import update
from sqlalchemy.orm import Session

from restopos.core.config import settings
from restopos.models.business import Customer

logger = logging.getLogger(__name__)


def earned_points(total_amount: Decimal) -> int:
    """One point per ``loyalty_points_per_amount`` spent, rounded down."""
    if total_amount <= 0:
        return 0
    return int((total_amount / settings.loyalty_points_per_amount).to_integral_value(rounding=ROUND_FLOOR))


def redeem_points(db: Session, customer_id: int, points: int) -> bool:
    """Subtract points only if the customer holds enough; never goes negative."""
    if points <= 0:
        return False
    result = db.execute(
        update(Customer)
        .where(Customer.id == customer_id, Customer.points >= points)
        .values(points=Customer.points - points)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        logger.warning("[LOYALTY] Not enough points or customer not found: customer_id=%s points=%s", customer_id, points)
        return False
    return True


def accrue_order(db: Session, customer_id: int, total_amount: Decimal) -> int:
    """Count the order towards the customer stats and grant earned points."""
    points = earned_points(total_amount)
    db.execute(
        update(Customer)
        .where(Customer.id == customer_id)
        .values(
            total_orders=Customer.total_orders + 1,
            total_money_spent=Customer.total_money_spent + total_amount,
            points=Customer.points + points,
        )
        .execution_options(synchronize_session=False)
    )
    return points
