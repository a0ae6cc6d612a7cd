"""Inventory bookkeeping for placed orders."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from restopos.models.inventory import InventoryItem
from restopos.models.product import Product

logger = logging.getLogger(__name__)


class ProductLine(Protocol):
    product_id: int | None
    quantity: int


def _ingredient_amount(entry: Any) -> tuple[str, Decimal] | None:
    """Return ``(name, quantity)`` for a well-formed recipe entry, else ``None``."""
    if not isinstance(entry, dict):
        return None
    name = entry.get("name")
    raw_quantity = entry.get("quantity")
    if not isinstance(name, str) or not name or isinstance(raw_quantity, bool):
        return None
    try:
        quantity = Decimal(str(raw_quantity))
    except (InvalidOperation, ValueError):
        return None
    if not quantity.is_finite():
        return None
    return name, quantity


def recipe_requirements(recipe: Any) -> list[tuple[str, Decimal]]:
    """Parse a stored recipe, dropping malformed entries."""
    if not isinstance(recipe, list):
        return []
    requirements: list[tuple[str, Decimal]] = []
    for entry in recipe:
        parsed = _ingredient_amount(entry)
        if parsed is None:
            logger.debug("[INVENTORY] Skipping malformed recipe entry %r", entry)
            continue
        requirements.append(parsed)
    return requirements


def decrement_for_lines(db: Session, business_id: int, lines: Iterable[ProductLine]) -> int:
    """Decrement inventory by recipe x line quantity for every line with a product.

    Best effort: lines without a product, unknown products and malformed recipe
    entries are skipped. Stock is allowed to go below zero. Returns the number
    of inventory rows touched.
    """
    lines = [line for line in lines if line.product_id is not None]
    if not lines:
        return 0

    product_ids = {line.product_id for line in lines}
    recipes: dict[int, Any] = dict(
        db.execute(select(Product.id, Product.recipe).where(Product.id.in_(product_ids))).all()
    )

    touched = 0
    for line in lines:
        for name, per_unit in recipe_requirements(recipes.get(line.product_id)):
            amount = per_unit * line.quantity
            result = db.execute(
                update(InventoryItem)
                .where(InventoryItem.name == name, InventoryItem.business_id == business_id)
                .values(quantity=InventoryItem.quantity - amount)
                .execution_options(synchronize_session=False)
            )
            touched += result.rowcount or 0
    return touched
