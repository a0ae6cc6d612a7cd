"""Inventory ORM model."""

from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from restopos.db.base import Base


class InventoryItem(Base):
    """Stock level of one ingredient for a business. May go negative."""

    __tablename__ = "inventory_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, default=Decimal("0"))
    unit: Mapped[str | None] = mapped_column(String(32), nullable=True)

    __table_args__ = (Index("ix_inventory_items_business_name", "business_id", "name"),)
