"""Dining table ORM model."""

from sqlalchemy import Boolean, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from restopos.db.base import Base


class DiningTable(Base):
    """Physical table that an order can book."""

    __tablename__ = "dining_tables"

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    is_booked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    order_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
