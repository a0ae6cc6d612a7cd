"""Bill ORM model."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from restopos.db.base import Base


class Bill(Base):
    """Settlement record of one order.

    ``total_amount`` always equals the calculator output for the order lines
    and the four stored rates. The rendered image lives in the external image
    store; ``expires_at`` tells the reaper when to delete both.
    """

    __tablename__ = "bills"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False, unique=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)
    vat_low: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    vat_high: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    service_tax: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    service_charge: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    bill_store_link: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    bill_store_public_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    modified_bill_store_link: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    modified_bill_store_public_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    order: Mapped["Order"] = relationship(back_populates="bill")
