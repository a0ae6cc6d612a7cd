"""Product ORM model."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from restopos.db.base import Base


class Product(Base):
    """Dish or article sold by a business.

    ``recipe`` holds the ingredient requirements for one unit as a list of
    ``{"name": str, "quantity": number}`` objects. It is validated by
    ``restopos.schemas.product.IngredientRequirement`` on every write.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True)
    business_id: Mapped[int] = mapped_column(ForeignKey("businesses.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    product_type: Mapped[str] = mapped_column(String(64), nullable=False, default="generic")
    category: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    images: Mapped[list | None] = mapped_column(JSON, nullable=True)
    recipe: Mapped[list | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
