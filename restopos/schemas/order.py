"""Order API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from restopos.models.order import ORDER_STATUS_PENDING
from restopos.schemas.common import Money


class CartItemPayload(BaseModel):
    """Single cart line; name and price are stored as a snapshot."""

    product_id: int | None = Field(default=None, alias="productId")
    name: str = Field(min_length=1)
    price: Money = Field(ge=0)
    quantity: int = Field(default=1, ge=1)
    status: str = ORDER_STATUS_PENDING

    model_config = ConfigDict(populate_by_name=True)


class _OrderPayloadBase(BaseModel):
    business_id: int | None = Field(default=None, alias="businessId")
    table_number: int | None = None
    cart_items: list[CartItemPayload] = Field(default_factory=list)
    total_amount: Money | None = Field(default=None, ge=0)
    payment_method: str = Field(min_length=1)
    estimated_time: str | None = None
    points_used: int = Field(default=0, ge=0, alias="pointsUsed")
    discount_amount: Money = Field(default=Decimal("0"), ge=0, alias="discountAmount")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("estimated_time", mode="before")
    @classmethod
    def _estimated_time_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return str(value)
        return value


class OrderCreate(_OrderPayloadBase):
    """Payload for placing an order from a table."""

    table_id: int | None = Field(default=None, alias="tableId")
    customer_name: str | None = None


class OrderUpdate(_OrderPayloadBase):
    """Payload replacing the lines and fields of an existing order."""

    customer_id: int | None = Field(default=None, alias="customerId")


class StatusUpdate(BaseModel):
    """Payload carrying a Pending/Completed status."""

    status: str


class OrderItemRead(BaseModel):
    """Serialized order line."""

    id: int
    product_id: int | None = Field(alias="productId")
    name: str
    price: Money
    quantity: int
    status: str

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class TableRead(BaseModel):
    """Serialized dining table."""

    id: int
    number: int
    is_booked: bool = Field(alias="isBooked")
    order_id: int | None = Field(alias="orderId")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class OrderRead(BaseModel):
    """Serialized order with its lines."""

    id: int
    order_id: str
    customer_name: str | None
    table_number: int | None
    total_amount: Money
    discount_amount: Money = Field(alias="discountAmount")
    payment_method: str
    status: str
    estimated_time: str | None
    created_at: datetime
    items: list[OrderItemRead]
    points_used: int = Field(alias="pointsUsed")
    table: TableRead | None = None

    model_config = ConfigDict(populate_by_name=True)


class OrderMutationResponse(OrderRead):
    """Order payload returned after placing or updating an order."""

    message: str


class ItemStatusResponse(BaseModel):
    """Result of patching the status of one product's lines."""

    message: str
    product_id: int = Field(alias="productId")
    status: str
    order_status: str = Field(alias="orderStatus")
    points_used: int = Field(alias="pointsUsed")

    model_config = ConfigDict(populate_by_name=True)


class OrderStatusResponse(BaseModel):
    """Result of a whole-order status change."""

    order_id: str
    status: str = Field(alias="orderStatus")
    message: str

    model_config = ConfigDict(populate_by_name=True)
