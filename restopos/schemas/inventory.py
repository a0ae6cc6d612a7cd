"""Inventory and dining table schemas."""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

Quantity = Annotated[Decimal, PlainSerializer(lambda value: float(value), return_type=float, when_used="json")]


class InventoryItemCreate(BaseModel):
    name: str = Field(min_length=1)
    quantity: Quantity = Decimal("0")
    unit: str | None = None


class InventoryItemRead(BaseModel):
    id: int
    name: str
    quantity: Quantity
    unit: str | None

    model_config = ConfigDict(from_attributes=True)


class TableCreate(BaseModel):
    number: int = Field(ge=1)
