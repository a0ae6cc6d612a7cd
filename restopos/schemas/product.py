"""Product API schemas."""

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from restopos.schemas.common import Money


class IngredientRequirement(BaseModel):
    """Amount of one inventory ingredient consumed by a single unit of a product."""

    name: str = Field(min_length=1)
    quantity: float = Field(ge=0)

    @field_validator("quantity")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("quantity must be a finite number")
        return value


class ProductCreate(BaseModel):
    """Payload for creating a product."""

    name: str = Field(min_length=1)
    description: str | None = None
    price: Money = Field(ge=0)
    product_type: str = Field(default="generic", alias="productType")
    category: str | None = None
    images: list[str] = Field(default_factory=list)
    recipe: list[IngredientRequirement] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ProductUpdate(BaseModel):
    """Partial product update; omitted fields are left untouched."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: Money | None = Field(default=None, ge=0)
    product_type: str | None = Field(default=None, alias="productType")
    category: str | None = None
    images: list[str] | None = None
    recipe: list[IngredientRequirement] | None = None
    is_active: bool | None = Field(default=None, alias="isActive")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("name", "price", "product_type", "is_active")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("field cannot be null")
        return value


class ProductResponse(BaseModel):
    """Serialized product."""

    id: int
    business_id: int = Field(alias="businessId")
    name: str
    description: str | None
    price: Money
    product_type: str = Field(alias="productType")
    category: str | None
    is_active: bool = Field(alias="isActive")
    images: list[str] | None
    recipe: list[dict[str, Any]] | None
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
