"""Schema exports."""

from restopos.schemas.auth import LoginRequest, TokenResponse
from restopos.schemas.bill import BillCreate, BillRead, TaxRatesPayload
from restopos.schemas.order import CartItemPayload, OrderCreate, OrderRead, OrderUpdate
from restopos.schemas.product import IngredientRequirement, ProductCreate, ProductResponse

__all__ = [
    "BillCreate",
    "BillRead",
    "CartItemPayload",
    "IngredientRequirement",
    "LoginRequest",
    "OrderCreate",
    "OrderRead",
    "OrderUpdate",
    "ProductCreate",
    "ProductResponse",
    "TaxRatesPayload",
    "TokenResponse",
]
