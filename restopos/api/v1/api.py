"""API v1 router composition."""

from fastapi import APIRouter

from restopos.api.v1.endpoints import auth, bills, inventory, orders, products, tables

api_router: APIRouter = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(bills.router, tags=["bills"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["inventory"])
api_router.include_router(tables.router, prefix="/tables", tags=["tables"])
