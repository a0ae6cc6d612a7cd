"""Application models package."""

from restopos.models.bill import Bill
from restopos.models.business import Business, BusinessOwner, Customer
from restopos.models.inventory import InventoryItem
from restopos.models.order import Order, OrderItem
from restopos.models.product import Product
from restopos.models.table import DiningTable

__all__ = [
    "Bill", "Business", "BusinessOwner", "Customer", "DiningTable", "InventoryItem", "Order", "OrderItem", "Product",
]
