# Database models
from factory_tracker.models.user import User
from factory_tracker.models.order import Order, OrderProduct, OrderStatus, ProductStatus

__all__ = [
    "User",
    "Order",
    "OrderProduct",
    "OrderStatus",
    "ProductStatus",
]
