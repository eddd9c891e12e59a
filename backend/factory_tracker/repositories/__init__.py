"""Repository layer for database operations.

This module provides repository classes for managing the application's
own order data.
"""

from factory_tracker.repositories.order_repository import OrderRepository

__all__ = [
    "OrderRepository",
]
