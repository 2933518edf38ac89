"""
Purpose: Package entry + stable exports.

Orders domain package.

Public API:
- Domain models: Order, OrderItem, ActivityLogEntry, OrderStatus, OrderPriority, OrderType
- Storage: OrderRepository, InMemoryOrderRepository
"""
from .models import (
    ActivityLogEntry,
    Order,
    OrderItem,
    OrderPriority,
    OrderStatus,
    OrderType,
)
from .repository import InMemoryOrderRepository, OrderRepository

__all__ = ["Order",
           "OrderItem",
             "ActivityLogEntry",
               "OrderStatus",
               "OrderPriority",
               "OrderType",
               "OrderRepository",
               "InMemoryOrderRepository",
               ]
