"""
Purpose: Domain models for the Orders capability.
What it does:
- Defines core data structures:
- Order (customer, origin/destination, status, assignment, activity log, version)
- ActivityLogEntry (status, timestamp)
- OrderItem (name, quantity)

Defines enums/constants:
- OrderStatus = Unassigned | Assigned | At Store | Picked Up | In Progress | Successful | Failed | Cancelled
- OrderPriority = Low | Medium | High | Urgent
- OrderType = Pickup | Delivery

Invariant: activity_log is never empty, its timestamps never decrease and the
last entry's status equals `status`.

Rule: No persistence, no alerting. Models only.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from common.geo import Location


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, Enum):
    UNASSIGNED = "Unassigned"
    ASSIGNED = "Assigned"
    AT_STORE = "At Store"
    PICKED_UP = "Picked Up"
    IN_PROGRESS = "In Progress"
    SUCCESSFUL = "Successful"
    FAILED = "Failed"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({OrderStatus.SUCCESSFUL, OrderStatus.FAILED, OrderStatus.CANCELLED})


class OrderPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class OrderType(str, Enum):
    PICKUP = "PICKUP"
    DELIVERY = "DELIVERY"


@dataclass(frozen=True)
class ActivityLogEntry:
    status: OrderStatus
    timestamp: datetime


@dataclass(frozen=True)
class OrderItem:
    name: str
    quantity: int = 1
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class Order:
    """
    A customer order moving through the dispatch lifecycle.

    Instances handed out by repositories are snapshots: the state machine
    builds modified copies and commits them, it never edits a snapshot in place.
    """

    id: str
    title: str
    customer_name: str
    customer_phone: str
    origin: Location
    destination: Location
    store_id: Optional[str]

    description: str = ""
    customer_email: str = ""
    status: OrderStatus = OrderStatus.UNASSIGNED
    priority: OrderPriority = OrderPriority.MEDIUM
    order_type: OrderType = OrderType.DELIVERY

    driver_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    team_id: Optional[str] = None

    order_items: List[OrderItem] = field(default_factory=list)
    activity_log: List[ActivityLogEntry] = field(default_factory=list)

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    # Bumped by the repository on every successful commit.
    version: int = 0

    @staticmethod
    def new(
        *,
        title: str,
        customer_name: str,
        customer_phone: str,
        origin: Location,
        destination: Location,
        store_id: Optional[str],
        status: OrderStatus = OrderStatus.UNASSIGNED,
        order_id: Optional[str] = None,
        now: Optional[datetime] = None,
        **extra,
    ) -> Order:
        """
        Factory for a brand new order: seeds the activity log with its initial status.
        """
        now = now or utcnow()
        return Order(
            id=order_id or str(uuid.uuid4()),
            title=title,
            customer_name=customer_name,
            customer_phone=customer_phone,
            origin=origin,
            destination=destination,
            store_id=store_id,
            status=status,
            activity_log=[ActivityLogEntry(status=status, timestamp=now)],
            created_at=now,
            updated_at=now,
            **extra,
        )

    @property
    def last_activity(self) -> Optional[ActivityLogEntry]:
        return self.activity_log[-1] if self.activity_log else None
