"""
Purpose: Domain models for dashboard alerts.

Alerts are produced as side effects of the order state machine and of the
driver zone-entry path. They are owned and stored by an external sink.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class AlertType(str, Enum):
    DRIVER_DELAYED = "Driver Delayed"
    ORDER_FAILED = "Order Failed"
    LOW_COVERAGE = "Low Coverage"
    ORDER_STATUS_UPDATED = "Order Status Updated"
    ENTERED_EXCLUSION_ZONE = "Entered Exclusion Zone"
    CHALLENGE_COMPLETED = "Challenge Completed"


class AlertPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RelatedEntityType(str, Enum):
    DRIVER = "Driver"
    ORDER = "Order"
    STORE = "Store"
    TEAM = "Team"
    HUB = "Hub"
    CHALLENGE = "Challenge"


@dataclass(frozen=True)
class Alert:
    type: AlertType
    message: str
    priority: AlertPriority = AlertPriority.MEDIUM
    related_entity_type: Optional[RelatedEntityType] = None
    related_entity_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_read: bool = False
