"""
Alerts package.

Public API:
- Domain models: Alert, AlertType, AlertPriority, RelatedEntityType
- Delivery: AlertEmitter, AlertSink, InMemoryAlertSink
"""
from .models import Alert, AlertType, AlertPriority, RelatedEntityType
from .emitter import AlertEmitter, AlertSink, InMemoryAlertSink

__all__ = [
    "Alert",
    "AlertType",
    "AlertPriority",
    "RelatedEntityType",
    "AlertEmitter",
    "AlertSink",
    "InMemoryAlertSink",
]
