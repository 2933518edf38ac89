from django.db import models

from alerts.models import AlertPriority, AlertType, RelatedEntityType
from drivers.models import DriverStatus, StoreStatus, VehicleType
from geofencing.models import ZoneType
from orders.models import OrderPriority, OrderStatus, OrderType


def choices(enum):
    return [(member.value, member.value) for member in enum]


class Hub(models.Model):
    """
    A distribution hub. Stores and teams belong to exactly one hub,
    which is what dispatch eligibility is decided on.
    """
    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=255)
    lat = models.FloatField(default=0.0)
    lng = models.FloatField(default=0.0)
    address = models.TextField(blank=True)
    geofence = models.ForeignKey("Geofence", on_delete=models.SET_NULL, null=True, blank=True, related_name="hubs")

    def __str__(self):
        return self.name


class Store(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=255)
    lat = models.FloatField()
    lng = models.FloatField()
    address = models.TextField(blank=True)
    hub = models.ForeignKey(Hub, on_delete=models.SET_NULL, null=True, blank=True, related_name="stores")
    manager = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=20, choices=choices(StoreStatus), default=StoreStatus.ONLINE.value)

    def __str__(self):
        return self.name


class Team(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=255)
    hub = models.ForeignKey(Hub, on_delete=models.SET_NULL, null=True, blank=True, related_name="teams")
    team_lead_id = models.CharField(max_length=64, blank=True, null=True)

    def __str__(self):
        return self.name


class Vehicle(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=choices(VehicleType), default=VehicleType.CAR.value)
    license_plate = models.CharField(max_length=32, blank=True)
    status = models.CharField(max_length=20, default="Active")

    def __str__(self):
        return f"{self.name} ({self.license_plate})"


class Driver(models.Model):
    """
    A delivery driver. Location and status are updated by the
    location-update path, independently of any order.
    """
    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)

    # Current position
    lat = models.FloatField(default=0.0)
    lng = models.FloatField(default=0.0)
    address = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=choices(DriverStatus), default=DriverStatus.AVAILABLE.value)
    vehicle = models.ForeignKey(Vehicle, on_delete=models.SET_NULL, null=True, blank=True, related_name="drivers")
    team = models.ForeignKey(Team, on_delete=models.SET_NULL, null=True, blank=True, related_name="drivers")

    points = models.IntegerField(default=0)
    rank = models.IntegerField(default=0)

    # Dispatch-API fields (Tookan agents)
    vehicle_type = models.CharField(max_length=20, choices=choices(VehicleType), default=VehicleType.CAR.value)
    vehicle_description = models.CharField(max_length=255, blank=True)
    license = models.CharField(max_length=64, blank=True)

    def __str__(self):
        return f"{self.name} ({self.status})"


class Order(models.Model):
    """
    Central model of the dispatch workflow.
    Status, assignment and activity log only change through the order state
    machine; `version` guards every such change.
    """
    id = models.CharField(primary_key=True, max_length=64)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    customer_name = models.CharField(max_length=255, blank=True)
    customer_phone = models.CharField(max_length=32, blank=True)
    customer_email = models.CharField(max_length=255, blank=True)

    origin_lat = models.FloatField()
    origin_lng = models.FloatField()
    origin_address = models.TextField(blank=True)
    destination_lat = models.FloatField()
    destination_lng = models.FloatField()
    destination_address = models.TextField(blank=True)

    status = models.CharField(max_length=20, choices=choices(OrderStatus), default=OrderStatus.UNASSIGNED.value)
    priority = models.CharField(max_length=10, choices=choices(OrderPriority), default=OrderPriority.MEDIUM.value)
    order_type = models.CharField(max_length=10, choices=choices(OrderType), default=OrderType.DELIVERY.value)

    store = models.ForeignKey(Store, on_delete=models.PROTECT, null=True, blank=True, related_name="orders")
    driver = models.ForeignKey(Driver, on_delete=models.SET_NULL, null=True, blank=True, related_name="orders")
    vehicle = models.ForeignKey(Vehicle, on_delete=models.SET_NULL, null=True, blank=True, related_name="orders")
    team = models.ForeignKey(Team, on_delete=models.SET_NULL, null=True, blank=True, related_name="orders")

    version = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Order {self.title} - {self.status}"


class OrderItem(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1)


class ActivityLogEntry(models.Model):
    """
    Append-only. `position` keeps the log in insertion order even when two
    entries share a timestamp.
    """
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="activity")
    position = models.PositiveIntegerField()
    status = models.CharField(max_length=20, choices=choices(OrderStatus))
    timestamp = models.DateTimeField()

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(fields=["order", "position"], name="unique_activity_position"),
        ]


class Alert(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    type = models.CharField(max_length=32, choices=choices(AlertType))
    message = models.TextField()
    priority = models.CharField(max_length=10, choices=choices(AlertPriority), default=AlertPriority.MEDIUM.value)
    related_entity_type = models.CharField(max_length=20, choices=choices(RelatedEntityType), blank=True, null=True)
    related_entity_id = models.CharField(max_length=64, blank=True, null=True)
    timestamp = models.DateTimeField()
    is_read = models.BooleanField(default=False)

    class Meta:
        ordering = ["-timestamp"]

    def __str__(self):
        return f"[{self.priority}] {self.type}: {self.message}"


class Geofence(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=255)
    # [{"lat": ..., "lng": ...}, ...] in vertex order
    coordinates = models.JSONField(default=list)
    color = models.CharField(max_length=16, default="#3B82F6")

    def __str__(self):
        return self.name


class ExclusionZone(models.Model):
    id = models.CharField(primary_key=True, max_length=64)
    name = models.CharField(max_length=255)
    coordinates = models.JSONField(default=list)
    type = models.CharField(max_length=16, choices=choices(ZoneType), default=ZoneType.SLOW_DOWN.value)

    def __str__(self):
        return f"{self.name} ({self.type})"


class TookanIdMapping(models.Model):
    """
    Internal string ID <-> Tookan integer ID. The auto primary key is the
    integer handed to Tookan, so numbers are unique across kinds.
    """
    class Kind(models.TextChoices):
        ORDER = "order", "Order (job_id)"
        DRIVER = "driver", "Driver (fleet_id)"
        TEAM = "team", "Team (team_id)"

    kind = models.CharField(max_length=10, choices=Kind.choices)
    internal_id = models.CharField(max_length=64)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["kind", "internal_id"], name="unique_tookan_internal_id"),
        ]

    def __str__(self):
        return f"{self.kind} {self.internal_id} -> {self.pk}"


class DriverZoneState(models.Model):
    """
    Exclusion zones containing the driver at the last location update.
    Shared by every worker so entry alerts stay one per entry.
    """
    driver_id = models.CharField(primary_key=True, max_length=64)
    zone_ids = models.JSONField(default=list)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.driver_id} in {self.zone_ids}"
