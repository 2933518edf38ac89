from rest_framework import serializers

from common.errors import ValidationError as FleetValidationError
from drivers.models import DriverStatus
from geofencing.models import Geofence as GeofenceShape, ZoneType
from orders.models import OrderPriority, OrderStatus, OrderType
from .models import (
    ActivityLogEntry,
    Alert,
    Driver,
    ExclusionZone,
    Geofence,
    Hub,
    Order,
    OrderItem,
    Store,
    Team,
    Vehicle,
)


def enum_choices(enum):
    return [member.value for member in enum]


class HubSerializer(serializers.ModelSerializer):
    class Meta:
        model = Hub
        fields = '__all__'


class StoreSerializer(serializers.ModelSerializer):
    class Meta:
        model = Store
        fields = '__all__'


class TeamSerializer(serializers.ModelSerializer):
    class Meta:
        model = Team
        fields = '__all__'


class VehicleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Vehicle
        fields = '__all__'


class DriverSerializer(serializers.ModelSerializer):
    class Meta:
        model = Driver
        fields = '__all__'
        # moved through /location and /status so zone entry is tracked
        read_only_fields = ['lat', 'lng', 'address', 'status']


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ['id', 'name', 'quantity']


class ActivityLogEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = ActivityLogEntry
        fields = ['status', 'timestamp']


class OrderSerializer(serializers.ModelSerializer):
    """
    Read side of an order. Every write goes through the state machine.
    """
    items = OrderItemSerializer(many=True, read_only=True)
    activity = ActivityLogEntrySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = '__all__'


class LocationSerializer(serializers.Serializer):
    lat = serializers.FloatField(min_value=-90, max_value=90)
    lng = serializers.FloatField(min_value=-180, max_value=180)
    address = serializers.CharField(required=False, allow_blank=True, default="")


class NewOrderItemSerializer(serializers.Serializer):
    name = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class OrderCreateSerializer(serializers.Serializer):
    title = serializers.CharField()
    description = serializers.CharField(required=False, allow_blank=True, default="")
    customer_name = serializers.CharField()
    customer_phone = serializers.CharField()
    customer_email = serializers.CharField(required=False, allow_blank=True, default="")
    origin = LocationSerializer()
    destination = LocationSerializer()
    store_id = serializers.CharField()
    priority = serializers.ChoiceField(choices=enum_choices(OrderPriority), default=OrderPriority.MEDIUM.value)
    order_type = serializers.ChoiceField(choices=enum_choices(OrderType), default=OrderType.DELIVERY.value)
    order_items = NewOrderItemSerializer(many=True, required=False, default=list)

    # optional immediate assignment
    driver_id = serializers.CharField(required=False)
    vehicle_id = serializers.CharField(required=False)
    override = serializers.BooleanField(required=False, default=False)

    def validate_store_id(self, value):
        if not Store.objects.filter(pk=value).exists():
            raise serializers.ValidationError(f"Unknown store: {value}")
        return value


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=enum_choices(OrderStatus))
    # last version the client saw; omitted means "whatever is stored now"
    version = serializers.IntegerField(required=False, min_value=0)


class AssignDriverSerializer(serializers.Serializer):
    driver_id = serializers.CharField()
    vehicle_id = serializers.CharField(required=False)
    override = serializers.BooleanField(required=False, default=False)
    version = serializers.IntegerField(required=False, min_value=0)


class DriverStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=enum_choices(DriverStatus))


class PointSerializer(serializers.Serializer):
    lat = serializers.FloatField()
    lng = serializers.FloatField()


class ZoneSerializerMixin:
    def validate_coordinates(self, value):
        try:
            # only used to run the shared vertex validation
            shape = GeofenceShape("validation", "validation", value)
        except FleetValidationError as error:
            raise serializers.ValidationError(error.message)
        except (TypeError, ValueError):
            raise serializers.ValidationError("Coordinates must be a list of {lat, lng} points")
        return shape.coordinates()


class GeofenceSerializer(ZoneSerializerMixin, serializers.ModelSerializer):
    class Meta:
        model = Geofence
        fields = '__all__'


class ExclusionZoneSerializer(ZoneSerializerMixin, serializers.ModelSerializer):
    type = serializers.ChoiceField(choices=enum_choices(ZoneType), default=ZoneType.SLOW_DOWN.value)

    class Meta:
        model = ExclusionZone
        fields = '__all__'


class AlertSerializer(serializers.ModelSerializer):
    class Meta:
        model = Alert
        fields = '__all__'
        read_only_fields = ['id', 'type', 'message', 'priority', 'related_entity_type', 'related_entity_id', 'timestamp']
