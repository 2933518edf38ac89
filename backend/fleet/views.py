from django.db import transaction
from django.db.models import Count
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from common.errors import NotFound, ValidationError
from common.geo import Location
from geofencing import ExclusionZone as ExclusionZoneShape, ZoneType
from geofencing import check_point, drivers_inside_zones, polygon_area_km2
from orders.models import Order as OrderRecord, OrderItem as OrderItemRecord, OrderPriority, OrderType
from .models import Alert, Driver, ExclusionZone, Geofence, Hub, Order, Store, Team, Vehicle
from .serializers import (
    AlertSerializer,
    AssignDriverSerializer,
    DriverSerializer,
    DriverStatusSerializer,
    ExclusionZoneSerializer,
    GeofenceSerializer,
    HubSerializer,
    LocationSerializer,
    OrderCreateSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    PointSerializer,
    StoreSerializer,
    TeamSerializer,
    VehicleSerializer,
)
from .services import fleet_services


def zone_summary(zone):
    summary = {"id": zone.id, "name": zone.name}
    if isinstance(zone, ExclusionZoneShape):
        summary["type"] = zone.zone_type.value
    return summary


class HubViewSet(viewsets.ModelViewSet):
    queryset = Hub.objects.all()
    serializer_class = HubSerializer


class StoreViewSet(viewsets.ModelViewSet):
    queryset = Store.objects.all()
    serializer_class = StoreSerializer


class TeamViewSet(viewsets.ModelViewSet):
    queryset = Team.objects.all()
    serializer_class = TeamSerializer


class VehicleViewSet(viewsets.ModelViewSet):
    queryset = Vehicle.objects.all()
    serializer_class = VehicleSerializer


class OrderViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Orders are read through the ORM but every write (create, status,
    assignment) goes through the order state machine.
    Orders are never deleted.
    """
    serializer_class = OrderSerializer

    def get_queryset(self):
        """
        Optional filters: ?status=, ?priority=, ?driver=, ?store=, ?team=
        """
        qs = Order.objects.prefetch_related("items", "activity")
        qp = self.request.query_params
        for param, column in (("status", "status"), ("priority", "priority"), ("driver", "driver_id"),
                              ("store", "store_id"), ("team", "team_id")):
            if qp.get(param):
                qs = qs.filter(**{column: qp[param]})
        return qs

    def create(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        services = fleet_services()

        # creation and the optional first assignment succeed or fail together
        with transaction.atomic():
            order = services.state_machine.create(
                OrderRecord.new(
                    title=data["title"],
                    description=data["description"],
                    customer_name=data["customer_name"],
                    customer_phone=data["customer_phone"],
                    customer_email=data["customer_email"],
                    origin=Location(**data["origin"]),
                    destination=Location(**data["destination"]),
                    store_id=data["store_id"],
                    priority=OrderPriority(data["priority"]),
                    order_type=OrderType(data["order_type"]),
                    order_items=[OrderItemRecord(name=item["name"], quantity=item["quantity"])
                                 for item in data["order_items"]],
                )
            )
            if data.get("driver_id"):
                order = services.dispatch.assign(
                    order, data["driver_id"], data.get("vehicle_id"), override=data["override"]
                )

        return Response(self._render(order.id), status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        """
        Move the order to any status (admin override, no forward-only rule).
        """
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        order = self._snapshot(pk, serializer.validated_data.get("version"))
        saved = fleet_services().state_machine.set_status(order, serializer.validated_data["status"])
        return Response(self._render(saved.id))

    @action(detail=True, methods=['post'])
    def assign(self, request, pk=None):
        serializer = AssignDriverSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = self._snapshot(pk, data.get("version"))
        saved = fleet_services().dispatch.assign(
            order, data["driver_id"], data.get("vehicle_id"), override=data["override"]
        )
        return Response(self._render(saved.id))

    @action(detail=True, methods=['get'], url_path='eligible-drivers')
    def eligible_drivers(self, request, pk=None):
        order = self._snapshot(pk)
        eligible_ids = [driver.id for driver in fleet_services().dispatch.eligible_drivers_for(order)]
        rows = Driver.objects.filter(pk__in=eligible_ids).order_by("id")
        return Response(DriverSerializer(rows, many=True).data)

    @action(detail=False, methods=['get'])
    def stats(self, request):
        qs = Order.objects.all()
        return Response({
            "total": qs.count(),
            "by_status": {row["status"]: row["count"] for row in qs.order_by().values("status").annotate(count=Count("id"))},
            "by_priority": {row["priority"]: row["count"] for row in qs.order_by().values("priority").annotate(count=Count("id"))},
        })

    def _snapshot(self, pk, version=None):
        order = fleet_services().orders.get(pk)
        if order is None:
            raise NotFound(f"Order {pk} not found")
        if version is not None:
            # commit against the version the client last saw
            order.version = version
        return order

    @staticmethod
    def _render(order_id):
        row = Order.objects.prefetch_related("items", "activity").get(pk=order_id)
        return OrderSerializer(row).data


class DriverViewSet(viewsets.ModelViewSet):
    queryset = Driver.objects.all()
    serializer_class = DriverSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        qp = self.request.query_params
        if qp.get("team"):
            qs = qs.filter(team_id=qp["team"])
        if qp.get("status"):
            qs = qs.filter(status=qp["status"])
        return qs

    @action(detail=True, methods=['post'])
    def location(self, request, pk=None):
        """
        Driver location update. Runs exclusion-zone entry detection,
        never touches orders.
        """
        serializer = LocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = fleet_services().locations.update_location(pk, Location(**serializer.validated_data))
        return Response({
            "driver": DriverSerializer(Driver.objects.get(pk=result.driver.id)).data,
            "entered_zones": [zone_summary(zone) for zone in result.entered_zones],
        })

    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        serializer = DriverStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        driver = fleet_services().locations.update_status(pk, serializer.validated_data["status"])
        return Response(DriverSerializer(Driver.objects.get(pk=driver.id)).data)

    @action(detail=True, methods=['get'])
    def orders(self, request, pk=None):
        rows = Order.objects.prefetch_related("items", "activity").filter(driver_id=pk)
        return Response(OrderSerializer(rows, many=True).data)


class ZoneActionsMixin:
    """
    Containment endpoints shared by geofences and exclusion zones.
    """

    def zone_shapes(self):
        raise NotImplementedError

    @action(detail=True, methods=['get'])
    def area(self, request, pk=None):
        row = self.get_object()
        return Response({"id": row.pk, "area_km2": round(polygon_area_km2(
            [(point["lat"], point["lng"]) for point in row.coordinates]
        ), 4)})

    @action(detail=False, methods=['post'], url_path='check-point')
    def check_point(self, request):
        serializer = PointSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        point = (serializer.validated_data["lat"], serializer.validated_data["lng"])

        zone_type = request.query_params.get("type")
        if zone_type:
            try:
                zone_type = ZoneType(zone_type)
            except ValueError:
                raise ValidationError(f"Unknown exclusion zone type: {zone_type}")

        result = check_point(point, self.zone_shapes(), zone_type=zone_type or None)
        return Response({
            "is_inside": result.is_inside,
            "matches": [zone_summary(zone) for zone in result.matches],
        })

    @action(detail=False, methods=['get'], url_path='drivers-inside')
    def drivers_inside(self, request):
        pairs = drivers_inside_zones(fleet_services().drivers.list(), self.zone_shapes())
        return Response([
            {"driver_id": driver.id, "driver_name": driver.name, "zone": zone_summary(zone)}
            for driver, zone in pairs
        ])


class GeofenceViewSet(ZoneActionsMixin, viewsets.ModelViewSet):
    queryset = Geofence.objects.all()
    serializer_class = GeofenceSerializer

    def zone_shapes(self):
        return fleet_services().zones.geofences()


class ExclusionZoneViewSet(ZoneActionsMixin, viewsets.ModelViewSet):
    queryset = ExclusionZone.objects.all()
    serializer_class = ExclusionZoneSerializer

    def zone_shapes(self):
        return fleet_services().zones.exclusion_zones()


class AlertViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Alerts are written by the core (state machine, zone tracker) only.
    """
    serializer_class = AlertSerializer

    def get_queryset(self):
        qs = Alert.objects.all()
        qp = self.request.query_params
        if qp.get("priority"):
            qs = qs.filter(priority=qp["priority"])
        if qp.get("type"):
            qs = qs.filter(type=qp["type"])
        if qp.get("entity_type") and qp.get("entity_id"):
            qs = qs.filter(related_entity_type=qp["entity_type"], related_entity_id=qp["entity_id"])
        if qp.get("unread") == "true":
            qs = qs.filter(is_read=False)
        return qs

    @action(detail=True, methods=['post'])
    def read(self, request, pk=None):
        alert = self.get_object()
        alert.is_read = True
        alert.save(update_fields=["is_read"])
        return Response(AlertSerializer(alert).data)

    @action(detail=False, methods=['get'])
    def stats(self, request):
        qs = Alert.objects.all()
        return Response({
            "total": qs.count(),
            "unread": qs.filter(is_read=False).count(),
            "by_type": {row["type"]: row["count"] for row in qs.order_by().values("type").annotate(count=Count("id"))},
        })


class TookanView(APIView):
    """
    Tookan-compatible inbound endpoint. The response body is always the
    {status, message, data} envelope and its status matches the HTTP status.
    """

    def post(self, request, operation):
        http_status, envelope = fleet_services().tookan.handle(operation, request.data)
        return Response(envelope, status=http_status)
