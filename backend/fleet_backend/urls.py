from django.urls import path, include
from rest_framework.routers import DefaultRouter
from fleet.views import (
    AlertViewSet,
    DriverViewSet,
    ExclusionZoneViewSet,
    GeofenceViewSet,
    HubViewSet,
    OrderViewSet,
    StoreViewSet,
    TeamViewSet,
    TookanView,
    VehicleViewSet,
)

router = DefaultRouter()
router.register(r'hubs', HubViewSet)
router.register(r'stores', StoreViewSet)
router.register(r'teams', TeamViewSet)
router.register(r'vehicles', VehicleViewSet)
router.register(r'drivers', DriverViewSet)
router.register(r'orders', OrderViewSet, basename='order')
router.register(r'geofences', GeofenceViewSet)
router.register(r'exclusion-zones', ExclusionZoneViewSet)
router.register(r'alerts', AlertViewSet, basename='alert')

urlpatterns = [
    path('api/v1/', include(router.urls)),
    # Tookan-compatible surface: create_task, add_agent, edit_agent, assign_agent, get_job_details
    path('api/v1/tookan/v2/<str:operation>', TookanView.as_view(), name='tookan-v2'),
    path('api/v1/tookan/<str:operation>', TookanView.as_view(), name='tookan'),
]
