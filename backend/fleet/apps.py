import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class FleetConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "fleet"
    verbose_name = "Fleet dispatch"

    services = None

    def ready(self):
        # wire the ORM repositories into the core exactly once per process
        from .services import build_django_services

        self.services = build_django_services(alerts_async=settings.FLEET_ALERTS_ASYNC)
        logger.info("Fleet services ready (async alerts: %s)", settings.FLEET_ALERTS_ASYNC)
