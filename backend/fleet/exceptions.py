import logging

from django.db.models import ProtectedError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from common.errors import FleetError

logger = logging.getLogger(__name__)


def fleet_exception_handler(exc, context):
    """
    DRF exception handler: core FleetErrors become {"error": message} with
    their own status code; everything else goes through DRF's default.
    """
    if isinstance(exc, FleetError):
        logger.warning("%s rejected (%s): %s", context["view"].__class__.__name__, exc.status_code, exc.message)
        return Response({"error": exc.message}, status=exc.status_code)
    if isinstance(exc, ProtectedError):
        # e.g. deleting a store that still has orders
        return Response({"error": "Record is still referenced by orders"}, status=409)
    return exception_handler(exc, context)
