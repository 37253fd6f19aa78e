from django.http import JsonResponse
from django.views.decorators.http import require_GET

from accounts.decorators import require_roles
from accounts.models import Role
from foodloop.api import json_view
from .forms import RouteQueryForm
from .services import get_geo_services


def _fail(message, status):
    return JsonResponse({"success": False, "message": message}, status=status)


@require_GET
@require_roles(Role.DONOR, Role.RECEIVER, Role.DRIVER, Role.ADMIN, allow_superuser=True)
@json_view("Failed to fetch route")
def route(request):
    """Road waypoints between two points, for drawing a driver's route."""
    form = RouteQueryForm(request.GET)
    if not form.is_valid():
        return _fail("Missing or invalid start_lat, start_lng, end_lat, end_lng", 400)
    points = get_geo_services().distances.route_waypoints(*form.endpoints())
    if points is None:
        return _fail("Routing service unavailable or no route found", 502)
    if not points:
        return _fail("No route found between points", 404)
    return JsonResponse({"success": True, "waypoints": [p.as_dict() for p in points]})
