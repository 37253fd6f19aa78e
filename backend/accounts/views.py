from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from foodloop.api import bad_json, field_errors, json_view, read_json
from .decorators import require_roles
from .forms import DriverLocationForm
from .models import Role
from .services import update_driver_location


@csrf_exempt
@require_http_methods(["PATCH", "POST"])
@require_roles(Role.DRIVER)
@json_view("Failed to update location")
def update_my_location(request):
    data = read_json(request)
    if data is None:
        return bad_json()
    form = DriverLocationForm(data)
    if not form.is_valid():
        return JsonResponse({"success": False, "message": "Invalid location",
                             "errors": field_errors(form)}, status=400)
    driver = update_driver_location(request.user, form.cleaned_data["latitude"], form.cleaned_data["longitude"])
    return JsonResponse({
        "success": True,
        "message": "Location updated successfully",
        "location": {"latitude": driver.driver_latitude, "longitude": driver.driver_longitude},
    })
