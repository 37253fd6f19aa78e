from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import require_roles
from accounts.models import Role
from foodloop.api import bad_json, json_view, read_json
from . import availability, impact, lifecycle, stats


def _brief(d):
    return {
        "id": d.pk,
        "tracking_id": d.tracking_id,
        "food_category": d.food_category,
        "item_name": d.item_name,
        "quantity": d.quantity,
        "status": d.status,
        "expiry_date": d.expiry_date,
        "assigned_receiver_id": d.assigned_receiver_id,
        "assigned_driver_id": d.assigned_driver_id,
        "actual_pickup_date": d.actual_pickup_date,
        "created_at": d.created_at,
        "updated_at": d.updated_at,
    }


def _respond(result, ok_status=200, key="donation"):
    if not result.ok:
        body = {"success": False, "message": result.message}
        if result.errors:
            body["errors"] = result.errors
        return JsonResponse(body, status=result.http_status)
    body = {"success": True}
    if result.message:
        body["message"] = result.message
    if result.data is not None:
        body[key] = result.data
    elif result.donation is not None:
        body[key] = _brief(result.donation)
    return JsonResponse(body, status=ok_status)


def _listing(key, rows, **extra):
    return JsonResponse({"success": True, key: rows, "count": len(rows), **extra})


# --- collection -------------------------------------------------------------

@csrf_exempt
@require_POST
@require_roles(Role.DONOR)
@json_view("Failed to create donation")
def create_donation(request):
    data = read_json(request)
    if data is None:
        return bad_json()
    return _respond(lifecycle.create_donation(request.user, data), ok_status=201)


@require_GET
@require_roles(Role.RECEIVER, allow_superuser=True)
@json_view("Failed to fetch available donations")
def available(request):
    return _listing("donations", availability.available_for_receiver())


@require_GET
@require_roles(Role.RECEIVER)
@json_view("Failed to fetch your claims")
def my_claims(request):
    return _listing("donations", availability.my_claims(request.user))


@require_GET
@require_roles(Role.DONOR)
@json_view("Failed to fetch your donations")
def my_donations(request):
    return _listing("donations", availability.my_donations(request.user))


@require_GET
@require_roles(Role.DRIVER)
@json_view("Failed to fetch available pickups")
def available_pickups(request):
    out = availability.available_pickups(request.user)
    return _listing("pickups", out["pickups"], driver_location=out["driver_location"])


@require_GET
@require_roles(Role.DRIVER)
@json_view("Failed to fetch active deliveries")
def active_deliveries(request):
    out = availability.active_deliveries(request.user)
    return _listing("deliveries", out["deliveries"], driver_location=out["driver_location"])


@require_GET
@require_roles(Role.DRIVER)
@json_view("Failed to fetch completed deliveries")
def driver_completed(request):
    return _listing("deliveries", availability.driver_completed(request.user))


@require_GET
@require_roles(Role.DONOR)
@json_view("Failed to fetch donor statistics")
def donor_statistics(request):
    return JsonResponse({"success": True, "statistics": stats.donor_statistics(request.user)})


@require_GET
@require_roles(Role.DRIVER)
@json_view("Failed to fetch driver statistics")
def driver_statistics(request):
    return JsonResponse({"success": True, "statistics": stats.driver_statistics(request.user)})


# --- single donation --------------------------------------------------------

@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
@require_roles(Role.DONOR)
@json_view("Failed to process donation")
def donation_detail(request, pk):
    if request.method == "GET":
        return _respond(availability.donor_detail(request.user, pk))
    if request.method == "DELETE":
        return _respond(lifecycle.cancel_donation(request.user, pk))
    data = read_json(request)
    if data is None:
        return bad_json()
    return _respond(lifecycle.edit_donation(request.user, pk, data))


@csrf_exempt
@require_POST
@require_roles(Role.RECEIVER)
@json_view("Failed to claim donation")
def claim(request, pk):
    data = read_json(request)
    if data is None:
        return bad_json()
    return _respond(lifecycle.claim_donation(request.user, pk, data))


@csrf_exempt
@require_POST
@require_roles(Role.DRIVER)
@json_view("Failed to accept order")
def accept_order(request, pk):
    return _respond(lifecycle.accept_order(request.user, pk))


@csrf_exempt
@require_POST
@require_roles(Role.DRIVER)
@json_view("Failed to confirm pickup")
def confirm_pickup(request, pk):
    return _respond(lifecycle.confirm_pickup(request.user, pk))


@csrf_exempt
@require_POST
@require_roles(Role.DRIVER)
@json_view("Failed to confirm delivery")
def confirm_delivery(request, pk):
    return _respond(lifecycle.confirm_delivery(request.user, pk))


@require_GET
@require_roles(Role.DONOR, Role.RECEIVER, Role.DRIVER, Role.ADMIN, allow_superuser=True)
@json_view("Failed to fetch tracking data")
def tracking(request, pk):
    return _respond(availability.tracking_snapshot(request.user, pk), key="tracking")


@require_GET
@require_roles(Role.RECEIVER)
@json_view("Failed to fetch receipt details")
def receipt_details(request, pk):
    return _respond(impact.receipt_details(request.user, pk), key="receipt_details")


@require_GET
@require_roles(Role.DONOR)
@json_view("Failed to fetch receipt")
def donor_receipt_view(request, pk):
    return _respond(impact.donor_receipt_view(request.user, pk), key="receipt_view")


@csrf_exempt
@require_POST
@require_roles(Role.RECEIVER)
@json_view("Failed to create impact receipt")
def create_receipt(request, pk):
    data = read_json(request)
    if data is None:
        return bad_json()
    return _respond(impact.create_receipt(request.user, pk, data), ok_status=201, key="receipt")
