import pytest
from django.urls import reverse

from accounts.models import Role, User
from donations.models import Donation
from geo.region import GeoPoint
from ops.models import Heartbeat
from ops.tasks import beat_heartbeat

from .conftest import COLOMBO, DEHIWALA, donation_payload, make_donation, make_user

S = Donation.Status


def _post(client, url, data=None):
    return client.post(url, data or {}, content_type="application/json")


@pytest.mark.django_db
def test_anonymous_gets_401(client):
    resp = client.get(reverse("donations:available"))
    assert resp.status_code == 401
    assert resp.json()["success"] is False


@pytest.mark.django_db
def test_wrong_role_and_unapproved_get_403(client, donor):
    client.force_login(donor)
    assert client.get(reverse("donations:available_pickups")).status_code == 403

    pending = make_user(Role.RECEIVER, email="pending@test", approval_status=User.ApprovalStatus.PENDING)
    client.force_login(pending)
    resp = client.get(reverse("donations:available"))
    assert resp.status_code == 403
    assert resp.json()["message"] == "Account is not approved."


@pytest.mark.django_db
def test_create_donation_endpoint(client, donor):
    client.force_login(donor)
    resp = _post(client, reverse("donations:create"), donation_payload())
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["donation"]["status"] == "pending"
    assert body["donation"]["tracking_id"].startswith("FL-")

    resp = _post(client, reverse("donations:create"), donation_payload(food_category="Soup"))
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "food_category"


@pytest.mark.django_db
def test_oversized_quantity_is_400(client, donor):
    client.force_login(donor)
    resp = _post(client, reverse("donations:create"), donation_payload(quantity=10**20))
    assert resp.status_code == 400
    body = resp.json()
    assert body["errors"][0] == {"field": "quantity", "message": "Quantity must be at most 1000000"}
    assert not Donation.objects.exists()


@pytest.mark.django_db
def test_malformed_json_is_400(client, donor):
    client.force_login(donor)
    resp = client.post(reverse("donations:create"), "{nope", content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Malformed JSON body"


@pytest.mark.django_db
def test_claim_race_maps_to_409(client, donor, receiver):
    d = make_donation(donor)
    client.force_login(receiver)
    url = reverse("donations:claim", args=[d.pk])
    assert _post(client, url, {"receiver_latitude": DEHIWALA[0], "receiver_longitude": DEHIWALA[1]}).status_code == 200

    rival = make_user(Role.RECEIVER, email="rival@test")
    client.force_login(rival)
    assert _post(client, url).status_code == 409
    assert _post(client, reverse("donations:claim", args=[999999])).status_code == 404


@pytest.mark.django_db
def test_driver_flow_over_http(client, driver, other_driver, claimed, router):
    router.km = 3.0
    client.force_login(driver)
    pickups = client.get(reverse("donations:available_pickups")).json()
    assert pickups["count"] == 1
    assert pickups["pickups"][0]["total_route_distance_formatted"] == "6.0 km"

    assert _post(client, reverse("donations:accept_order", args=[claimed.pk])).status_code == 200
    assert client.get(reverse("donations:active_deliveries")).json()["count"] == 1

    client.force_login(other_driver)
    assert _post(client, reverse("donations:confirm_delivery", args=[claimed.pk])).status_code == 403

    client.force_login(driver)
    assert _post(client, reverse("donations:confirm_pickup", args=[claimed.pk])).status_code == 200
    assert _post(client, reverse("donations:confirm_delivery", args=[claimed.pk])).status_code == 200
    assert client.get(reverse("donations:driver_completed")).json()["count"] == 1

    stats = client.get(reverse("donations:driver_statistics")).json()["statistics"]
    assert stats["total_deliveries_completed"] == 1
    assert stats["badge_progress"]["current_badge"] == "First Spark"


@pytest.mark.django_db
def test_donor_edit_and_cancel_over_http(client, donor, claimed):
    client.force_login(donor)
    url = reverse("donations:detail", args=[claimed.pk])
    assert client.get(url).json()["donation"]["can_edit"] is True

    resp = client.patch(url, {"quantity": 9}, content_type="application/json")
    assert resp.status_code == 200
    assert resp.json()["donation"]["quantity"] == 9

    assert client.delete(url).status_code == 200
    assert client.delete(url).status_code == 409
    assert client.get(reverse("donations:my_donations")).json()["donations"][0]["status"] == "cancelled"


@pytest.mark.django_db
def test_receipt_endpoints(client, donor, receiver, driver):
    d = make_donation(donor, quantity=15, status=S.DELIVERED, assigned_receiver=receiver, assigned_driver=driver)
    client.force_login(receiver)
    assert client.get(reverse("donations:receipt_details", args=[d.pk])).status_code == 200

    url = reverse("donations:create_receipt", args=[d.pk])
    resp = _post(client, url, {"drop_location": "Hall", "people_fed": 15, "weight_per_serving": 0.3})
    assert resp.status_code == 201
    assert resp.json()["receipt"]["methane_saved"] == 0.23
    assert _post(client, url, {"drop_location": "Hall", "people_fed": 15, "weight_per_serving": 0.3}).status_code == 409

    client.force_login(donor)
    resp = client.get(reverse("donations:donor_receipt_view", args=[d.pk]))
    assert resp.status_code == 200
    assert resp.json()["receipt_view"]["receipt"]["methane_saved"] == 0.23
    client.force_login(receiver)
    assert client.get(reverse("donations:donor_receipt_view", args=[d.pk])).status_code == 403


@pytest.mark.django_db
def test_tracking_endpoint(client, donor, driver, claimed):
    client.force_login(donor)
    resp = client.get(reverse("donations:tracking", args=[claimed.pk]))
    assert resp.status_code == 200
    assert resp.json()["tracking"]["donation"]["tracking_id"] == claimed.tracking_id
    client.force_login(driver)
    assert client.get(reverse("donations:tracking", args=[claimed.pk])).status_code == 403


@pytest.mark.django_db
def test_driver_location_update(client, driver):
    client.force_login(driver)
    url = reverse("accounts:update_my_location")
    resp = client.patch(url, {"latitude": 7.0, "longitude": 80.0}, content_type="application/json")
    assert resp.status_code == 200
    driver.refresh_from_db()
    assert (driver.driver_latitude, driver.driver_longitude) == (7.0, 80.0)

    resp = client.patch(url, {"latitude": 51.5, "longitude": -0.1}, content_type="application/json")
    assert resp.status_code == 400
    assert {e["field"] for e in resp.json()["errors"]} == {"latitude", "longitude"}


@pytest.mark.django_db
def test_unexpected_errors_become_500(client, receiver, monkeypatch):
    from donations import availability

    def boom(*args, **kwargs):
        raise RuntimeError("db on fire")

    monkeypatch.setattr(availability, "available_for_receiver", boom)
    client.force_login(receiver)
    resp = client.get(reverse("donations:available"))
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Failed to fetch available donations"}


@pytest.mark.django_db
def test_healthz_reports_beat(client):
    body = client.get(reverse("ops:healthz")).json()
    assert body["ok"] is True and body["celery_beat_ok"] is False
    assert beat_heartbeat.delay().get() == "ok"
    assert Heartbeat.objects.filter(key="beat").count() == 1
    assert client.get(reverse("ops:healthz")).json()["celery_beat_ok"] is True


@pytest.mark.django_db
def test_whoami(client, receiver):
    client.force_login(receiver)
    body = client.get(reverse("whoami")).json()
    assert body["role"] == "RECEIVER" and body["name"] == "City Food Bank"


@pytest.mark.django_db
def test_map_route_endpoint(client, driver, router):
    url = reverse("geo:route")
    query = {"start_lat": COLOMBO[0], "start_lng": COLOMBO[1], "end_lat": DEHIWALA[0], "end_lng": DEHIWALA[1]}
    assert client.get(url, query).status_code == 401

    client.force_login(driver)
    resp = client.get(url, {**query, "end_lng": "east"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Missing or invalid start_lat, start_lng, end_lat, end_lng"

    assert client.get(url, query).status_code == 502
    router.waypoints = []
    assert client.get(url, query).status_code == 404

    router.waypoints = [GeoPoint(*COLOMBO), GeoPoint(*DEHIWALA)]
    resp = client.get(url, query)
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "waypoints": [
        {"latitude": COLOMBO[0], "longitude": COLOMBO[1]},
        {"latitude": DEHIWALA[0], "longitude": DEHIWALA[1]},
    ]}
