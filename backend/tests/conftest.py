from collections import namedtuple
from datetime import timedelta

import pytest
from django.apps import apps
from django.core.cache import cache
from django.utils import timezone

from accounts.models import Role, User
from donations.models import Donation
from geo.services import build_geo_services

Location = namedtuple("Location", "latitude longitude")

# all inside the default service region
COLOMBO = (6.9271, 79.8612)
DEHIWALA = (6.8511, 79.8650)
KANDY = (7.2906, 80.6337)

ADDRESSES = {
    "galle road, colombo 03": COLOMBO,
    "dehiwala junction": DEHIWALA,
    "kandy town": KANDY,
    "london": (51.5072, -0.1276),
}


class FakeNominatim:
    """Looks addresses up in ADDRESSES and counts the calls."""

    def __init__(self, table=None):
        self.table = dict(ADDRESSES if table is None else table)
        self.calls = []

    def geocode(self, query, **kwargs):
        self.calls.append(query)
        key = query.lower()
        for address, (lat, lng) in self.table.items():
            if key.startswith(address):
                return Location(lat, lng)
        return None


class FakeRouter:
    """Fixed road distances and geometry; None means 'router unavailable'."""

    def __init__(self, km=None, waypoints=None):
        self.km = km
        self.waypoints = waypoints
        self.calls = 0

    def route_distance_km(self, a, b):
        self.calls += 1
        if callable(self.km):
            return self.km(a, b)
        return self.km

    def route_waypoints(self, a, b):
        self.calls += 1
        return self.waypoints


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def nominatim():
    return FakeNominatim()


@pytest.fixture
def router():
    return FakeRouter()


@pytest.fixture(autouse=True)
def geo(nominatim, router, monkeypatch):
    """Fake geocoder/router, also installed as the process-wide services so views use them."""
    services = build_geo_services(geocoder_backend=nominatim, router=router)
    monkeypatch.setattr(apps.get_app_config("geo"), "services", services)
    return services


def make_user(role, email=None, **extra):
    fields = {"role": role, "approval_status": User.ApprovalStatus.COMPLETED}
    fields.update(extra)
    return User.objects.create_user(email=email or f"{role.lower()}@test", password="x", **fields)


@pytest.fixture
def donor(db):
    return make_user(Role.DONOR, display_name="Asha", address="Galle Road, Colombo 03")


@pytest.fixture
def receiver(db):
    return make_user(Role.RECEIVER, receiver_name="City Food Bank", receiver_type="Food Banks",
                     address="Dehiwala Junction")


@pytest.fixture
def driver(db):
    return make_user(Role.DRIVER, driver_name="Nimal", vehicle_type="Bike", vehicle_number="WP-1234",
                     driver_latitude=COLOMBO[0], driver_longitude=COLOMBO[1])


@pytest.fixture
def other_driver(db):
    return make_user(Role.DRIVER, email="driver2@test", driver_name="Kamal",
                     driver_latitude=COLOMBO[0], driver_longitude=COLOMBO[1])


def donation_payload(**overrides):
    tomorrow = (timezone.localdate() + timedelta(days=1)).isoformat()
    data = {
        "food_category": "Cooked Meals",
        "item_name": "Rice and curry",
        "quantity": 4,
        "storage_recommendation": "Hot",
        "image_url": "https://img.example/rice.jpg",
        "preferred_pickup_date": tomorrow,
        "preferred_pickup_time_from": "10:00",
        "preferred_pickup_time_to": "12:00",
        "product_type": "cooked",
        "donor_latitude": COLOMBO[0],
        "donor_longitude": COLOMBO[1],
    }
    data.update(overrides)
    return data


def make_donation(donor, **fields):
    """Insert a donation row directly, bypassing the create flow."""
    now = timezone.now()
    seq = Donation.objects.count() + 1
    values = {
        "tracking_id": f"FL-{timezone.localdate():%Y%m%d}-{seq:02d}",
        "donor": donor,
        "food_category": Donation.FoodCategory.COOKED_MEALS,
        "item_name": "Rice and curry",
        "quantity": 4,
        "storage_recommendation": Donation.Storage.HOT,
        "image_url": "https://img.example/rice.jpg",
        "preferred_pickup_date": timezone.localdate(),
        "preferred_pickup_time_from": "10:00",
        "preferred_pickup_time_to": "12:00",
        "expiry_date": now + timedelta(days=2),
        "donor_address": donor.address,
        "donor_email": donor.email,
        "donor_latitude": COLOMBO[0],
        "donor_longitude": COLOMBO[1],
    }
    values.update(fields)
    return Donation.objects.create(**values)


@pytest.fixture
def claimed(donor, receiver):
    return make_donation(donor, status=Donation.Status.ASSIGNED, assigned_receiver=receiver,
                         receiver_latitude=DEHIWALA[0], receiver_longitude=DEHIWALA[1])
