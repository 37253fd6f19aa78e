from datetime import datetime, timedelta, timezone as dt_tz

from donations.expiry import calculate_expiry

CREATED = datetime(2026, 3, 1, 9, 30, tzinfo=dt_tz.utc)
PRINTED = datetime(2026, 3, 20, tzinfo=dt_tz.utc)
DECLARED = datetime(2026, 3, 5, 18, 0, tzinfo=dt_tz.utc)


def test_donor_declared_expiry_wins():
    assert calculate_expiry("cooked", PRINTED, DECLARED, CREATED) == DECLARED
    assert calculate_expiry("packed", PRINTED, DECLARED, CREATED) == DECLARED


def test_cooked_food_keeps_two_days():
    assert calculate_expiry("cooked", None, None, CREATED) == CREATED + timedelta(days=2)


def test_packed_food_uses_printed_date_then_seven_days():
    assert calculate_expiry("packed", PRINTED, None, CREATED) == PRINTED
    assert calculate_expiry("packed", None, None, CREATED) == CREATED + timedelta(days=7)


def test_unknown_product_type_keeps_three_days():
    assert calculate_expiry(None, None, None, CREATED) == CREATED + timedelta(days=3)
    assert calculate_expiry("", PRINTED, None, CREATED) == CREATED + timedelta(days=3)
