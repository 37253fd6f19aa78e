from datetime import datetime, timedelta, timezone as dt_tz

import pytest

from donations import stats
from donations.badges import DONOR_BADGE_NAMES, DONOR_MILESTONES, badge_progress
from donations.models import Donation

from .conftest import make_donation

S = Donation.Status


def test_badge_progress_before_first_milestone():
    p = badge_progress(0, DONOR_MILESTONES, DONOR_BADGE_NAMES)
    assert p["current_badge"] is None
    assert p["next_badge"] == "First Spark"
    assert p["remaining"] == 1
    assert not any(t["achieved"] for t in p["timeline"])


def test_badge_progress_mid_way_and_maxed():
    p = badge_progress(30, DONOR_MILESTONES, DONOR_BADGE_NAMES)
    assert (p["current_badge"], p["current_badge_key"]) == ("Silver Donation", "silver")
    assert (p["next_badge"], p["next_milestone"], p["remaining"]) == ("Gold Donation", 50, 20)

    p = badge_progress(120, DONOR_MILESTONES, DONOR_BADGE_NAMES)
    assert p["current_badge"] == "Centurion Donation"
    assert p["next_badge"] is None and p["remaining"] == 0


@pytest.mark.django_db
def test_donor_statistics_count_delivered_only(donor, receiver, driver):
    make_donation(donor, status=S.DELIVERED, assigned_receiver=receiver, assigned_driver=driver)
    make_donation(donor)
    out = stats.donor_statistics(donor)
    assert out["total_donations_delivered"] == 1
    assert out["badge_progress"]["current_badge"] == "First Spark"


@pytest.mark.django_db
def test_driver_statistics_compare_months(donor, receiver, driver, geo):
    now = datetime(2026, 3, 15, 12, 0, tzinfo=dt_tz.utc)
    delivered = dict(status=S.DELIVERED, assigned_receiver=receiver, assigned_driver=driver)
    make_donation(donor, delivered_at=now - timedelta(days=2), **delivered)
    make_donation(donor, delivered_at=now - timedelta(days=3), **delivered)
    make_donation(donor, delivered_at=now - timedelta(days=30), **delivered)   # February
    make_donation(donor, delivered_at=now - timedelta(days=90), **delivered)   # December

    out = stats.driver_statistics(driver, services=geo, now=now)
    assert out["total_deliveries_completed"] == 4
    assert out["current_month_deliveries"] == 2
    assert out["deliveries_trend"] == 100    # 2 vs 1
    # no receiver coordinates on the rows: profile address is geocoded (about 8.5 km each)
    assert 8 < out["current_month_distance"] / 2 < 9
    assert out["impact_progress"]["badge_level"] == "First Spark"
    assert out["impact_progress"]["next_badge_target"] == 25
    assert out["impact_progress"]["progress_percentage"] == 16


@pytest.mark.django_db
def test_driver_statistics_without_history(driver, geo):
    out = stats.driver_statistics(driver, services=geo)
    assert out["total_deliveries_completed"] == 0
    assert out["deliveries_trend"] == 0
    assert out["total_distance_travelled_formatted"] == "0 m"
    assert out["impact_progress"]["badge_level"] == "None"
