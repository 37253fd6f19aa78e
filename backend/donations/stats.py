from django.db.models.functions import Coalesce
from django.utils import timezone

from geo.distance import format_distance, straight_line_km
from geo.services import get_geo_services
from .badges import (DONOR_BADGE_NAMES, DONOR_MILESTONES, DRIVER_BADGE_NAMES, DRIVER_MILESTONES,
                     badge_progress)
from .models import Donation
from .positions import donor_position, receiver_position


def donor_statistics(donor) -> dict:
    delivered = Donation.objects.filter(donor=donor, status=Donation.Status.DELIVERED).count()
    return {
        "total_donations_delivered": delivered,
        "badge_progress": badge_progress(delivered, DONOR_MILESTONES, DONOR_BADGE_NAMES),
    }


def _month_starts(now):
    local = timezone.localtime(now)
    current = local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if current.month == 1:
        previous = current.replace(year=current.year - 1, month=12)
    else:
        previous = current.replace(month=current.month - 1)
    return current, previous


def _trend(current, previous) -> int:
    if previous > 0:
        return round((current - previous) / previous * 100)
    return 100 if current > 0 else 0


def driver_statistics(driver, services=None, now=None) -> dict:
    """
    Delivered count and donor->receiver straight-line distance, overall and
    for this month vs last month (by delivery time, local calendar).
    """
    services = services or get_geo_services()
    now = now or timezone.now()
    this_month, last_month = _month_starts(now)

    delivered = (Donation.objects.select_related("donor", "assigned_receiver")
                 .filter(assigned_driver=driver, status=Donation.Status.DELIVERED)
                 .annotate(done_at=Coalesce("delivered_at", "updated_at")))

    totals = {"all": [0, 0.0], "current": [0, 0.0], "previous": [0, 0.0]}
    for d in delivered:
        km = straight_line_km(donor_position(d, services, persist=False), receiver_position(d, services)) or 0.0
        buckets = ["all"]
        if d.done_at >= this_month:
            buckets.append("current")
        elif d.done_at >= last_month:
            buckets.append("previous")
        for b in buckets:
            totals[b][0] += 1
            totals[b][1] += km

    total_count, total_km = totals["all"]
    cur_count, cur_km = totals["current"]
    prev_count, prev_km = totals["previous"]
    progress = badge_progress(total_count, DRIVER_MILESTONES, DRIVER_BADGE_NAMES)
    target = progress["next_milestone"]
    if target is not None and total_count < target:
        pct = round(total_count / target * 100)
    else:
        pct = 100 if total_count >= DRIVER_MILESTONES[-1] else 0

    return {
        "total_deliveries_completed": total_count,
        "total_distance_travelled": total_km,
        "total_distance_travelled_formatted": format_distance(total_km),
        "current_month_deliveries": cur_count,
        "current_month_distance": cur_km,
        "current_month_distance_formatted": format_distance(cur_km),
        "deliveries_trend": _trend(cur_count, prev_count),
        "distance_trend": _trend(cur_km, prev_km),
        "impact_progress": {
            "badge_level": progress["current_badge"] or "None",
            "progress_percentage": pct,
            "current_count": total_count,
            "next_badge_target": target,
            "remaining_for_next_badge": progress["remaining"],
        },
        "badge_progress": progress,
    }
