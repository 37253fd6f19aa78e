from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .models import DonationTrackingSequence


def format_tracking_id(date_key: str, seq: int) -> str:
    return f"FL-{date_key}-{seq:02d}"


def next_tracking_id(now=None) -> str:
    """
    Next FL-YYYYMMDD-NN for the local calendar day.

    The per-day row is created first without any lock held, so two first
    creations of the day race on the primary key (get_or_create settles
    that) instead of on gap locks. The increment then locks only that row.
    """
    date_key = timezone.localtime(now or timezone.now()).strftime("%Y%m%d")
    DonationTrackingSequence.objects.get_or_create(date_key=date_key)
    with transaction.atomic():
        DonationTrackingSequence.objects.filter(pk=date_key).update(seq=F("seq") + 1)
        seq = DonationTrackingSequence.objects.values_list("seq", flat=True).get(pk=date_key)
    return format_tracking_id(date_key, seq)
