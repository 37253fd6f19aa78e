from datetime import timedelta

import pytest
from django.core.management import call_command
from django.utils import timezone

from accounts.models import Role
from audit.models import AuditLog
from donations import sweeps
from donations.models import Donation
from notifications.models import EventType, NotificationLog

from .conftest import make_donation, make_user

S = Donation.Status


@pytest.mark.django_db
def test_expired_donations_are_deleted_except_delivered(donor, receiver, driver, django_capture_on_commit_callbacks):
    now = timezone.now()
    past = now - timedelta(minutes=1)
    stale = make_donation(donor, expiry_date=past)
    stale_claimed = make_donation(donor, expiry_date=past, status=S.ASSIGNED, assigned_receiver=receiver)
    delivered = make_donation(donor, expiry_date=past, status=S.DELIVERED,
                              assigned_receiver=receiver, assigned_driver=driver)
    fresh = make_donation(donor)

    with django_capture_on_commit_callbacks(execute=True):
        out = sweeps.delete_expired_donations(now=now)

    assert out == {"deleted": 2, "errors": 0}
    assert set(Donation.objects.values_list("pk", flat=True)) == {delivered.pk, fresh.pk}
    assert AuditLog.objects.filter(action="DONATION_EXPIRED_DELETED").count() == 2
    notes = NotificationLog.objects.filter(event_type=EventType.DONATION_DELETED)
    assert sorted(notes.values_list("donation_id", flat=True)) == sorted([stale.pk, stale_claimed.pk])
    assert {n.recipient_id for n in notes} == {donor.pk}

    assert sweeps.delete_expired_donations(now=now) == {"deleted": 0, "errors": 0}


@pytest.mark.django_db
def test_expiry_warnings_group_by_donor(donor, receiver, driver, django_capture_on_commit_callbacks):
    now = timezone.now()
    other = make_user(Role.DONOR, email="other-donor@test", address="Kandy Town")
    a = make_donation(donor, expiry_date=now + timedelta(minutes=70))
    b = make_donation(donor, expiry_date=now + timedelta(minutes=100))
    make_donation(other, expiry_date=now + timedelta(minutes=90))
    make_donation(donor, expiry_date=now + timedelta(minutes=30))     # too soon
    make_donation(donor, expiry_date=now + timedelta(hours=5))        # too late
    make_donation(donor, expiry_date=now + timedelta(minutes=80), status=S.DELIVERED,
                  assigned_receiver=receiver, assigned_driver=driver)

    with django_capture_on_commit_callbacks(execute=True):
        out = sweeps.send_expiry_warnings(now=now)

    assert out == {"sent": 2, "errors": 0}
    mine = NotificationLog.objects.get(event_type=EventType.DONATION_EXPIRING, recipient=donor)
    assert mine.payload["expiring_count"] == 2
    assert mine.payload["tracking_ids"] == [a.tracking_id, b.tracking_id]
    assert NotificationLog.objects.filter(event_type=EventType.DONATION_EXPIRING, recipient=other).count() == 1


@pytest.mark.django_db
def test_sweep_command_runs_both(donor, capsys):
    make_donation(donor, expiry_date=timezone.now() - timedelta(hours=1))
    call_command("sweep_donations")
    assert Donation.objects.count() == 0
    call_command("sweep_donations", "--only", "warnings")
    assert "Warnings: 0 sent" in capsys.readouterr().out
