from celery import shared_task

from . import sweeps


@shared_task
def delete_expired_donations():
    """Every 30 min: drop expired, undelivered donations."""
    return sweeps.delete_expired_donations()


@shared_task
def send_expiry_warnings():
    """Hourly: warn donors about donations expiring in the next 1-2 hours."""
    return sweeps.send_expiry_warnings()
