import logging
from celery import shared_task
from django.utils import timezone
from .models import NotificationLog

log = logging.getLogger(__name__)

@shared_task(bind=True, max_retries=5, default_retry_delay=30)
def deliver_notification(self, notification_id: int):
    from .services import _provider
    try:
        msg = NotificationLog.objects.select_related("recipient").get(id=notification_id)
    except NotificationLog.DoesNotExist:
        return "gone"

    if msg.status == NotificationLog.Status.SENT:
        return "already sent"

    try:
        prov = _provider()
        pid, pstatus = prov.send(msg.recipient, msg.event_type, msg.payload or {})
    except Exception as e:
        log.warning("deliver_notification %s error: %s", notification_id, e)
        msg.error = str(e)[:255]
        if self.request.retries >= self.max_retries:
            msg.status = NotificationLog.Status.FAILED
            msg.save(update_fields=["error", "status", "updated_at"])
            return "failed"
        msg.save(update_fields=["error", "updated_at"])
        raise self.retry(exc=e, countdown=min(300, (self.request.retries + 1) * 30))

    msg.provider_msg_id = pid or ""
    msg.status = NotificationLog.Status.SENT if str(pstatus).lower() == "sent" else NotificationLog.Status.FAILED
    msg.sent_at = timezone.now()
    msg.save(update_fields=["provider_msg_id", "status", "sent_at", "updated_at"])
    return "ok"
