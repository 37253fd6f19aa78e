from django.conf import settings
from django.db import connection
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from .models import Heartbeat


@require_GET
def healthz(request):
    db_ok = True
    try:
        connection.ensure_connection()
    except Exception:
        db_ok = False
    beat = Heartbeat.objects.filter(key="beat").first() if db_ok else None
    beat_ok = bool(beat and beat.is_fresh(settings.HEARTBEAT_MAX_AGE_SECONDS))
    return JsonResponse({"ok": db_ok, "db_ok": db_ok, "celery_beat_ok": beat_ok},
                        status=200 if db_ok else 503)
