import json, time, logging, os
from django.utils.deprecation import MiddlewareMixin
from django.utils.timezone import now

log = logging.getLogger("request")
REDACT = os.getenv("REDACT_PII_IN_LOGS", "1") == "1"
LOG_REQUESTS = os.getenv("LOG_REQUESTS", "1") == "1"

REDACT_KEYS = {"password", "email", "donor_email", "phone", "address", "donor_address", "receiver_address"}


def _scrub(d: dict):
    if not REDACT or not d:
        return d
    return {k: ("***redacted***" if k.lower() in REDACT_KEYS else v) for k, v in d.items()}


def _body_keys(request):
    if request.content_type == "application/json":
        try:
            data = json.loads(request.body or b"{}")
        except ValueError:
            return []
        return sorted(_scrub(data).keys()) if isinstance(data, dict) else []
    return sorted(_scrub(dict(request.POST.items())).keys())


class RequestLogMiddleware(MiddlewareMixin):
    """One JSON line per request; bodies are reduced to their key names."""

    def process_request(self, request):
        if not LOG_REQUESTS:
            return
        request._ts = time.time()
        if request.method in ("POST", "PUT", "PATCH"):
            # read before the view so the body is still available afterwards
            request._body_keys = _body_keys(request)

    def process_response(self, request, response):
        if not LOG_REQUESTS:
            return response
        try:
            dur = time.time() - getattr(request, "_ts", time.time())
            u = getattr(request, "user", None)
            payload = {
                "ts": now().isoformat(),
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "duration_ms": int(dur * 1000),
                "user_id": (u.pk if u and u.is_authenticated else None),
                "role": (getattr(u, "role", None) if u and u.is_authenticated else None),
                "ip": request.META.get("REMOTE_ADDR"),
                "ua": request.META.get("HTTP_USER_AGENT", ""),
            }
            if hasattr(request, "_body_keys"):
                payload["body_keys"] = request._body_keys
            log.info(json.dumps(payload))
        except Exception:
            log.debug("request log line failed", exc_info=True)
        return response
