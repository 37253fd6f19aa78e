"""Small helpers shared by the JSON views."""
import json
import logging
from functools import wraps

from django.http import JsonResponse

log = logging.getLogger(__name__)


def read_json(request):
    """Parsed JSON object from the request body, {} for an empty body, None if malformed."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def field_errors(form):
    """Flatten Django form errors into [{"field": ..., "message": ...}]."""
    out = []
    for field, errors in form.errors.get_json_data().items():
        for e in errors:
            out.append({"field": field, "message": e["message"]})
    return out


def bad_json():
    return JsonResponse({"success": False, "message": "Malformed JSON body"}, status=400)


def json_view(failure_message):
    """Unexpected exceptions become a logged, generic 500 JSON body."""
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            try:
                return view_func(request, *args, **kwargs)
            except Exception:
                log.exception("%s %s failed", request.method, request.path)
                return JsonResponse({"success": False, "message": failure_message}, status=500)
        return _wrapped
    return decorator
