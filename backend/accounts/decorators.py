from functools import wraps
from django.http import JsonResponse

def _deny(message, status=403):
    return JsonResponse({"success": False, "message": message}, status=status)

def require_roles(*roles, allow_superuser=False):
    """
    Usage:
    @require_roles(Role.DRIVER)
    def view(request): ...

    Rejects anonymous users, accounts that are not approved, and other roles.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            u = request.user
            if not u.is_authenticated:
                return _deny("Auth required.", status=401)
            if allow_superuser and u.is_superuser:
                return view_func(request, *args, **kwargs)
            if not u.is_approved:
                return _deny("Account is not approved.")
            if u.role in roles:
                return view_func(request, *args, **kwargs)
            return _deny("Insufficient role.")
        return _wrapped
    return decorator
