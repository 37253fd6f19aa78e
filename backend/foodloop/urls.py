from django.conf import settings
from django.contrib import admin
from django.http import JsonResponse
from django.urls import path, include

from accounts.decorators import require_roles
from accounts.models import Role


@require_roles(Role.DONOR, Role.RECEIVER, Role.DRIVER, Role.ADMIN, allow_superuser=True)
def whoami(request):
    u = request.user
    return JsonResponse({
        "id": u.pk,
        "email": u.email,
        "role": u.role,
        "name": u.public_name,
        "approval_status": u.approval_status,
    })


urlpatterns = [
    path(f"{settings.ADMIN_URL}/", admin.site.urls),
    path("whoami/", whoami, name="whoami"),
    path("", include("accounts.urls")),
    path("", include("donations.urls")),
    path("", include("geo.urls")),
    path("", include("ops.urls")),
]
