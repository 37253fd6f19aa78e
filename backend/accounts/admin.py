from django.contrib import admin
from .models import User

@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("email", "role", "approval_status", "public_name", "is_active", "date_joined")
    list_filter = ("role", "approval_status", "is_active")
    search_fields = ("email", "business_name", "receiver_name", "driver_name")
    ordering = ("-date_joined",)
    filter_horizontal = ()
    readonly_fields = ("driver_location_updated_at",)
    fieldsets = (
        (None, {"fields": ("email", "password", "role", "approval_status")}),
        ("Profile", {"fields": ("contact_no", "address", "donor_type", "display_name", "business_name",
                                "receiver_name", "receiver_type",
                                "driver_name", "vehicle_number", "vehicle_type")}),
        ("Driver location", {"fields": ("driver_latitude", "driver_longitude", "driver_location_updated_at")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Dates", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = ((None, {"classes": ("wide",), "fields": ("email", "role", "password1", "password2")}),)
