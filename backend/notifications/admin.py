from django.contrib import admin
from .models import NotificationLog

@admin.register(NotificationLog)
class NotificationLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "event_type", "recipient", "donation_id", "channel", "status", "provider_msg_id")
    list_filter = ("event_type", "status", "channel")
    search_fields = ("recipient__email", "provider_msg_id", "donation_id")
    readonly_fields = ("created_at", "updated_at", "sent_at", "payload")
