from django.contrib import admin
from .models import Donation, DonationTrackingSequence, ImpactReceipt

@admin.register(Donation)
class DonationAdmin(admin.ModelAdmin):
    list_display = ("tracking_id", "item_name", "donor", "status", "assigned_receiver", "assigned_driver",
                    "expiry_date", "created_at")
    list_filter = ("status", "food_category", "storage_recommendation")
    search_fields = ("tracking_id", "item_name", "donor__email", "donor_address")
    raw_id_fields = ("donor", "assigned_receiver", "assigned_driver")
    readonly_fields = ("tracking_id", "created_at", "updated_at", "actual_pickup_date", "delivered_at")

@admin.register(ImpactReceipt)
class ImpactReceiptAdmin(admin.ModelAdmin):
    list_display = ("donation", "receiver", "people_fed", "weight_per_serving", "methane_saved", "created_at")
    search_fields = ("donation__tracking_id", "receiver__email")

    def has_change_permission(self, request, obj=None):
        # receipts are immutable once filed
        return False

@admin.register(DonationTrackingSequence)
class DonationTrackingSequenceAdmin(admin.ModelAdmin):
    list_display = ("date_key", "seq")
    ordering = ("-date_key",)
