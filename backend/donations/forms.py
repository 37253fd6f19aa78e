from decimal import Decimal, ROUND_HALF_UP

from django import forms

from geo.region import ServiceRegion
from .models import Donation

# keep derived impact figures inside their decimal columns
MAX_QUANTITY = 1_000_000
MAX_PEOPLE_FED = 1_000_000
MAX_WEIGHT_PER_SERVING = Decimal("1000")


def _choice_messages(label):
    return {"required": f"{label} is required", "invalid_choice": f"Invalid {label.lower()}"}


class DonationForm(forms.Form):
    """Create payload. The edit form reuses every field as optional."""
    food_category = forms.ChoiceField(choices=Donation.FoodCategory.choices,
                                      error_messages=_choice_messages("Food category"))
    item_name = forms.CharField(max_length=255, error_messages={"required": "Item name is required"})
    quantity = forms.IntegerField(min_value=1, max_value=MAX_QUANTITY, error_messages={
        "required": "Quantity is required",
        "invalid": "Quantity must be a positive number",
        "min_value": "Quantity must be a positive number",
        "max_value": f"Quantity must be at most {MAX_QUANTITY}",
    })
    storage_recommendation = forms.ChoiceField(choices=Donation.Storage.choices,
                                               error_messages=_choice_messages("Storage recommendation"))
    image_url = forms.CharField(max_length=500, error_messages={"required": "Image is required"})
    preferred_pickup_date = forms.DateField(error_messages={"required": "Pickup date is required",
                                                            "invalid": "Invalid pickup date format"})
    preferred_pickup_time_from = forms.CharField(max_length=16)
    preferred_pickup_time_to = forms.CharField(max_length=16)

    product_type = forms.ChoiceField(choices=Donation.ProductType.choices, required=False,
                                     error_messages={"invalid_choice": "Invalid product type"})
    expiry_date_from_package = forms.DateTimeField(required=False)
    user_provided_expiry_date = forms.DateTimeField(required=False,
                                                    error_messages={"invalid": "Invalid expiry date format"})
    donor_latitude = forms.FloatField(required=False)
    donor_longitude = forms.FloatField(required=False)

    ai_confidence = forms.FloatField(required=False, min_value=0, max_value=1)
    ai_quality_score = forms.FloatField(required=False, min_value=0, max_value=1)
    ai_freshness = forms.ChoiceField(choices=Donation.Freshness.choices, required=False)
    ai_detected_items = forms.JSONField(required=False)

    def clean_ai_detected_items(self):
        items = self.cleaned_data.get("ai_detected_items")
        if items in (None, ""):
            return []
        if not isinstance(items, list):
            raise forms.ValidationError("Detected items must be a list")
        return [str(i) for i in items]

    def donor_point(self):
        """Donor-confirmed coordinates if both are present and inside the service region."""
        return ServiceRegion.from_settings().point(self.cleaned_data.get("donor_latitude"),
                                                   self.cleaned_data.get("donor_longitude"))


class DonationEditForm(DonationForm):
    # fields a donor may change after creation; everything else is fixed
    EDITABLE = (
        "food_category", "item_name", "quantity", "storage_recommendation", "image_url",
        "preferred_pickup_date", "preferred_pickup_time_from", "preferred_pickup_time_to",
        "user_provided_expiry_date", "donor_latitude", "donor_longitude",
    )

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name in list(self.fields):
            if name not in self.EDITABLE:
                del self.fields[name]
            else:
                self.fields[name].required = False

    def supplied(self):
        """Cleaned values for the keys the client actually sent (null or empty means unchanged)."""
        return {k: self.cleaned_data[k] for k in self.EDITABLE
                if self.data.get(k) not in (None, "") and k in self.cleaned_data}


class ClaimForm(forms.Form):
    receiver_address = forms.CharField(max_length=500, required=False)

    def clean(self):
        cleaned = super().clean()
        # bad or out-of-region coordinates are dropped, not rejected
        cleaned["receiver_point"] = ServiceRegion.from_settings().point(
            self.data.get("receiver_latitude"), self.data.get("receiver_longitude"))
        return cleaned


class ImpactReceiptForm(forms.Form):
    drop_location = forms.CharField(max_length=500, error_messages={"required": "Drop location is required"})
    people_fed = forms.DecimalField(min_value=1, max_value=MAX_PEOPLE_FED, error_messages={
        "required": "People fed is required",
        "invalid": "People fed must be a number greater than 0",
        "min_value": "People fed must be a number greater than 0",
        "max_value": f"People fed must be at most {MAX_PEOPLE_FED}",
    })
    weight_per_serving = forms.DecimalField(
        min_value=Decimal("0.001"), max_value=MAX_WEIGHT_PER_SERVING,
        error_messages={
            "required": "Weight per serving is required",
            "invalid": "Weight per serving must be a number greater than or equal to 0.001 kg",
            "min_value": "Weight per serving must be a number greater than or equal to 0.001 kg",
            "max_value": f"Weight per serving must be at most {MAX_WEIGHT_PER_SERVING} kg",
        },
    )

    def clean_people_fed(self):
        return int(self.cleaned_data["people_fed"].quantize(Decimal("1"), rounding=ROUND_HALF_UP))
