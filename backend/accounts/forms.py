from django import forms

from geo.region import ServiceRegion


class DriverLocationForm(forms.Form):
    latitude = forms.FloatField(error_messages={"required": "Latitude is required",
                                                "invalid": "Latitude must be a valid number"})
    longitude = forms.FloatField(error_messages={"required": "Longitude is required",
                                                 "invalid": "Longitude must be a valid number"})

    def clean(self):
        cleaned = super().clean()
        lat, lng = cleaned.get("latitude"), cleaned.get("longitude")
        if lat is None or lng is None:
            return cleaned
        region = ServiceRegion.from_settings()
        if region.point(lat, lng) is None:
            self.add_error("latitude", f"Latitude must be between {region.min_lat:g} and {region.max_lat:g}")
            self.add_error("longitude", f"Longitude must be between {region.min_lng:g} and {region.max_lng:g}")
        return cleaned
