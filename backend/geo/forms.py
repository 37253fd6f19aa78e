from django import forms

from .region import GeoPoint


class RouteQueryForm(forms.Form):
    start_lat = forms.FloatField(min_value=-90, max_value=90)
    start_lng = forms.FloatField(min_value=-180, max_value=180)
    end_lat = forms.FloatField(min_value=-90, max_value=90)
    end_lng = forms.FloatField(min_value=-180, max_value=180)

    def endpoints(self):
        cd = self.cleaned_data
        return GeoPoint(cd["start_lat"], cd["start_lng"]), GeoPoint(cd["end_lat"], cd["end_lng"])
