from django.urls import path

from . import views

app_name = "geo"

urlpatterns = [
    path("api/map/route", views.route, name="route"),
]
