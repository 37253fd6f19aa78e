from django.urls import path

from . import views

app_name = "accounts"

urlpatterns = [
    path("api/users/me/location", views.update_my_location, name="update_my_location"),
]
