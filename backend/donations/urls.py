from django.urls import path

from . import views

app_name = "donations"

urlpatterns = [
    path("api/donations/", views.create_donation, name="create"),
    path("api/donations/available", views.available, name="available"),
    path("api/donations/my-claims", views.my_claims, name="my_claims"),
    path("api/donations/my-donations", views.my_donations, name="my_donations"),
    path("api/donations/available-pickups", views.available_pickups, name="available_pickups"),
    path("api/donations/active-deliveries", views.active_deliveries, name="active_deliveries"),
    path("api/donations/driver-completed", views.driver_completed, name="driver_completed"),
    path("api/donations/donor-statistics", views.donor_statistics, name="donor_statistics"),
    path("api/donations/driver-statistics", views.driver_statistics, name="driver_statistics"),
    path("api/donations/<int:pk>", views.donation_detail, name="detail"),
    path("api/donations/<int:pk>/claim", views.claim, name="claim"),
    path("api/donations/<int:pk>/accept-order", views.accept_order, name="accept_order"),
    path("api/donations/<int:pk>/confirm-pickup", views.confirm_pickup, name="confirm_pickup"),
    path("api/donations/<int:pk>/confirm-delivery", views.confirm_delivery, name="confirm_delivery"),
    path("api/donations/<int:pk>/tracking", views.tracking, name="tracking"),
    path("api/donations/<int:pk>/receipt-details", views.receipt_details, name="receipt_details"),
    path("api/donations/<int:pk>/create-receipt", views.create_receipt, name="create_receipt"),
    path("api/donations/<int:pk>/donor-receipt-view", views.donor_receipt_view, name="donor_receipt_view"),
]
