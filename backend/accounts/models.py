from django.db import models
from django.contrib.auth.models import AbstractUser
from .managers import UserManager

class Role(models.TextChoices):
    DONOR = "DONOR", "Donor"
    RECEIVER = "RECEIVER", "Receiver"
    DRIVER = "DRIVER", "Driver"
    ADMIN = "ADMIN", "Admin"

class User(AbstractUser):
    """
    Email-first auth; username removed. One role per account.
    Only accounts whose approval status is COMPLETED may act on donations.
    """
    class ApprovalStatus(models.TextChoices):
        PENDING = "PENDING", "Pending approval"
        COMPLETED = "COMPLETED", "Approved"
        REJECTED = "REJECTED", "Rejected"
        INACTIVE = "INACTIVE", "Inactive"

    class DonorType(models.TextChoices):
        INDIVIDUAL = "INDIVIDUAL", "Individual"
        BUSINESS = "BUSINESS", "Business"

    username = None
    email = models.EmailField(unique=True)

    role = models.CharField(max_length=16, choices=Role.choices, db_index=True)
    approval_status = models.CharField(max_length=16, choices=ApprovalStatus.choices,
                                       default=ApprovalStatus.PENDING, db_index=True)
    contact_no = models.CharField(max_length=32, blank=True)
    address = models.TextField(blank=True)

    # donor profile
    donor_type = models.CharField(max_length=16, choices=DonorType.choices, blank=True)
    display_name = models.CharField(max_length=150, blank=True)
    business_name = models.CharField(max_length=255, blank=True)

    # receiver profile
    receiver_name = models.CharField(max_length=255, blank=True)
    receiver_type = models.CharField(max_length=64, blank=True)

    # driver profile; location is pushed by the driver app and read by pickup matching
    driver_name = models.CharField(max_length=255, blank=True)
    vehicle_number = models.CharField(max_length=32, blank=True)
    vehicle_type = models.CharField(max_length=32, blank=True)
    driver_latitude = models.FloatField(null=True, blank=True)
    driver_longitude = models.FloatField(null=True, blank=True)
    driver_location_updated_at = models.DateTimeField(null=True, blank=True)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        indexes = [models.Index(fields=["role", "approval_status"], name="accounts_us_role_status_idx")]

    def __str__(self):
        return self.email

    @property
    def is_approved(self) -> bool:
        return self.approval_status == self.ApprovalStatus.COMPLETED

    @property
    def public_name(self) -> str:
        if self.role == Role.DONOR:
            if self.donor_type == self.DonorType.BUSINESS and self.business_name:
                return self.business_name
            return self.display_name or self.email or "Anonymous"
        if self.role == Role.RECEIVER:
            return self.receiver_name or self.email or "Receiver"
        if self.role == Role.DRIVER:
            return self.driver_name or "Driver"
        return self.display_name or self.email
