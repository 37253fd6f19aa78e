from django.core.management.base import BaseCommand
from django.utils.crypto import get_random_string
from accounts.models import User, Role

DEMO_ADDRESS = "Galle Road, Wellawatte, Colombo 06"

class Command(BaseCommand):
    help = "Create a superuser and, optionally, one approved demo account per role."

    def add_arguments(self, parser):
        parser.add_argument("--superuser-email", default="admin@foodloop.local")
        parser.add_argument("--superuser-password", default=None)
        parser.add_argument("--with-demo-users", action="store_true")

    def handle(self, *args, **opts):
        email = opts["superuser_email"]
        password = opts["superuser_password"] or get_random_string(16)

        su, created = User.objects.get_or_create(email=email, defaults={
            "is_staff": True, "is_superuser": True,
            "role": Role.ADMIN, "approval_status": User.ApprovalStatus.COMPLETED,
        })
        if created:
            su.set_password(password)
            su.save()
            self.stdout.write(self.style.SUCCESS(f"Created superuser {email} / {password}"))
        else:
            self.stdout.write(self.style.WARNING(f"Superuser {email} already exists"))

        if not opts["with_demo_users"]:
            return

        demo = {
            Role.DONOR: {"display_name": "Demo Donor", "donor_type": User.DonorType.INDIVIDUAL},
            Role.RECEIVER: {"receiver_name": "Demo Food Bank", "receiver_type": "Food Banks"},
            Role.DRIVER: {"driver_name": "Demo Driver", "vehicle_type": "Bike", "vehicle_number": "WP-0001"},
        }
        for role, profile in demo.items():
            u, created = User.objects.get_or_create(
                email=f"{role.lower()}@foodloop.local",
                defaults={"role": role, "approval_status": User.ApprovalStatus.COMPLETED,
                          "address": DEMO_ADDRESS, **profile},
            )
            if created:
                pwd = get_random_string(12)
                u.set_password(pwd)
                u.save()
                self.stdout.write(self.style.SUCCESS(f"Created {role} {u.email} / {pwd}"))

        self.stdout.write(self.style.SUCCESS("Account bootstrap complete."))
