# core/management/commands/ensure_test_users.py
from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password

from core.models import Hospital, HospitalStaff, User

TEST_HOSPITAL = {"name": "테스트 동물병원", "business_number": "000-00-00000"}

# username, role, staff position (None = not hospital staff)
TEST_SET = [
    ("super", "super", None),
    ("admin1", "hospital_admin", HospitalStaff.POSITION_OWNER),
    ("vet1", "vet", HospitalStaff.POSITION_VET),
    ("staff1", "staff", HospitalStaff.POSITION_STAFF),
    ("guardian1", "guardian", None),
]


class Command(BaseCommand):
    help = "Ensure test users exist and password=123456 (idempotent)."

    def handle(self, *args, **opts):
        hospital, _ = Hospital.objects.get_or_create(
            business_number=TEST_HOSPITAL["business_number"],
            defaults={"name": TEST_HOSPITAL["name"], "status": Hospital.STATUS_ACTIVE},
        )
        for username, role, position in TEST_SET:
            bound = hospital if position else None
            u, created = User.objects.get_or_create(
                username=username,
                defaults={"role": role, "hospital": bound, "password": make_password("123456"), "is_active": True},
            )
            if not created:
                # reset password, active flag, role and hospital
                u.password = make_password("123456")
                u.role = role
                u.hospital = bound
                u.is_active = True
                u.save(update_fields=["password", "role", "hospital", "is_active"])
            if position:
                HospitalStaff.objects.update_or_create(
                    hospital=hospital, user=u, defaults={"position": position, "is_active": True},
                )
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
