"""
Custom permission classes for role and hospital based access control.
"""
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission

from core.models import HospitalStaff

STAFF_ROLES = {"hospital_admin", "vet", "staff"}
ADMIN_ROLES = {"hospital_admin", "super"}


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsHospitalStaff(BasePermission):
    """Hospital staff (any staff role) or super admin."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in STAFF_ROLES | {"super"}


class IsHospitalAdmin(BasePermission):
    """Allow access only to hospital administrators and super admin."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in ADMIN_ROLES


def ensure_hospital_scope(user, hospital_id) -> int:
    """Return the hospital id the user may act on, or raise PermissionDenied.

    Super admins may name any hospital; staff are pinned to the hospital
    they are bound to and may not reach into another one.
    """
    if getattr(user, "role", None) == "super":
        if not hospital_id:
            raise PermissionDenied("병원을 지정해야 합니다")
        return int(hospital_id)
    own = getattr(user, "hospital_id", None)
    if not own:
        raise PermissionDenied("소속 병원이 없습니다")
    if hospital_id and int(hospital_id) != own:
        raise PermissionDenied("다른 병원의 데이터에 접근할 수 없습니다")
    if not HospitalStaff.objects.filter(hospital_id=own, user_id=user.id, is_active=True).exists():
        raise PermissionDenied("소속 병원이 없습니다")
    return own
