"""
Hospital and staff management.

A hospital is created in the PENDING state by its future owner, who is
registered as OWNER staff and promoted to ``hospital_admin``.  Only a
super admin can move a hospital to another status.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.exceptions import NotFound, PermissionDenied

from core.exceptions import Conflict
from core.models import Hospital, HospitalStaff
from core.services.audit import log_action
from core.services.common import clean_text, paginate, ts

logger = logging.getLogger(__name__)
User = get_user_model()

HOSPITAL_FIELDS = ('name', 'license_number', 'phone', 'email', 'address', 'description')
MANAGING_POSITIONS = (HospitalStaff.POSITION_OWNER, HospitalStaff.POSITION_MANAGER)

# role granted to a staff member when joining, by position
POSITION_ROLES = {
    HospitalStaff.POSITION_OWNER: 'hospital_admin',
    HospitalStaff.POSITION_MANAGER: 'hospital_admin',
    HospitalStaff.POSITION_VET: 'vet',
    HospitalStaff.POSITION_STAFF: 'staff',
}


def format_staff(s: HospitalStaff) -> dict:
    return {
        'id': s.id,
        'userId': s.user_id,
        'name': s.user.get_full_name() or s.user.username,
        'position': s.position,
        'isActive': s.is_active,
        'joinedAt': ts(s.joined_at),
    }


def format_hospital(h: Hospital, with_staff: bool = False) -> dict:
    data = {
        'id': h.id,
        'name': h.name,
        'businessNumber': h.business_number,
        'licenseNumber': h.license_number,
        'phone': h.phone,
        'email': h.email,
        'address': h.address,
        'description': h.description,
        'status': h.status,
        'createdAt': ts(h.created_at),
    }
    if with_staff:
        data['staff'] = [format_staff(s) for s in h.staff.filter(is_active=True).select_related('user')]
    return data


def get_hospital(hospital_id: int) -> Hospital:
    h = Hospital.objects.filter(id=hospital_id).first()
    if not h:
        raise NotFound('병원을 찾을 수 없습니다')
    return h


def _position_of(hospital: Hospital, user) -> Optional[str]:
    s = HospitalStaff.objects.filter(hospital=hospital, user_id=user.id, is_active=True).first()
    return s.position if s else None


def _ensure_manager(hospital: Hospital, user, message: str) -> None:
    if getattr(user, 'role', '') == 'super':
        return
    if _position_of(hospital, user) not in MANAGING_POSITIONS:
        raise PermissionDenied(message)


@transaction.atomic
def create_hospital(owner, data: dict) -> Hospital:
    if Hospital.objects.filter(business_number=data['businessNumber']).exists():
        raise Conflict('이미 등록된 사업자등록번호입니다')
    h = Hospital.objects.create(
        name=clean_text(data['name']),
        business_number=data['businessNumber'],
        license_number=data.get('licenseNumber') or '',
        phone=data.get('phone') or '',
        email=data.get('email') or '',
        address=clean_text(data.get('address')),
        description=clean_text(data.get('description')),
        status=Hospital.STATUS_PENDING,
    )
    HospitalStaff.objects.create(hospital=h, user=owner, position=HospitalStaff.POSITION_OWNER)
    if owner.role != 'super':
        owner.role = 'hospital_admin'
        owner.hospital = h
        owner.save(update_fields=['role', 'hospital'])
    log_action(user=owner, action='hospital_create', object_type='hospital', object_id=h.id,
               detail={'businessNumber': h.business_number})
    logger.info('hospital %s created by user=%s', h.id, owner.id)
    return h


def list_hospitals(*, status: Optional[str] = None, q: Optional[str] = None, page: int = 1, limit: int = 20):
    qs = Hospital.objects.filter(status=status or Hospital.STATUS_ACTIVE)
    if q:
        qs = qs.filter(name__icontains=q)
    rows, total = paginate(qs.order_by('name', 'id'), page, limit)
    return [format_hospital(h) for h in rows], total


@transaction.atomic
def update_hospital(user, hospital_id: int, data: dict) -> Hospital:
    h = get_hospital(hospital_id)
    _ensure_manager(h, user, '병원 정보를 수정할 권한이 없습니다')
    mapping = {
        'name': 'name', 'licenseNumber': 'license_number', 'phone': 'phone',
        'email': 'email', 'address': 'address', 'description': 'description',
    }
    changed = []
    for key, field in mapping.items():
        if key in data:
            value = data[key] or ''
            setattr(h, field, clean_text(value) if field in ('name', 'address', 'description') else value)
            changed.append(field)
    if 'status' in data:
        if user.role != 'super':
            raise PermissionDenied('병원 상태는 관리자만 변경할 수 있습니다')
        h.status = data['status']
        changed.append('status')
    if changed:
        h.save(update_fields=changed + ['updated_at'])
        log_action(user=user, action='hospital_update', object_type='hospital', object_id=h.id,
                   detail={'fields': changed})
    return h


@transaction.atomic
def deactivate_hospital(user, hospital_id: int) -> Hospital:
    h = get_hospital(hospital_id)
    if user.role != 'super' and _position_of(h, user) != HospitalStaff.POSITION_OWNER:
        raise PermissionDenied('병원을 삭제할 권한이 없습니다')
    h.status = Hospital.STATUS_INACTIVE
    h.save(update_fields=['status', 'updated_at'])
    log_action(user=user, action='hospital_deactivate', object_type='hospital', object_id=h.id)
    logger.info('hospital %s deactivated by user=%s', h.id, user.id)
    return h


@transaction.atomic
def add_staff(user, hospital_id: int, *, user_id: int, position: str) -> HospitalStaff:
    h = get_hospital(hospital_id)
    _ensure_manager(h, user, '직원을 추가할 권한이 없습니다')
    member = User.objects.filter(id=user_id).first()
    if not member:
        raise NotFound('사용자를 찾을 수 없습니다')
    if HospitalStaff.objects.filter(hospital=h, user=member).exists():
        raise Conflict('이미 등록된 직원입니다')
    if position == HospitalStaff.POSITION_OWNER:
        raise PermissionDenied('소유자는 추가할 수 없습니다')
    s = HospitalStaff.objects.create(hospital=h, user=member, position=position)
    if member.role != 'super':
        member.role = POSITION_ROLES[position]
        member.hospital = h
        member.save(update_fields=['role', 'hospital'])
    log_action(user=user, action='staff_add', object_type='hospital', object_id=h.id,
               detail={'userId': member.id, 'position': position})
    return s


def _get_staff(hospital: Hospital, staff_id: int) -> HospitalStaff:
    s = HospitalStaff.objects.select_related('user').filter(id=staff_id, hospital=hospital).first()
    if not s:
        raise NotFound('직원을 찾을 수 없습니다')
    return s


def _release(member, hospital: Hospital) -> None:
    """Unbind a user from a hospital they no longer actively work at."""
    if member.role == 'super':
        return
    remaining = (HospitalStaff.objects.filter(user_id=member.id, is_active=True)
                 .exclude(hospital=hospital).select_related('hospital').first())
    changed = []
    if member.hospital_id == hospital.id:
        member.hospital = remaining.hospital if remaining else None
        changed.append('hospital')
    if remaining is None:
        member.role = 'guardian'
        changed.append('role')
    elif 'hospital' in changed:
        member.role = POSITION_ROLES[remaining.position]
        changed.append('role')
    if changed:
        member.save(update_fields=changed)
        logger.info('user %s released from hospital %s (role=%s)', member.id, hospital.id, member.role)


@transaction.atomic
def update_staff(user, hospital_id: int, staff_id: int, data: dict) -> HospitalStaff:
    h = get_hospital(hospital_id)
    _ensure_manager(h, user, '직원 정보를 수정할 권한이 없습니다')
    s = _get_staff(h, staff_id)
    position = data.get('position')
    if s.position == HospitalStaff.POSITION_OWNER and position and position != HospitalStaff.POSITION_OWNER:
        raise PermissionDenied('소유자 역할은 변경할 수 없습니다')
    if position == HospitalStaff.POSITION_OWNER and s.position != HospitalStaff.POSITION_OWNER:
        raise PermissionDenied('소유자 역할은 변경할 수 없습니다')
    if s.position == HospitalStaff.POSITION_OWNER and data.get('isActive') is False:
        raise PermissionDenied('소유자는 삭제할 수 없습니다')
    if position:
        s.position = position
    if 'isActive' in data:
        s.is_active = bool(data['isActive'])
    s.save(update_fields=['position', 'is_active'])
    member = s.user
    if not s.is_active:
        _release(member, h)
    elif member.role != 'super' and (position or member.hospital_id in (None, h.id)):
        member.role = POSITION_ROLES[s.position]
        member.hospital = h
        member.save(update_fields=['role', 'hospital'])
    return s


@transaction.atomic
def remove_staff(user, hospital_id: int, staff_id: int) -> HospitalStaff:
    h = get_hospital(hospital_id)
    _ensure_manager(h, user, '직원을 삭제할 권한이 없습니다')
    s = _get_staff(h, staff_id)
    if s.position == HospitalStaff.POSITION_OWNER:
        raise PermissionDenied('소유자는 삭제할 수 없습니다')
    s.is_active = False
    s.save(update_fields=['is_active'])
    _release(s.user, h)
    log_action(user=user, action='staff_remove', object_type='hospital', object_id=h.id,
               detail={'staffId': s.id})
    return s


def staff_hospital_ids(user) -> list[int]:
    """Hospitals the user actively works at (bound hospital first)."""
    ids = list(HospitalStaff.objects.filter(user_id=user.id, is_active=True).values_list('hospital_id', flat=True))
    bound = getattr(user, 'hospital_id', None)
    if bound in ids:
        ids.remove(bound)
        ids.insert(0, bound)
    return ids
