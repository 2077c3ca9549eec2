"""
Animal registration and lookup.

Every animal gets a code ``{S}-{YYYYMMDD}-{NNNNNNN}``: a species letter,
the birth date (``00000000`` when unknown) and a seven digit sequence
drawn from the per-date ``animal`` counter.
"""
from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.exceptions import NotFound, PermissionDenied

from core.models import Animal, AnimalGuardian
from core.services import sequences
from core.services.audit import log_action
from core.services.common import clean_text, ts
from core.services.hospitals import staff_hospital_ids

logger = logging.getLogger(__name__)
User = get_user_model()

SPECIES_CODES = {
    'DOG': 'D',
    'CAT': 'C',
    'BIRD': 'B',
    'RABBIT': 'R',
    'HAMSTER': 'H',
    'FISH': 'F',
    'REPTILE': 'P',
    'OTHER': 'X',
}

FIELD_MAP = {
    'name': 'name',
    'breed': 'breed',
    'gender': 'gender',
    'birthDate': 'birth_date',
    'weight': 'weight',
    'color': 'color',
    'microchipId': 'microchip_id',
    'isNeutered': 'is_neutered',
    'notes': 'notes',
}


def generate_code(species: str, birth_date=None) -> str:
    letter = SPECIES_CODES.get(species, 'X')
    day = birth_date.strftime('%Y%m%d') if birth_date else '00000000'
    seq = sequences.next_value(sequences.ANIMAL, day)
    return f"{letter}-{day}-{seq:07d}"


def format_animal(a: Animal, with_guardians: bool = True) -> dict:
    data = {
        'id': a.id,
        'code': a.code,
        'name': a.name,
        'species': a.species,
        'breed': a.breed,
        'gender': a.gender,
        'birthDate': a.birth_date.isoformat() if a.birth_date else None,
        'weight': a.weight,
        'color': a.color,
        'microchipId': a.microchip_id,
        'isNeutered': a.is_neutered,
        'notes': a.notes,
        'hospitalId': a.hospital_id,
        'isActive': a.is_active,
        'createdAt': ts(a.created_at),
    }
    if with_guardians:
        data['guardians'] = [
            {
                'id': g.id,
                'guardianId': g.guardian_id,
                'name': g.guardian.get_full_name() or g.guardian.username,
                'phone': g.guardian.phone,
                'isPrimary': g.is_primary,
                'relation': g.relation,
            }
            for g in a.guardians.select_related('guardian')
        ]
    return data


def get_animal(animal_id: int) -> Animal:
    a = Animal.objects.filter(id=animal_id).first()
    if not a:
        raise NotFound('동물을 찾을 수 없습니다')
    return a


def get_animal_by_code(code: str) -> Animal:
    a = Animal.objects.filter(code=code).first()
    if not a:
        raise NotFound('동물을 찾을 수 없습니다')
    return a


def can_access_animal(user, animal: Animal) -> bool:
    role = getattr(user, 'role', '')
    if role == 'super':
        return True
    if role == 'guardian':
        return animal.guardians.filter(guardian_id=user.id).exists()
    # staff of any hospital may look animals up
    return bool(staff_hospital_ids(user))


@transaction.atomic
def register_animal(user, data: dict) -> Animal:
    guardian = user
    guardian_id = data.get('guardianId')
    if guardian_id and user.role != 'guardian':
        guardian = User.objects.filter(id=guardian_id).first()
        if not guardian:
            raise NotFound('보호자를 찾을 수 없습니다')
    birth_date = data.get('birthDate')
    a = Animal.objects.create(
        code=generate_code(data['species'], birth_date),
        name=clean_text(data['name']),
        species=data['species'],
        breed=data.get('breed') or '',
        gender=data.get('gender') or 'UNKNOWN',
        birth_date=birth_date,
        weight=data.get('weight'),
        color=data.get('color') or '',
        microchip_id=data.get('microchipId') or '',
        is_neutered=bool(data.get('isNeutered')),
        notes=clean_text(data.get('notes')),
        hospital_id=getattr(user, 'hospital_id', None) if user.role != 'guardian' else None,
    )
    AnimalGuardian.objects.create(
        animal=a, guardian=guardian, is_primary=True, relation=data.get('relation') or '보호자',
    )
    log_action(user=user, action='animal_register', object_type='animal', object_id=a.id,
               detail={'code': a.code})
    logger.info('animal %s registered for guardian=%s', a.code, guardian.id)
    return a


def list_my_animals(user, *, include_inactive: bool = False) -> list[dict]:
    qs = Animal.objects.filter(guardians__guardian_id=user.id)
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return [format_animal(a) for a in qs.order_by('name', 'id').distinct()]


def _ensure_can_modify(user, animal: Animal, message: str, *, primary_only: bool = False) -> None:
    role = getattr(user, 'role', '')
    if role == 'super':
        return
    if role == 'guardian':
        links = animal.guardians.filter(guardian_id=user.id)
        if primary_only:
            links = links.filter(is_primary=True)
        if links.exists():
            return
        raise PermissionDenied(message)
    if animal.hospital_id and animal.hospital_id in staff_hospital_ids(user):
        return
    raise PermissionDenied(message)


@transaction.atomic
def update_animal(user, animal_id: int, data: dict) -> Animal:
    a = get_animal(animal_id)
    _ensure_can_modify(user, a, '동물 정보를 수정할 권한이 없습니다')
    changed = []
    for key, field in FIELD_MAP.items():
        if key not in data:
            continue
        value = data[key]
        if field in ('name', 'notes'):
            value = clean_text(value)
        elif field in ('breed', 'color', 'microchip_id', 'gender') and value is None:
            value = '' if field != 'gender' else 'UNKNOWN'
        setattr(a, field, value)
        changed.append(field)
    if changed:
        a.save(update_fields=changed + ['updated_at'])
    return a


@transaction.atomic
def deactivate_animal(user, animal_id: int) -> Animal:
    a = get_animal(animal_id)
    _ensure_can_modify(user, a, '동물을 삭제할 권한이 없습니다', primary_only=True)
    a.is_active = False
    a.save(update_fields=['is_active', 'updated_at'])
    log_action(user=user, action='animal_deactivate', object_type='animal', object_id=a.id)
    return a
