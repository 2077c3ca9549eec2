import re

import pytest

from core.models import AuditEvent, HospitalStaff, User

pytestmark = pytest.mark.django_db

HOSPITAL = {'name': '새봄동물병원', 'businessNumber': '222-33-44444', 'phone': '02-123-4567', 'address': '서울시 마포구'}


def test_create_hospital_makes_owner(client_for, guardian):
    r = client_for(guardian).post('/api/hospitals', HOSPITAL, format='json')
    assert r.status_code == 201
    assert r.data['data']['status'] == 'PENDING'
    assert r.data['data']['staff'][0]['position'] == 'OWNER'

    guardian.refresh_from_db()
    assert guardian.role == 'hospital_admin'
    assert guardian.hospital_id == r.data['data']['id']
    assert AuditEvent.objects.filter(action='hospital_create').exists()


def test_duplicate_business_number_conflicts(client_for, guardian, hospital):
    r = client_for(guardian).post('/api/hospitals', dict(HOSPITAL, businessNumber=hospital.business_number), format='json')
    assert r.status_code == 409
    assert r.data['error']['message'] == '이미 등록된 사업자등록번호입니다'


def test_malformed_business_number(client_for, guardian):
    r = client_for(guardian).post('/api/hospitals', dict(HOSPITAL, businessNumber='12-34'), format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False


def test_list_shows_active_only(client_for, guardian, hospital):
    client = client_for(guardian)
    client.post('/api/hospitals', HOSPITAL, format='json')
    r = client.get('/api/hospitals')
    assert [h['id'] for h in r.data['data']] == [hospital.id]


def test_only_super_changes_status(client_for, admin_user, super_user, hospital):
    r = client_for(admin_user).put(f'/api/hospitals/{hospital.id}', {'status': 'SUSPENDED'}, format='json')
    assert r.status_code == 403
    r = client_for(super_user).put(f'/api/hospitals/{hospital.id}', {'status': 'SUSPENDED'}, format='json')
    assert r.data['data']['status'] == 'SUSPENDED'


def test_staff_add_and_remove(client_for, admin_user, hospital, guardian):
    client = client_for(admin_user)
    r = client.post(f'/api/hospitals/{hospital.id}/staff', {'userId': guardian.id, 'position': 'VET'}, format='json')
    assert r.status_code == 201
    guardian.refresh_from_db()
    assert (guardian.role, guardian.hospital_id) == ('vet', hospital.id)

    again = client.post(f'/api/hospitals/{hospital.id}/staff', {'userId': guardian.id}, format='json')
    assert again.status_code == 409

    r = client.delete(f"/api/hospitals/{hospital.id}/staff/{r.data['data']['id']}")
    assert r.status_code == 200
    assert not HospitalStaff.objects.get(hospital=hospital, user=guardian).is_active


def test_owner_cannot_be_removed(client_for, admin_user, hospital):
    owner = HospitalStaff.objects.get(hospital=hospital, user=admin_user)
    r = client_for(admin_user).delete(f'/api/hospitals/{hospital.id}/staff/{owner.id}')
    assert r.status_code == 403
    assert r.data['error']['message'] == '소유자는 삭제할 수 없습니다'


def test_plain_staff_cannot_manage_staff(client_for, staff_user, hospital, guardian):
    r = client_for(staff_user).post(f'/api/hospitals/{hospital.id}/staff', {'userId': guardian.id}, format='json')
    assert r.status_code == 403


def test_guardian_registers_animal(client_for, guardian):
    r = client_for(guardian).post('/api/animals', {
        'name': '보리', 'species': 'DOG', 'birthDate': '2021-05-01', 'breed': '말티즈',
    }, format='json')
    assert r.status_code == 201
    data = r.data['data']
    assert data['code'] == 'D-20210501-0000001'
    assert data['hospitalId'] is None
    assert data['guardians'][0]['guardianId'] == guardian.id
    assert data['guardians'][0]['isPrimary'] is True


def test_unknown_birth_date_uses_zero_day(client_for, guardian):
    r = client_for(guardian).post('/api/animals', {'name': '나비', 'species': 'CAT'}, format='json')
    assert re.fullmatch(r'C-00000000-\d{7}', r.data['data']['code'])


def test_animal_lookup_by_code_and_access(client_for, guardian, staff_user, animal):
    assert client_for(guardian).get(f'/api/animals/code/{animal.code}').data['data']['id'] == animal.id
    assert client_for(staff_user).get(f'/api/animals/{animal.id}').status_code == 200

    stranger = User.objects.create_user(username='guardian2', password='P@ssw0rd1', role='guardian')
    r = client_for(stranger).get(f'/api/animals/{animal.id}')
    assert r.status_code == 403
    assert client_for(guardian).get('/api/animals/code/X-00000000-9999999').status_code == 404


def test_guardian_deactivates_own_animal(client_for, guardian, animal):
    client = client_for(guardian)
    assert client.delete(f'/api/animals/{animal.id}').status_code == 200
    assert client.get('/api/animals').data['data'] == []
    assert len(client.get('/api/animals', {'includeInactive': 'true'}).data['data']) == 1


def test_removed_staff_loses_hospital_access(client_for, admin_user, staff_user, hospital, animal, guardian,
                                             supplier, product):
    from core.services.invoices import create_invoice
    create_invoice(admin_user, {
        'hospitalId': hospital.id, 'animalId': animal.id, 'guardianId': guardian.id,
        'items': [{'name': '진료', 'quantity': 1, 'unitPrice': '10000'}],
    })
    membership = HospitalStaff.objects.get(hospital=hospital, user=staff_user)
    r = client_for(admin_user).delete(f'/api/hospitals/{hospital.id}/staff/{membership.id}')
    assert r.status_code == 200

    staff_user.refresh_from_db()
    assert staff_user.hospital_id is None
    assert staff_user.role == 'guardian'

    client = client_for(staff_user)
    assert client.get('/api/invoices').data['meta']['total'] == 0
    r = client.post('/api/inventory/purchase-orders', {
        'supplierId': supplier.id, 'items': [{'productId': product.id, 'quantity': 1, 'unitPrice': '300'}],
    }, format='json')
    assert r.status_code == 403
    r = client.post('/api/inventory/transactions', {'productId': product.id, 'type': 'PURCHASE', 'quantity': 1},
                    format='json')
    assert r.status_code == 403


def test_deactivated_membership_blocks_scoped_access(client_for, admin_user, vet_user, hospital, product):
    membership = HospitalStaff.objects.get(hospital=hospital, user=vet_user)
    r = client_for(admin_user).put(f'/api/hospitals/{hospital.id}/staff/{membership.id}', {'isActive': False},
                                   format='json')
    assert r.status_code == 200
    vet_user.refresh_from_db()
    assert (vet_user.role, vet_user.hospital_id) == ('guardian', None)

    r = client_for(admin_user).put(f'/api/hospitals/{hospital.id}/staff/{membership.id}', {'isActive': True},
                                   format='json')
    vet_user.refresh_from_db()
    assert (vet_user.role, vet_user.hospital_id) == ('vet', hospital.id)


def test_stale_hospital_binding_is_not_trusted(client_for, staff_user, hospital):
    # membership switched off without going through the staff endpoints
    HospitalStaff.objects.filter(user=staff_user).update(is_active=False)
    r = client_for(staff_user).get('/api/inventory/stocks')
    assert r.status_code == 403
    assert r.data['error']['message'] == '소속 병원이 없습니다'


def test_owner_cannot_be_deactivated(client_for, admin_user, hospital):
    owner = HospitalStaff.objects.get(hospital=hospital, user=admin_user)
    r = client_for(admin_user).put(f'/api/hospitals/{hospital.id}/staff/{owner.id}', {'isActive': False},
                                   format='json')
    assert r.status_code == 403
    assert HospitalStaff.objects.get(id=owner.id).is_active
