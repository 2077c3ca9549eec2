from decimal import Decimal

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from core.models import Animal, AnimalGuardian, Hospital, HospitalStaff, Product, Supplier, User


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters and cached stats live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def hospital(db):
    return Hospital.objects.create(name='행복동물병원', business_number='123-45-67890', status=Hospital.STATUS_ACTIVE)


@pytest.fixture
def other_hospital(db):
    return Hospital.objects.create(name='다른동물병원', business_number='987-65-43210', status=Hospital.STATUS_ACTIVE)


def _staff(hospital, username, role, position):
    u = User.objects.create_user(username=username, password='P@ssw0rd1', role=role, hospital=hospital)
    HospitalStaff.objects.create(hospital=hospital, user=u, position=position)
    return u


@pytest.fixture
def admin_user(hospital):
    return _staff(hospital, 'admin1', 'hospital_admin', HospitalStaff.POSITION_OWNER)


@pytest.fixture
def staff_user(hospital):
    return _staff(hospital, 'staff1', 'staff', HospitalStaff.POSITION_STAFF)


@pytest.fixture
def vet_user(hospital):
    return _staff(hospital, 'vet1', 'vet', HospitalStaff.POSITION_VET)


@pytest.fixture
def other_admin(other_hospital):
    return _staff(other_hospital, 'admin2', 'hospital_admin', HospitalStaff.POSITION_OWNER)


@pytest.fixture
def super_user(db):
    return User.objects.create_user(username='root', password='P@ssw0rd1', role='super')


@pytest.fixture
def guardian(db):
    return User.objects.create_user(username='guardian1', password='P@ssw0rd1', role='guardian', phone='010-1234-5678')


@pytest.fixture
def animal(guardian, hospital):
    a = Animal.objects.create(code='D-20200314-0000001', name='초코', species='DOG', hospital=hospital)
    AnimalGuardian.objects.create(animal=a, guardian=guardian, is_primary=True)
    return a


@pytest.fixture
def supplier(hospital):
    return Supplier.objects.create(hospital=hospital, code='SUP-001', name='한빛동물약품')


@pytest.fixture
def product(hospital, supplier):
    return Product.objects.create(
        hospital=hospital, supplier=supplier, code='MED-0001', name='아목시실린 250mg', type='MEDICATION',
        cost_price=Decimal('300'), selling_price=Decimal('1000'),
    )


@pytest.fixture
def client_for():
    def make(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return make
