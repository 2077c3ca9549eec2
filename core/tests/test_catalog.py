import pytest

from core.models import Product, Supplier
from core.services import inventory

pytestmark = pytest.mark.django_db


def test_supplier_and_product_codes_are_generated(client_for, admin_user):
    client = client_for(admin_user)
    r = client.post('/api/inventory/suppliers', {'name': '펫케어유통', 'contactPerson': '이담당'}, format='json')
    assert r.status_code == 201
    assert r.data['data']['code'] == 'SUP-001'

    r = client.post('/api/inventory/products', {
        'name': '종합백신', 'type': 'VACCINE', 'unit': 'DOSE', 'supplierId': r.data['data']['id'],
        'costPrice': '8000', 'sellingPrice': '25000', 'minStockLevel': 10,
    }, format='json')
    assert r.status_code == 201
    assert r.data['data']['code'] == 'VAC-0001'
    second = client.post('/api/inventory/products', {'name': '광견병 백신', 'type': 'VACCINE'}, format='json')
    assert second.data['data']['code'] == 'VAC-0002'


def test_product_list_low_stock_filter(client_for, admin_user, hospital, product):
    other = Product.objects.create(hospital=hospital, code='MED-0002', name='소염제', min_stock_level=5)
    inventory.create_transaction(admin_user, hospital.id, product.id, 'PURCHASE', 20)
    inventory.create_transaction(admin_user, hospital.id, other.id, 'PURCHASE', 3)

    r = client_for(admin_user).get('/api/inventory/products', {'lowStock': 'true'})
    assert r.status_code == 200
    assert r.data['meta']['total'] == 1
    assert r.data['data'][0]['id'] == other.id
    assert r.data['data'][0]['lowStock'] is True


def test_product_with_ledger_history_cannot_be_deleted(client_for, admin_user, hospital, product):
    inventory.create_transaction(admin_user, hospital.id, product.id, 'PURCHASE', 1)
    r = client_for(admin_user).delete(f'/api/inventory/products/{product.id}')
    assert r.status_code == 400
    assert Product.objects.filter(id=product.id).exists()


def test_product_detail_lists_stock_lots(client_for, admin_user, hospital, product):
    inventory.create_transaction(admin_user, hospital.id, product.id, 'PURCHASE', 4, lot_number='L1')
    r = client_for(admin_user).get(f'/api/inventory/products/{product.id}')
    assert r.status_code == 200
    assert r.data['data']['totalStock'] == 4
    assert r.data['data']['stocks'][0]['lotNumber'] == 'L1'
    assert len(r.data['data']['recentTransactions']) == 1


def test_category_with_products_cannot_be_deleted(client_for, admin_user, product):
    client = client_for(admin_user)
    cat = client.post('/api/inventory/categories', {'name': '의약품'}, format='json').data['data']
    client.put(f'/api/inventory/products/{product.id}', {'categoryId': cat['id']}, format='json')
    r = client.delete(f"/api/inventory/categories/{cat['id']}")
    assert r.status_code == 400
    assert client.get('/api/inventory/categories').data['data'][0]['productCount'] == 1


def test_supplier_of_other_hospital_is_hidden(client_for, other_admin, supplier):
    r = client_for(other_admin).get(f'/api/inventory/suppliers/{supplier.id}')
    assert r.status_code == 403
    assert Supplier.objects.filter(id=supplier.id).exists()
