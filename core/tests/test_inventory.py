from decimal import Decimal

import pytest

from core.exceptions import BadRequest
from core.models import InventoryStock, InventoryTransaction, Notification
from core.services import inventory

pytestmark = pytest.mark.django_db


def test_sale_from_empty_stock_is_rejected(client_for, staff_user, product):
    r = client_for(staff_user).post('/api/inventory/transactions', {
        'productId': product.id, 'type': 'SALE', 'quantity': 1,
    }, format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == '재고가 부족합니다'
    assert not InventoryTransaction.objects.exists()
    assert not InventoryStock.objects.exists()


def test_inbound_then_outbound_records_before_and_after(staff_user, hospital, product):
    t1 = inventory.create_transaction(staff_user, hospital.id, product.id, 'PURCHASE', 10, unit_cost=Decimal('300'))
    t2 = inventory.create_transaction(staff_user, hospital.id, product.id, 'SALE', 4)

    assert (t1.quantity, t1.previous_qty, t1.current_qty) == (10, 0, 10)
    assert t1.total_cost == Decimal('3000')
    assert (t2.quantity, t2.previous_qty, t2.current_qty) == (-4, 10, 6)
    stock = InventoryStock.objects.get(product=product, lot_number='')
    assert stock.quantity == 6
    assert stock.available_qty == 6
    assert t1.transaction_number.startswith('TXN-')


def test_lots_are_tracked_separately(staff_user, hospital, product):
    inventory.create_transaction(staff_user, hospital.id, product.id, 'PURCHASE', 5, lot_number='A1')
    inventory.create_transaction(staff_user, hospital.id, product.id, 'PURCHASE', 3, lot_number='B2')
    with pytest.raises(BadRequest):
        inventory.create_transaction(staff_user, hospital.id, product.id, 'SALE', 4, lot_number='B2')
    assert inventory.total_stock(product) == 8


def test_adjustment_records_signed_difference(client_for, admin_user, hospital, product):
    inventory.create_transaction(admin_user, hospital.id, product.id, 'INITIAL', 10)
    r = client_for(admin_user).post('/api/inventory/stocks/adjust', {
        'productId': product.id, 'newQuantity': 7, 'reason': '실사',
    }, format='json')
    assert r.status_code == 200
    assert r.data['data']['quantity'] == 7
    assert r.data['data']['lastCountedAt'] is not None
    txn = InventoryTransaction.objects.filter(type='ADJUSTMENT').get()
    assert (txn.quantity, txn.previous_qty, txn.current_qty) == (-3, 10, 7)


def test_adjustment_type_is_not_accepted_on_transactions(client_for, staff_user, product):
    r = client_for(staff_user).post('/api/inventory/transactions', {
        'productId': product.id, 'type': 'ADJUSTMENT', 'quantity': 1,
    }, format='json')
    assert r.status_code == 400


def test_ledger_rows_are_append_only(staff_user, hospital, product):
    txn = inventory.create_transaction(staff_user, hospital.id, product.id, 'PURCHASE', 1)
    txn.notes = 'changed'
    with pytest.raises(RuntimeError):
        txn.save()
    with pytest.raises(RuntimeError):
        txn.delete()


def test_low_stock_alert_goes_to_managers(admin_user, staff_user, hospital, product):
    product.min_stock_level = 5
    product.save(update_fields=['min_stock_level'])
    inventory.create_transaction(staff_user, hospital.id, product.id, 'PURCHASE', 8)
    assert not Notification.objects.filter(type=Notification.TYPE_LOW_STOCK_ALERT).exists()

    inventory.create_transaction(staff_user, hospital.id, product.id, 'SALE', 3)
    alerts = Notification.objects.filter(type=Notification.TYPE_LOW_STOCK_ALERT)
    assert [n.user_id for n in alerts] == [admin_user.id]
    assert alerts[0].data['totalStock'] == 5


def test_transaction_list_and_stats(client_for, admin_user, hospital, product):
    inventory.create_transaction(admin_user, hospital.id, product.id, 'PURCHASE', 10)
    inventory.create_transaction(admin_user, hospital.id, product.id, 'SALE', 2)
    client = client_for(admin_user)

    r = client.get('/api/inventory/transactions', {'type': 'SALE'})
    assert r.status_code == 200
    assert r.data['meta']['total'] == 1
    assert r.data['data'][0]['quantity'] == -2

    r = client.get('/api/inventory/stats')
    assert r.data['data']['totalProducts'] == 1
    assert r.data['data']['totalStockValue'] == Decimal('2400')
    assert r.data['data']['recentTransactions'] == 2


def test_staff_cannot_reach_other_hospital(client_for, staff_user, other_hospital):
    r = client_for(staff_user).get('/api/inventory/stocks', {'hospitalId': other_hospital.id})
    assert r.status_code == 403
    assert r.data['error']['message'] == '다른 병원의 데이터에 접근할 수 없습니다'


def test_super_must_name_hospital(client_for, super_user, hospital):
    client = client_for(super_user)
    assert client.get('/api/inventory/products').status_code == 403
    assert client.get('/api/inventory/products', {'hospitalId': hospital.id}).status_code == 200


def test_guardian_has_no_inventory_access(client_for, guardian):
    assert client_for(guardian).get('/api/inventory/products').status_code == 403


def test_matching_count_only_stamps_the_stock(admin_user, hospital, product):
    inventory.create_transaction(admin_user, hospital.id, product.id, 'INITIAL', 6)
    stock = inventory.adjust_stock(admin_user, hospital.id, product.id, 6, '정기 실사')
    assert stock.quantity == 6
    assert stock.last_counted_at is not None
    assert not InventoryTransaction.objects.filter(type='ADJUSTMENT').exists()
