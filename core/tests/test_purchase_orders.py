from decimal import Decimal

import pytest

from core.models import InventoryStock, InventoryTransaction, Notification, Product, PurchaseOrder

pytestmark = pytest.mark.django_db


@pytest.fixture
def order(client_for, staff_user, supplier, product):
    r = client_for(staff_user).post('/api/inventory/purchase-orders', {
        'supplierId': supplier.id,
        'items': [{'productId': product.id, 'quantity': 10, 'unitPrice': '300'}],
    }, format='json')
    assert r.status_code == 201
    return r.data['data']


def _receive(client, order, qty):
    return client.patch(f"/api/inventory/purchase-orders/{order['id']}/receive", {
        'items': [{'itemId': order['items'][0]['id'], 'receivedQuantity': qty}],
    }, format='json')


def test_create_computes_totals(order):
    assert order['status'] == 'PENDING'
    assert order['orderNumber'].startswith('PO-')
    assert order['subtotal'] == Decimal('3000')
    assert order['taxAmount'] == Decimal('300')
    assert order['totalAmount'] == Decimal('3300')
    assert order['items'][0]['remainingQty'] == 10


def test_partial_then_full_receipt(client_for, admin_user, staff_user, order, product):
    admin = client_for(admin_user)
    assert admin.patch(f"/api/inventory/purchase-orders/{order['id']}/approve").data['data']['status'] == 'APPROVED'

    staff = client_for(staff_user)
    r = _receive(staff, order, 5)
    assert r.status_code == 200
    assert r.data['data']['status'] == 'PARTIAL'
    assert r.data['data']['receivedDate'] is None
    assert InventoryStock.objects.get(product=product).quantity == 5

    r = _receive(staff, order, 5)
    assert r.data['data']['status'] == 'RECEIVED'
    assert r.data['data']['receivedDate'] is not None
    assert r.data['data']['items'][0]['receivedQty'] == 10
    assert InventoryStock.objects.get(product=product).quantity == 10

    txns = InventoryTransaction.objects.filter(reference_type='PURCHASE_ORDER', reference_id=str(order['id']))
    assert [t.quantity for t in txns.order_by('id')] == [5, 5]
    assert all(t.type == 'PURCHASE' and t.unit_cost == Decimal('300') for t in txns)

    received = Notification.objects.filter(type=Notification.TYPE_PURCHASE_ORDER_RECEIVED, user=staff_user)
    assert received.count() == 2


def test_over_receipt_is_rejected(client_for, admin_user, order, product):
    client = client_for(admin_user)
    client.patch(f"/api/inventory/purchase-orders/{order['id']}/approve")
    r = _receive(client, order, 11)
    assert r.status_code == 400
    assert r.data['error']['message'] == '입고 수량이 잔여 발주 수량을 초과합니다.'
    assert not InventoryStock.objects.filter(product=product).exists()
    assert PurchaseOrder.objects.get(id=order['id']).status == 'APPROVED'


def test_unknown_item_is_rejected(client_for, admin_user, order):
    client = client_for(admin_user)
    client.patch(f"/api/inventory/purchase-orders/{order['id']}/approve")
    r = client.patch(f"/api/inventory/purchase-orders/{order['id']}/receive", {
        'items': [{'itemId': 999999, 'receivedQuantity': 1}],
    }, format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == '발주서에 없는 품목입니다.'


def test_receive_requires_approval(client_for, staff_user, order):
    r = _receive(client_for(staff_user), order, 1)
    assert r.status_code == 400
    assert r.data['error']['message'] == '승인된 발주서만 입고 처리할 수 있습니다.'


def test_only_admin_approves(client_for, staff_user, order):
    r = client_for(staff_user).patch(f"/api/inventory/purchase-orders/{order['id']}/approve")
    assert r.status_code == 403
    assert PurchaseOrder.objects.get(id=order['id']).status == 'PENDING'


def test_draft_submit_order_flow(client_for, admin_user, supplier, product):
    client = client_for(admin_user)
    r = client.post('/api/inventory/purchase-orders', {
        'supplierId': supplier.id, 'draft': True,
        'items': [{'productId': product.id, 'quantity': 2, 'unitPrice': '500'}],
    }, format='json')
    oid = r.data['data']['id']
    assert r.data['data']['status'] == 'DRAFT'
    assert client.patch(f'/api/inventory/purchase-orders/{oid}/approve').status_code == 400

    r = client.put(f'/api/inventory/purchase-orders/{oid}', {'notes': '급히 필요'}, format='json')
    assert r.data['data']['notes'] == '급히 필요'
    assert client.patch(f'/api/inventory/purchase-orders/{oid}/submit').data['data']['status'] == 'PENDING'
    assert client.patch(f'/api/inventory/purchase-orders/{oid}/approve').data['data']['approvedBy'] == admin_user.id
    r = client.patch(f'/api/inventory/purchase-orders/{oid}/order')
    assert r.data['data']['status'] == 'ORDERED'
    assert r.data['data']['orderDate'] is not None

    r = client.put(f'/api/inventory/purchase-orders/{oid}', {'notes': '변경'}, format='json')
    assert r.status_code == 400


def test_cancel_guard(client_for, admin_user, order):
    client = client_for(admin_user)
    client.patch(f"/api/inventory/purchase-orders/{order['id']}/approve")
    _receive(client, order, 10)
    r = client.patch(f"/api/inventory/purchase-orders/{order['id']}/cancel")
    assert r.status_code == 400
    assert r.data['error']['message'] == '입고 완료 또는 취소된 발주서는 취소할 수 없습니다.'


def test_cancel_pending(client_for, admin_user, order):
    r = client_for(admin_user).patch(f"/api/inventory/purchase-orders/{order['id']}/cancel")
    assert r.data['data']['status'] == 'CANCELLED'


def test_list_and_scope(client_for, staff_user, other_admin, order):
    r = client_for(staff_user).get('/api/inventory/purchase-orders', {'status': 'PENDING'})
    assert r.data['meta']['total'] == 1
    assert r.data['data'][0]['itemCount'] == 1

    r = client_for(other_admin).get(f"/api/inventory/purchase-orders/{order['id']}")
    assert r.status_code == 403


def test_order_is_received_only_when_every_line_is_complete(client_for, admin_user, hospital, supplier, product):
    second = Product.objects.create(hospital=hospital, supplier=supplier, code='MED-0002', name='소염제')
    client = client_for(admin_user)
    order = client.post('/api/inventory/purchase-orders', {
        'supplierId': supplier.id,
        'items': [
            {'productId': product.id, 'quantity': 10, 'unitPrice': '300'},
            {'productId': second.id, 'quantity': 5, 'unitPrice': '1000'},
        ],
    }, format='json').data['data']
    first_line, second_line = order['items']
    client.patch(f"/api/inventory/purchase-orders/{order['id']}/approve")

    r = client.patch(f"/api/inventory/purchase-orders/{order['id']}/receive", {'items': [
        {'itemId': first_line['id'], 'receivedQuantity': 10},
        {'itemId': second_line['id'], 'receivedQuantity': 3},
    ]}, format='json')
    assert r.data['data']['status'] == 'PARTIAL'
    assert [i['remainingQty'] for i in r.data['data']['items']] == [0, 2]

    r = client.patch(f"/api/inventory/purchase-orders/{order['id']}/receive", {'items': [
        {'itemId': second_line['id'], 'receivedQuantity': 2},
    ]}, format='json')
    assert r.data['data']['status'] == 'RECEIVED'
    assert InventoryStock.objects.get(product=product).quantity == 10
    assert InventoryStock.objects.get(product=second).quantity == 5


def test_repeated_transitions_are_rejected(client_for, admin_user, order):
    client = client_for(admin_user)
    client.patch(f"/api/inventory/purchase-orders/{order['id']}/approve")
    r = client.patch(f"/api/inventory/purchase-orders/{order['id']}/approve")
    assert r.status_code == 400
    assert r.data['error']['message'] == '대기 상태의 발주서만 승인할 수 있습니다.'

    assert client.patch(f"/api/inventory/purchase-orders/{order['id']}/cancel").status_code == 200
    r = client.patch(f"/api/inventory/purchase-orders/{order['id']}/cancel")
    assert r.status_code == 400
    assert r.data['error']['message'] == '입고 완료 또는 취소된 발주서는 취소할 수 없습니다.'
    assert PurchaseOrder.objects.get(id=order['id']).status == 'CANCELLED'
