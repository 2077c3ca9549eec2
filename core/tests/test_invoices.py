from decimal import Decimal

import pytest

from core.models import AuditEvent, Invoice
from core.services.invoices import compute_item_amounts

pytestmark = pytest.mark.django_db


def _create(client, hospital, animal, guardian, items):
    return client.post('/api/invoices', {
        'hospitalId': hospital.id, 'animalId': animal.id, 'guardianId': guardian.id, 'items': items,
    }, format='json')


def test_compute_item_amounts_applies_rate_then_fixed_discount():
    assert compute_item_amounts(2, Decimal('10000'), Decimal('10')) == (Decimal('20000.00'), Decimal('18000.00'))
    assert compute_item_amounts(1, Decimal('5000'), None, Decimal('1000')) == (Decimal('5000.00'), Decimal('4000.00'))
    # never negative
    assert compute_item_amounts(1, Decimal('1000'), None, Decimal('5000'))[1] == Decimal('0.00')


def test_create_invoice_computes_totals(client_for, admin_user, hospital, animal, guardian):
    r = _create(client_for(admin_user), hospital, animal, guardian, [
        {'type': 'CONSULTATION', 'name': '진료', 'quantity': 2, 'unitPrice': '10000', 'discountRate': '10'},
    ])
    assert r.status_code == 201
    data = r.data['data']
    assert data['invoiceNumber'].startswith('INV-')
    assert data['status'] == 'DRAFT'
    assert data['subtotal'] == Decimal('20000')
    assert data['discountAmount'] == Decimal('2000')
    assert data['totalAmount'] == Decimal('18000')
    assert data['dueAmount'] == Decimal('18000')
    assert data['paidAmount'] == Decimal('0')
    assert data['items'][0]['finalAmount'] == Decimal('18000')
    assert AuditEvent.objects.filter(action='invoice_create', object_id=data['id']).exists()


def test_create_invoice_requires_items(client_for, admin_user, hospital, animal, guardian):
    r = _create(client_for(admin_user), hospital, animal, guardian, [])
    assert r.status_code == 400
    assert r.data['ok'] is False


def test_create_invoice_for_other_hospital_is_forbidden(client_for, other_admin, hospital, animal, guardian):
    r = _create(client_for(other_admin), hospital, animal, guardian, [
        {'name': '진료', 'quantity': 1, 'unitPrice': '10000'},
    ])
    assert r.status_code == 403
    assert Invoice.objects.count() == 0


def test_items_recalculate_totals(client_for, admin_user, hospital, animal, guardian):
    client = client_for(admin_user)
    inv = _create(client, hospital, animal, guardian, [
        {'name': '진료', 'quantity': 1, 'unitPrice': '15000'},
    ]).data['data']

    r = client.post(f"/api/invoices/{inv['id']}/items", {'name': '주사', 'quantity': 2, 'unitPrice': '5000'},
                    format='json')
    assert r.status_code == 201
    assert r.data['invoice']['totalAmount'] == Decimal('25000')
    item_id = r.data['data']['id']

    r = client.put(f'/api/invoices/items/{item_id}', {'discountAmount': '2000'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['finalAmount'] == Decimal('8000')
    assert r.data['invoice']['totalAmount'] == Decimal('23000')
    assert r.data['invoice']['discountAmount'] == Decimal('2000')

    r = client.delete(f'/api/invoices/items/{item_id}')
    assert r.status_code == 200
    assert r.data['invoice']['totalAmount'] == Decimal('15000')
    assert r.data['invoice']['dueAmount'] == Decimal('15000')


def test_paid_invoice_is_locked(client_for, admin_user, hospital, animal, guardian):
    client = client_for(admin_user)
    inv = _create(client, hospital, animal, guardian, [{'name': '진료', 'quantity': 1, 'unitPrice': '10000'}]).data['data']
    assert client.post('/api/invoices/payments', {'invoiceId': inv['id'], 'amount': '10000', 'method': 'CASH'},
                       format='json').status_code == 201

    r = client.post(f"/api/invoices/{inv['id']}/items", {'name': '추가', 'quantity': 1, 'unitPrice': '1000'},
                    format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == '이 청구서에는 항목을 추가할 수 없습니다'

    r = client.put(f"/api/invoices/{inv['id']}", {'notes': '수정'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == '결제가 완료된 청구서는 수정할 수 없습니다'

    r = client.delete(f"/api/invoices/{inv['id']}")
    assert r.status_code == 400


def test_status_cannot_be_forced_to_paid(client_for, admin_user, hospital, animal, guardian):
    client = client_for(admin_user)
    inv = _create(client, hospital, animal, guardian, [{'name': '진료', 'quantity': 1, 'unitPrice': '10000'}]).data['data']
    r = client.put(f"/api/invoices/{inv['id']}", {'status': 'PAID'}, format='json')
    assert r.status_code == 400
    r = client.put(f"/api/invoices/{inv['id']}", {'status': 'PENDING'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == 'PENDING'


def test_vet_cannot_delete_invoice(client_for, admin_user, vet_user, hospital, animal, guardian):
    inv = _create(client_for(admin_user), hospital, animal, guardian,
                  [{'name': '진료', 'quantity': 1, 'unitPrice': '10000'}]).data['data']
    r = client_for(vet_user).delete(f"/api/invoices/{inv['id']}")
    assert r.status_code == 403
    r = client_for(admin_user).delete(f"/api/invoices/{inv['id']}")
    assert r.status_code == 200
    assert not Invoice.objects.filter(id=inv['id']).exists()


def test_guardian_sees_only_own_invoices(client_for, admin_user, hospital, animal, guardian):
    from core.models import User
    _create(client_for(admin_user), hospital, animal, guardian, [{'name': '진료', 'quantity': 1, 'unitPrice': '10000'}])
    stranger = User.objects.create_user(username='guardian2', password='P@ssw0rd1', role='guardian')

    r = client_for(guardian).get('/api/invoices')
    assert r.status_code == 200
    assert r.data['meta']['total'] == 1
    assert 'internalNotes' not in client_for(guardian).get(f"/api/invoices/{r.data['data'][0]['id']}").data['data']

    r = client_for(stranger).get('/api/invoices')
    assert r.data['meta']['total'] == 0


def test_stats_summary(client_for, admin_user, hospital, animal, guardian):
    client = client_for(admin_user)
    inv = _create(client, hospital, animal, guardian, [{'name': '진료', 'quantity': 1, 'unitPrice': '10000'}]).data['data']
    client.post('/api/invoices/payments', {'invoiceId': inv['id'], 'amount': '10000', 'method': 'CARD'}, format='json')

    r = client.get('/api/invoices/stats')
    assert r.status_code == 200
    summary = r.data['data']['summary']
    assert summary['totalInvoiceCount'] == 1
    assert summary['paidInvoiceCount'] == 1
    assert summary['paidAmount'] == Decimal('10000')
    assert r.data['data']['byPaymentMethod']['CARD']['count'] == 1


def test_cancelled_invoice_cannot_be_reopened(client_for, admin_user, hospital, animal, guardian):
    client = client_for(admin_user)
    inv = _create(client, hospital, animal, guardian, [{'name': '진료', 'quantity': 1, 'unitPrice': '10000'}]).data['data']
    assert client.put(f"/api/invoices/{inv['id']}", {'status': 'CANCELLED'}, format='json').status_code == 200

    r = client.put(f"/api/invoices/{inv['id']}", {'status': 'PENDING'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == '취소된 청구서의 상태는 변경할 수 없습니다'
    r = client.post('/api/invoices/payments', {'invoiceId': inv['id'], 'amount': '10000', 'method': 'CASH'},
                    format='json')
    assert r.status_code == 400
    assert Invoice.objects.get(id=inv['id']).status == Invoice.STATUS_CANCELLED


def test_partially_paid_invoice_only_moves_to_overdue(client_for, admin_user, hospital, animal, guardian):
    client = client_for(admin_user)
    inv = _create(client, hospital, animal, guardian, [{'name': '진료', 'quantity': 1, 'unitPrice': '10000'}]).data['data']
    client.post('/api/invoices/payments', {'invoiceId': inv['id'], 'amount': '4000', 'method': 'CASH'}, format='json')

    for target in ('DRAFT', 'PENDING'):
        r = client.put(f"/api/invoices/{inv['id']}", {'status': target}, format='json')
        assert r.status_code == 400
        assert r.data['error']['message'] == '결제가 진행된 청구서는 연체 상태로만 변경할 수 있습니다'
    assert Invoice.objects.get(id=inv['id']).status == Invoice.STATUS_PARTIAL

    r = client.put(f"/api/invoices/{inv['id']}", {'status': 'OVERDUE'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == 'OVERDUE'
    assert r.data['data']['paidAmount'] == Decimal('4000')


def test_added_item_continues_sort_order(client_for, admin_user, hospital, animal, guardian):
    client = client_for(admin_user)
    inv = _create(client, hospital, animal, guardian, [
        {'name': '진료', 'quantity': 1, 'unitPrice': '10000'},
        {'name': '주사', 'quantity': 1, 'unitPrice': '5000'},
    ]).data['data']
    assert [i['sortOrder'] for i in inv['items']] == [0, 1]
    r = client.post(f"/api/invoices/{inv['id']}/items", {'name': '약', 'quantity': 1, 'unitPrice': '1000'},
                    format='json')
    assert r.data['data']['sortOrder'] == 2
