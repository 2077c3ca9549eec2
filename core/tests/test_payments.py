from decimal import Decimal

import pytest

from core.models import Invoice, Notification, Payment
from core.services.invoices import create_invoice
from core.services.payments import create_payment, refund_payment

pytestmark = pytest.mark.django_db


@pytest.fixture
def invoice(admin_user, hospital, animal, guardian):
    # 2 x 10,000 at 10% off = 18,000
    return create_invoice(admin_user, {
        'hospitalId': hospital.id, 'animalId': animal.id, 'guardianId': guardian.id,
        'items': [{'name': '진료', 'quantity': 2, 'unitPrice': Decimal('10000'), 'discountRate': Decimal('10')}],
    })


def test_full_payment_marks_invoice_paid(client_for, admin_user, invoice, guardian):
    r = client_for(admin_user).post('/api/invoices/payments', {
        'invoiceId': invoice.id, 'amount': '18000', 'method': 'CARD', 'cardNumber': '1234-5678-9012-3456',
    }, format='json')
    assert r.status_code == 201
    assert r.data['data']['status'] == 'COMPLETED'
    assert r.data['data']['paymentNumber'].startswith('PAY-')

    invoice.refresh_from_db()
    assert invoice.status == Invoice.STATUS_PAID
    assert invoice.paid_amount == Decimal('18000')
    assert invoice.due_amount == Decimal('0')
    assert invoice.paid_at is not None
    assert Payment.objects.get(id=r.data['data']['id']).card_number == '3456'
    assert Notification.objects.filter(user=guardian, type=Notification.TYPE_PAYMENT_COMPLETED).count() == 1


def test_partial_payment(admin_user, invoice):
    create_payment(admin_user, invoice.id, Decimal('8000'), 'CASH')
    invoice.refresh_from_db()
    assert invoice.status == Invoice.STATUS_PARTIAL
    assert invoice.due_amount == Decimal('10000')


def test_overpayment_is_rejected_and_leaves_invoice_unchanged(client_for, admin_user, invoice):
    create_payment(admin_user, invoice.id, Decimal('8000'), 'CASH')
    r = client_for(admin_user).post('/api/invoices/payments', {
        'invoiceId': invoice.id, 'amount': '10001', 'method': 'CASH',
    }, format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == '결제 금액이 미결제 금액(10,000원)을 초과합니다'

    invoice.refresh_from_db()
    assert invoice.paid_amount == Decimal('8000')
    assert invoice.status == Invoice.STATUS_PARTIAL
    assert Payment.objects.filter(invoice=invoice).count() == 1


def test_refund_reopens_invoice(client_for, admin_user, invoice, guardian):
    payment = create_payment(admin_user, invoice.id, Decimal('18000'), 'CARD')
    r = client_for(admin_user).patch(f'/api/invoices/payments/{payment.id}/refund',
                                     {'amount': '5000', 'reason': '처방 변경'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == 'REFUNDED'
    assert r.data['data']['refundAmount'] == Decimal('5000')

    invoice.refresh_from_db()
    assert invoice.paid_amount == Decimal('13000')
    assert invoice.due_amount == Decimal('5000')
    assert invoice.status == Invoice.STATUS_PARTIAL
    assert invoice.paid_at is None
    assert Notification.objects.filter(user=guardian, type=Notification.TYPE_PAYMENT_REFUNDED).exists()


def test_full_refund_marks_invoice_refunded(admin_user, invoice):
    payment = create_payment(admin_user, invoice.id, Decimal('18000'), 'CARD')
    refund_payment(admin_user, payment.id, Decimal('18000'), '취소')
    invoice.refresh_from_db()
    assert invoice.status == Invoice.STATUS_REFUNDED
    assert invoice.paid_amount == Decimal('0')


def test_refund_guards(client_for, admin_user, invoice):
    payment = create_payment(admin_user, invoice.id, Decimal('8000'), 'CASH')
    client = client_for(admin_user)

    r = client.patch(f'/api/invoices/payments/{payment.id}/refund', {'amount': '9000', 'reason': 'x'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == '환불 금액이 결제 금액을 초과합니다'
    invoice.refresh_from_db()
    assert (invoice.paid_amount, invoice.due_amount) == (Decimal('8000'), Decimal('10000'))
    assert invoice.status == Invoice.STATUS_PARTIAL
    payment.refresh_from_db()
    assert payment.status == Payment.STATUS_COMPLETED

    client.patch(f'/api/invoices/payments/{payment.id}/refund', {'amount': '1000', 'reason': 'x'}, format='json')
    r = client.patch(f'/api/invoices/payments/{payment.id}/refund', {'amount': '1000', 'reason': 'x'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['message'] == '완료된 결제만 환불할 수 있습니다'

    r = client.patch('/api/invoices/payments/999999/refund', {'amount': '1000', 'reason': 'x'}, format='json')
    assert r.status_code == 404


def test_cancelled_invoice_rejects_payment(admin_user, invoice):
    from core.exceptions import BadRequest
    invoice.status = Invoice.STATUS_CANCELLED
    invoice.save(update_fields=['status'])
    with pytest.raises(BadRequest):
        create_payment(admin_user, invoice.id, Decimal('1000'), 'CASH')


def test_guardian_cannot_pay(client_for, guardian, invoice):
    r = client_for(guardian).post('/api/invoices/payments', {
        'invoiceId': invoice.id, 'amount': '1000', 'method': 'CASH',
    }, format='json')
    assert r.status_code == 403


def test_payment_list_is_scoped(client_for, admin_user, other_admin, guardian, invoice):
    create_payment(admin_user, invoice.id, Decimal('1000'), 'CASH')
    r = client_for(admin_user).get('/api/invoices/payments/list')
    assert r.data['meta']['total'] == 1
    assert r.data['data'][0]['invoiceNumber'] == invoice.invoice_number
    assert client_for(guardian).get('/api/invoices/payments/list').data['meta']['total'] == 1
    assert client_for(other_admin).get('/api/invoices/payments/list').data['meta']['total'] == 0
