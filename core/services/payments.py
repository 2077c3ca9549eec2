"""
Payment service: apply payments and refunds against an invoice.

Both operations lock the invoice row for the whole read-check-write so
that two concurrent payments can never push ``paidAmount`` above the
invoice total.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from core.exceptions import BadRequest
from core.models import Invoice, Notification, Payment
from core.services import sequences
from core.services.audit import log_action
from core.services.common import ZERO, clean_text, day_end, day_start, money, paginate
from core.services.invoices import STAFF_ROLES, ensure_can_edit, format_payment, get_invoice, scope_by_user
from core.services.notifications import notify

logger = logging.getLogger(__name__)

PAYMENT_ROLES = ('super',) + STAFF_ROLES


def _won(amount) -> str:
    return f"{money(amount):,.0f}"


@transaction.atomic
def create_payment(user, invoice_id: int, amount, method: str, *, card_number: str = '', card_company: str = '',
                   card_approval_no: str = '', card_installment: Optional[int] = None, notes: str = '') -> Payment:
    amount = money(amount)
    if amount <= 0:
        raise BadRequest('결제 금액은 0보다 커야 합니다')
    inv = get_invoice(invoice_id, lock=True)
    ensure_can_edit(user, inv, PAYMENT_ROLES, '결제를 처리할 권한이 없습니다')
    if inv.status in Invoice.LOCKED_STATUSES:
        logger.warning('payment rejected: invoice %s is %s', inv.invoice_number, inv.status)
        raise BadRequest('이 청구서에는 결제를 추가할 수 없습니다')
    if amount > inv.due_amount:
        logger.warning('payment rejected: %s exceeds due %s on %s', amount, inv.due_amount, inv.invoice_number)
        raise BadRequest(f'결제 금액이 미결제 금액({_won(inv.due_amount)}원)을 초과합니다')

    now = timezone.now()
    payment = Payment.objects.create(
        payment_number=sequences.next_number(sequences.PAYMENT, 'PAY'),
        invoice=inv,
        hospital_id=inv.hospital_id,
        amount=amount,
        method=method,
        status=Payment.STATUS_COMPLETED,
        # keep only the last four digits of the card
        card_number=card_number[-4:] if card_number else '',
        card_company=card_company or '',
        card_approval_no=card_approval_no or '',
        card_installment=card_installment,
        notes=clean_text(notes),
        paid_at=now,
        processed_by=user,
    )

    inv.paid_amount = money(inv.paid_amount + amount)
    inv.due_amount = money(max(ZERO, inv.total_amount - inv.paid_amount))
    fields = ['paid_amount', 'due_amount', 'status', 'updated_at']
    if inv.due_amount <= 0:
        inv.status = Invoice.STATUS_PAID
        inv.paid_at = now
        fields.append('paid_at')
    else:
        inv.status = Invoice.STATUS_PARTIAL
    inv.save(update_fields=fields)

    log_action(user=user, action='payment_create', object_type='invoice', object_id=inv.id,
               detail={'payment': payment.payment_number, 'amount': str(amount), 'method': method})
    logger.info('payment %s applied to %s amount=%s status=%s',
                payment.payment_number, inv.invoice_number, amount, inv.status)
    notify(
        inv.guardian, Notification.TYPE_PAYMENT_COMPLETED, '결제 완료',
        f'{inv.invoice_number} 청구서에 {_won(amount)}원이 결제되었습니다.',
        hospital=inv.hospital,
        data={'invoiceId': inv.id, 'paymentId': payment.id, 'amount': str(amount)},
    )
    return payment


@transaction.atomic
def refund_payment(user, payment_id: int, amount, reason: str = '') -> Payment:
    amount = money(amount)
    if amount <= 0:
        raise BadRequest('환불 금액은 0보다 커야 합니다')
    found = Payment.objects.filter(id=payment_id).only('id', 'invoice_id').first()
    if not found:
        raise NotFound('결제 내역을 찾을 수 없습니다')
    # lock order: invoice, then payment
    inv = get_invoice(found.invoice_id, lock=True)
    payment = Payment.objects.select_for_update().get(id=payment_id)
    ensure_can_edit(user, inv, PAYMENT_ROLES, '환불을 처리할 권한이 없습니다')
    if payment.status != Payment.STATUS_COMPLETED:
        raise BadRequest('완료된 결제만 환불할 수 있습니다')
    if amount > payment.amount:
        logger.warning('refund rejected: %s exceeds payment %s', amount, payment.payment_number)
        raise BadRequest('환불 금액이 결제 금액을 초과합니다')

    payment.status = Payment.STATUS_REFUNDED
    payment.refund_amount = amount
    payment.refund_reason = clean_text(reason)
    payment.refunded_at = timezone.now()
    payment.save(update_fields=['status', 'refund_amount', 'refund_reason', 'refunded_at'])

    inv.paid_amount = money(max(ZERO, inv.paid_amount - amount))
    inv.due_amount = money(max(ZERO, inv.total_amount - inv.paid_amount))
    inv.status = Invoice.STATUS_REFUNDED if inv.paid_amount <= 0 else Invoice.STATUS_PARTIAL
    inv.paid_at = None
    inv.save(update_fields=['paid_amount', 'due_amount', 'status', 'paid_at', 'updated_at'])

    log_action(user=user, action='payment_refund', object_type='invoice', object_id=inv.id,
               detail={'payment': payment.payment_number, 'amount': str(amount)})
    logger.info('payment %s refunded amount=%s; invoice %s now %s',
                payment.payment_number, amount, inv.invoice_number, inv.status)
    notify(
        inv.guardian, Notification.TYPE_PAYMENT_REFUNDED, '환불 완료',
        f'{inv.invoice_number} 청구서의 결제 {_won(amount)}원이 환불되었습니다.',
        hospital=inv.hospital,
        data={'invoiceId': inv.id, 'paymentId': payment.id, 'amount': str(amount)},
    )
    return payment


def list_payments(user, *, hospital_id=None, invoice_id=None, status=None, method=None,
                  start_date: Optional[dt.date] = None, end_date: Optional[dt.date] = None,
                  page: int = 1, limit: int = 20):
    qs = scope_by_user(Payment.objects.select_related('invoice'), user, guardian_field='invoice__guardian_id')
    if hospital_id:
        qs = qs.filter(hospital_id=hospital_id)
    if invoice_id:
        qs = qs.filter(invoice_id=invoice_id)
    if status:
        qs = qs.filter(status=status)
    if method:
        qs = qs.filter(method=method)
    if start_date:
        qs = qs.filter(paid_at__gte=day_start(start_date))
    if end_date:
        qs = qs.filter(paid_at__lte=day_end(end_date))
    rows, total = paginate(qs.order_by('-paid_at', '-id'), page, limit)
    data = []
    for p in rows:
        item = format_payment(p)
        item['invoiceNumber'] = p.invoice.invoice_number
        data.append(item)
    return data, total
