"""
Invoice service: invoices, their items and derived totals.

Totals are always rebuilt from the items by :func:`recalculate_invoice`
while the invoice row is locked, so the following hold after every
mutation::

    item.amount       = quantity * unitPrice
    item.finalAmount  = max(0, amount * (1 - discountRate/100) - discountAmount)
    subtotal          = sum(item.amount)
    discountAmount    = sum(item.amount - item.finalAmount)
    totalAmount       = subtotal - discountAmount
    dueAmount         = max(0, totalAmount - paidAmount)
"""
from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from core.exceptions import BadRequest
from core.models import Animal, Hospital, Invoice, InvoiceItem, Payment
from core.services import sequences
from core.services.audit import log_action
from core.services.common import ZERO, clean_text, day_end, day_start, money, paginate, ts
from core.services.hospitals import staff_hospital_ids

logger = logging.getLogger(__name__)
User = get_user_model()

STAFF_ROLES = ('hospital_admin', 'vet', 'staff')
UPDATE_ROLES = ('super', 'hospital_admin', 'staff')
DELETE_ROLES = ('super', 'hospital_admin')


def compute_item_amounts(quantity: int, unit_price, discount_rate=None, discount_amount=None) -> tuple[Decimal, Decimal]:
    """Return ``(amount, final_amount)`` for one line."""
    amount = money(Decimal(quantity) * money(unit_price))
    rate = Decimal(str(discount_rate or 0))
    final = amount * (Decimal(1) - rate / Decimal(100)) - money(discount_amount)
    return amount, money(max(ZERO, final))


def format_item(item: InvoiceItem) -> dict:
    return {
        'id': item.id,
        'invoiceId': item.invoice_id,
        'type': item.type,
        'name': item.name,
        'description': item.description,
        'quantity': item.quantity,
        'unitPrice': item.unit_price,
        'amount': item.amount,
        'discountRate': item.discount_rate,
        'discountAmount': item.discount_amount,
        'finalAmount': item.final_amount,
        'sortOrder': item.sort_order,
    }


def format_payment(p: Payment) -> dict:
    return {
        'id': p.id,
        'paymentNumber': p.payment_number,
        'invoiceId': p.invoice_id,
        'hospitalId': p.hospital_id,
        'amount': p.amount,
        'method': p.method,
        'status': p.status,
        'cardCompany': p.card_company,
        'cardApprovalNo': p.card_approval_no,
        'cardInstallment': p.card_installment,
        'notes': p.notes,
        'paidAt': ts(p.paid_at),
        'refundAmount': p.refund_amount,
        'refundReason': p.refund_reason,
        'refundedAt': ts(p.refunded_at),
        'processedBy': p.processed_by_id,
    }


def format_invoice(inv: Invoice, *, detail: bool = True, internal: bool = False) -> dict:
    data = {
        'id': inv.id,
        'invoiceNumber': inv.invoice_number,
        'hospital': {'id': inv.hospital_id, 'name': inv.hospital.name},
        'animal': {'id': inv.animal_id, 'code': inv.animal.code, 'name': inv.animal.name, 'species': inv.animal.species},
        'guardian': {
            'id': inv.guardian_id,
            'name': inv.guardian.get_full_name() or inv.guardian.username,
            'phone': inv.guardian.phone,
        },
        'status': inv.status,
        'subtotal': inv.subtotal,
        'discountAmount': inv.discount_amount,
        'totalAmount': inv.total_amount,
        'paidAmount': inv.paid_amount,
        'dueAmount': inv.due_amount,
        'issueDate': ts(inv.issue_date),
        'dueDate': inv.due_date.isoformat() if inv.due_date else None,
        'paidAt': ts(inv.paid_at),
        'notes': inv.notes,
        'createdAt': ts(inv.created_at),
        'items': [format_item(i) for i in inv.items.all()],
    }
    if internal:
        data['internalNotes'] = inv.internal_notes
    if detail:
        data['payments'] = [format_payment(p) for p in inv.payments.order_by('-created_at', '-id')]
    return data


def is_staff_of(user, hospital_id: int) -> bool:
    return getattr(user, 'role', '') in STAFF_ROLES and hospital_id in staff_hospital_ids(user)


def ensure_can_view(user, invoice: Invoice) -> None:
    role = getattr(user, 'role', '')
    if role == 'super':
        return
    if role == 'guardian' and invoice.guardian_id == user.id:
        return
    if is_staff_of(user, invoice.hospital_id):
        return
    raise PermissionDenied('청구서를 조회할 권한이 없습니다')


def ensure_can_edit(user, invoice: Invoice, roles=UPDATE_ROLES, message: str = '청구서를 수정할 권한이 없습니다') -> None:
    role = getattr(user, 'role', '')
    if role not in roles:
        raise PermissionDenied(message)
    if role != 'super' and invoice.hospital_id not in staff_hospital_ids(user):
        raise PermissionDenied(message)


def get_invoice(invoice_id: int, *, lock: bool = False) -> Invoice:
    qs = Invoice.objects.select_related('hospital', 'animal', 'guardian')
    if lock:
        qs = Invoice.objects.select_for_update()
    inv = qs.filter(id=invoice_id).first()
    if not inv:
        raise NotFound('청구서를 찾을 수 없습니다')
    return inv


def recalculate_invoice(invoice: Invoice) -> Invoice:
    """Re-sum the items and rewrite the invoice totals. Caller holds the row lock."""
    subtotal = ZERO
    discount = ZERO
    for item in invoice.items.all():
        subtotal += item.amount
        discount += item.amount - item.final_amount
    invoice.subtotal = money(subtotal)
    invoice.discount_amount = money(discount)
    invoice.total_amount = money(subtotal - discount)
    invoice.due_amount = money(max(ZERO, invoice.total_amount - invoice.paid_amount))
    invoice.save(update_fields=['subtotal', 'discount_amount', 'total_amount', 'due_amount', 'updated_at'])
    return invoice


def _build_item(invoice: Invoice, data: dict, sort_order: int) -> InvoiceItem:
    amount, final = compute_item_amounts(
        data['quantity'], data['unitPrice'], data.get('discountRate'), data.get('discountAmount'),
    )
    return InvoiceItem(
        invoice=invoice,
        type=data.get('type') or 'OTHER',
        name=clean_text(data['name']),
        description=clean_text(data.get('description')),
        quantity=data['quantity'],
        unit_price=money(data['unitPrice']),
        amount=amount,
        discount_rate=Decimal(str(data.get('discountRate') or 0)),
        discount_amount=money(data.get('discountAmount')),
        final_amount=final,
        sort_order=data['sortOrder'] if data.get('sortOrder') is not None else sort_order,
    )


@transaction.atomic
def create_invoice(user, data: dict) -> Invoice:
    hospital = Hospital.objects.filter(id=data['hospitalId']).first()
    if not hospital:
        raise NotFound('병원을 찾을 수 없습니다')
    if user.role != 'super' and not is_staff_of(user, hospital.id):
        raise PermissionDenied('청구서를 생성할 권한이 없습니다')
    animal = Animal.objects.filter(id=data['animalId']).first()
    if not animal:
        raise NotFound('동물을 찾을 수 없습니다')
    guardian = User.objects.filter(id=data['guardianId']).first()
    if not guardian:
        raise NotFound('보호자를 찾을 수 없습니다')

    inv = Invoice.objects.create(
        invoice_number=sequences.next_number(sequences.INVOICE, 'INV'),
        hospital=hospital,
        animal=animal,
        guardian=guardian,
        status=Invoice.STATUS_DRAFT,
        due_date=data.get('dueDate'),
        notes=clean_text(data.get('notes')),
        internal_notes=clean_text(data.get('internalNotes')),
        created_by=user,
    )
    InvoiceItem.objects.bulk_create([_build_item(inv, item, idx) for idx, item in enumerate(data['items'])])
    recalculate_invoice(inv)
    log_action(user=user, action='invoice_create', object_type='invoice', object_id=inv.id,
               detail={'number': inv.invoice_number, 'total': str(inv.total_amount)})
    logger.info('invoice %s created total=%s', inv.invoice_number, inv.total_amount)
    return inv


@transaction.atomic
def update_invoice(user, invoice_id: int, data: dict) -> Invoice:
    inv = get_invoice(invoice_id, lock=True)
    ensure_can_edit(user, inv)
    if inv.status in Invoice.SETTLED_STATUSES:
        raise BadRequest('결제가 완료된 청구서는 수정할 수 없습니다')

    changed = []
    if data.get('dueDate'):
        inv.due_date = data['dueDate']
        changed.append('due_date')
    new_status = data.get('status')
    if new_status and new_status != inv.status:
        if new_status not in Invoice.MANUAL_STATUSES:
            raise BadRequest('해당 상태로 직접 변경할 수 없습니다')
        if inv.status == Invoice.STATUS_CANCELLED:
            raise BadRequest('취소된 청구서의 상태는 변경할 수 없습니다')
        if new_status == Invoice.STATUS_CANCELLED and inv.paid_amount > 0:
            raise BadRequest('결제가 진행된 청구서는 취소할 수 없습니다')
        # once money has been taken only OVERDUE may be set by hand
        if inv.paid_amount > 0 and new_status != Invoice.STATUS_OVERDUE:
            raise BadRequest('결제가 진행된 청구서는 연체 상태로만 변경할 수 있습니다')
        inv.status = new_status
        changed.append('status')
    if 'notes' in data:
        inv.notes = clean_text(data['notes'])
        changed.append('notes')
    if 'internalNotes' in data:
        inv.internal_notes = clean_text(data['internalNotes'])
        changed.append('internal_notes')
    if changed:
        inv.save(update_fields=changed + ['updated_at'])
        log_action(user=user, action='invoice_update', object_type='invoice', object_id=inv.id,
                   detail={'fields': changed, 'status': inv.status})
    return inv


@transaction.atomic
def delete_invoice(user, invoice_id: int) -> None:
    inv = get_invoice(invoice_id, lock=True)
    ensure_can_edit(user, inv, DELETE_ROLES, '청구서를 삭제할 권한이 없습니다')
    if inv.paid_amount > 0:
        raise BadRequest('결제가 진행된 청구서는 삭제할 수 없습니다')
    number = inv.invoice_number
    # refunded payments are removed together with the invoice
    inv.payments.all().delete()
    inv.delete()
    log_action(user=user, action='invoice_delete', object_type='invoice', object_id=invoice_id,
               detail={'number': number})
    logger.info('invoice %s deleted by user=%s', number, user.id)


@transaction.atomic
def add_item(user, invoice_id: int, data: dict) -> InvoiceItem:
    inv = get_invoice(invoice_id, lock=True)
    ensure_can_edit(user, inv)
    if inv.status in Invoice.LOCKED_STATUSES:
        raise BadRequest('이 청구서에는 항목을 추가할 수 없습니다')
    item = _build_item(inv, data, inv.items.count())
    item.save()
    recalculate_invoice(inv)
    return item


def _get_item_locked(item_id: int) -> tuple[InvoiceItem, Invoice]:
    item = InvoiceItem.objects.filter(id=item_id).first()
    if not item:
        raise NotFound('항목을 찾을 수 없습니다')
    inv = get_invoice(item.invoice_id, lock=True)
    return item, inv


@transaction.atomic
def update_item(user, item_id: int, data: dict) -> InvoiceItem:
    item, inv = _get_item_locked(item_id)
    ensure_can_edit(user, inv)
    if inv.status in Invoice.LOCKED_STATUSES:
        raise BadRequest('이 청구서의 항목은 수정할 수 없습니다')
    for key, field in (('type', 'type'), ('sortOrder', 'sort_order'), ('quantity', 'quantity')):
        if data.get(key) is not None:
            setattr(item, field, data[key])
    if 'name' in data:
        item.name = clean_text(data['name'])
    if 'description' in data:
        item.description = clean_text(data['description'])
    if data.get('unitPrice') is not None:
        item.unit_price = money(data['unitPrice'])
    if data.get('discountRate') is not None:
        item.discount_rate = Decimal(str(data['discountRate']))
    if data.get('discountAmount') is not None:
        item.discount_amount = money(data['discountAmount'])
    item.amount, item.final_amount = compute_item_amounts(
        item.quantity, item.unit_price, item.discount_rate, item.discount_amount,
    )
    item.save()
    recalculate_invoice(inv)
    return item


@transaction.atomic
def delete_item(user, item_id: int) -> Invoice:
    item, inv = _get_item_locked(item_id)
    ensure_can_edit(user, inv)
    if inv.status in Invoice.LOCKED_STATUSES:
        raise BadRequest('이 청구서의 항목은 삭제할 수 없습니다')
    item.delete()
    return recalculate_invoice(inv)


def scope_by_user(qs, user, *, guardian_field: Optional[str] = 'guardian_id'):
    """Limit a queryset with a ``hospital_id`` column to what the user may see."""
    role = getattr(user, 'role', '')
    if role == 'super':
        return qs
    if role == 'guardian':
        return qs.filter(**{guardian_field: user.id}) if guardian_field else qs.none()
    if role in STAFF_ROLES:
        return qs.filter(hospital_id__in=staff_hospital_ids(user))
    return qs.none()


def list_invoices(user, *, hospital_id=None, guardian_id=None, animal_id=None, status=None,
                  start_date: Optional[dt.date] = None, end_date: Optional[dt.date] = None,
                  page: int = 1, limit: int = 20):
    qs = scope_by_user(Invoice.objects.select_related('hospital', 'animal', 'guardian'), user)
    if hospital_id:
        qs = qs.filter(hospital_id=hospital_id)
    if guardian_id:
        qs = qs.filter(guardian_id=guardian_id)
    if animal_id:
        qs = qs.filter(animal_id=animal_id)
    if status:
        qs = qs.filter(status=status)
    if start_date:
        qs = qs.filter(issue_date__gte=day_start(start_date))
    if end_date:
        qs = qs.filter(issue_date__lte=day_end(end_date))
    rows, total = paginate(qs.prefetch_related('items').order_by('-issue_date', '-id'), page, limit)
    return [format_invoice(i, detail=False) for i in rows], total


def invoice_stats(hospital_id: int, start_date: Optional[dt.date] = None, end_date: Optional[dt.date] = None) -> dict:
    invoices = Invoice.objects.filter(hospital_id=hospital_id)
    payments = Payment.objects.filter(hospital_id=hospital_id, status=Payment.STATUS_COMPLETED)
    paid_invoices = invoices.filter(status=Invoice.STATUS_PAID)
    if start_date:
        invoices = invoices.filter(issue_date__gte=day_start(start_date))
        payments = payments.filter(paid_at__gte=day_start(start_date))
        paid_invoices = paid_invoices.filter(paid_at__gte=day_start(start_date))
    if end_date:
        invoices = invoices.filter(issue_date__lte=day_end(end_date))
        payments = payments.filter(paid_at__lte=day_end(end_date))
        paid_invoices = paid_invoices.filter(paid_at__lte=day_end(end_date))

    totals = invoices.aggregate(n=Count('id'), amount=Sum('total_amount'))
    paid = paid_invoices.aggregate(n=Count('id'), amount=Sum('total_amount'))
    unpaid = invoices.filter(
        status__in=[Invoice.STATUS_PENDING, Invoice.STATUS_PARTIAL, Invoice.STATUS_OVERDUE]
    ).aggregate(n=Count('id'), amount=Sum('due_amount'))

    by_status = {}
    for row in invoices.values('status').annotate(n=Count('id'), total=Sum('total_amount'), paid=Sum('paid_amount')):
        by_status[row['status']] = {
            'count': row['n'],
            'totalAmount': row['total'] or ZERO,
            'paidAmount': row['paid'] or ZERO,
        }
    by_method = {}
    for row in payments.values('method').annotate(n=Count('id'), amount=Sum('amount')):
        by_method[row['method']] = {'count': row['n'], 'amount': row['amount'] or ZERO}

    since = timezone.now() - dt.timedelta(days=30)
    daily: dict[str, Decimal] = {}
    recent = Payment.objects.filter(
        hospital_id=hospital_id, status=Payment.STATUS_COMPLETED, paid_at__gte=since,
    ).values_list('paid_at', 'amount')
    for paid_at, amount in recent:
        key = timezone.localtime(paid_at).date().isoformat()
        daily[key] = daily.get(key, ZERO) + amount

    return {
        'summary': {
            'totalInvoiceCount': totals['n'],
            'totalInvoiceAmount': totals['amount'] or ZERO,
            'paidInvoiceCount': paid['n'],
            'paidAmount': paid['amount'] or ZERO,
            'unpaidInvoiceCount': unpaid['n'],
            'unpaidAmount': unpaid['amount'] or ZERO,
        },
        'byStatus': by_status,
        'byPaymentMethod': by_method,
        'dailySales': dict(sorted(daily.items())),
    }
