"""
Purchase orders: creation, approval workflow and receiving.

State machine::

    DRAFT -> PENDING -> APPROVED -> ORDERED -> PARTIAL -> RECEIVED
    (any state before RECEIVED) -> CANCELLED

Receiving posts one PURCHASE movement per received line to the
inventory ledger, inside the same transaction as the order update.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from core.exceptions import BadRequest
from core.models import InventoryTransaction, Notification, Product, PurchaseOrder, PurchaseOrderItem, Supplier
from core.permissions import ensure_hospital_scope
from core.services import inventory, sequences
from core.services.audit import log_action
from core.services.common import ZERO, clean_text, money, paginate, ts
from core.services.notifications import notify

logger = logging.getLogger(__name__)

REFERENCE_TYPE = 'PURCHASE_ORDER'


def tax_rate() -> Decimal:
    return Decimal(str(getattr(settings, 'PURCHASE_ORDER_TAX_RATE', '0.10')))


def format_order_item(i: PurchaseOrderItem) -> dict:
    return {
        'id': i.id,
        'product': {'id': i.product_id, 'code': i.product.code, 'name': i.product.name, 'unit': i.product.unit},
        'quantity': i.quantity,
        'unitPrice': i.unit_price,
        'amount': i.amount,
        'receivedQty': i.received_qty,
        'remainingQty': i.remaining_qty,
        'lotNumber': i.lot_number or None,
        'expirationDate': i.expiration_date.isoformat() if i.expiration_date else None,
    }


def format_order(o: PurchaseOrder, *, with_items: bool = True) -> dict:
    data = {
        'id': o.id,
        'orderNumber': o.order_number,
        'hospitalId': o.hospital_id,
        'supplier': {'id': o.supplier_id, 'code': o.supplier.code, 'name': o.supplier.name},
        'status': o.status,
        'orderDate': o.order_date.isoformat() if o.order_date else None,
        'expectedDate': o.expected_date.isoformat() if o.expected_date else None,
        'receivedDate': ts(o.received_date),
        'subtotal': o.subtotal,
        'taxAmount': o.tax_amount,
        'totalAmount': o.total_amount,
        'notes': o.notes,
        'internalNotes': o.internal_notes,
        'createdBy': o.created_by_id,
        'approvedBy': o.approved_by_id,
        'approvedAt': ts(o.approved_at),
        'createdAt': ts(o.created_at),
    }
    if with_items:
        data['items'] = [format_order_item(i) for i in o.items.select_related('product')]
    else:
        data['itemCount'] = o.items.count()
    return data


def get_order(user, order_id: int, *, lock: bool = False) -> PurchaseOrder:
    qs = PurchaseOrder.objects.select_for_update() if lock else PurchaseOrder.objects.select_related('supplier')
    o = qs.filter(id=order_id).first()
    if not o:
        raise NotFound('발주서를 찾을 수 없습니다.')
    ensure_hospital_scope(user, o.hospital_id)
    return o


def _get_supplier(hospital_id: int, supplier_id: int) -> Supplier:
    s = Supplier.objects.filter(id=supplier_id, hospital_id=hospital_id).first()
    if not s:
        raise NotFound('공급업체를 찾을 수 없습니다.')
    return s


@transaction.atomic
def create_purchase_order(user, hospital_id: int, data: dict) -> PurchaseOrder:
    supplier = _get_supplier(hospital_id, data['supplierId'])
    lines = data.get('items') or []
    if not lines:
        raise BadRequest('발주 품목이 없습니다.')
    products = {p.id: p for p in Product.objects.filter(hospital_id=hospital_id, id__in=[l['productId'] for l in lines])}

    items = []
    subtotal = ZERO
    for idx, line in enumerate(lines):
        product = products.get(line['productId'])
        if not product:
            raise NotFound('품목을 찾을 수 없습니다.')
        unit_price = money(line['unitPrice'])
        amount = money(unit_price * line['quantity'])
        subtotal += amount
        items.append(PurchaseOrderItem(
            product=product, quantity=line['quantity'], unit_price=unit_price, amount=amount, sort_order=idx,
        ))
    tax = money(subtotal * tax_rate())

    order = PurchaseOrder.objects.create(
        order_number=sequences.next_number(sequences.PURCHASE_ORDER, 'PO'),
        hospital_id=hospital_id,
        supplier=supplier,
        status=PurchaseOrder.STATUS_DRAFT if data.get('draft') else PurchaseOrder.STATUS_PENDING,
        order_date=data.get('orderDate'),
        expected_date=data.get('expectedDate'),
        subtotal=money(subtotal),
        tax_amount=tax,
        total_amount=money(subtotal + tax),
        notes=clean_text(data.get('notes')),
        internal_notes=clean_text(data.get('internalNotes')),
        created_by=user,
    )
    for item in items:
        item.order = order
    PurchaseOrderItem.objects.bulk_create(items)
    log_action(user=user, action='purchase_order_create', object_type='purchase_order', object_id=order.id,
               detail={'number': order.order_number, 'total': str(order.total_amount)})
    logger.info('purchase order %s created (%s) total=%s', order.order_number, order.status, order.total_amount)
    return order


@transaction.atomic
def update_purchase_order(user, order_id: int, data: dict) -> PurchaseOrder:
    order = get_order(user, order_id, lock=True)
    if order.status not in PurchaseOrder.EDITABLE_STATUSES:
        raise BadRequest('초안 또는 대기 상태의 발주서만 수정할 수 있습니다.')
    changed = []
    if data.get('supplierId'):
        order.supplier = _get_supplier(order.hospital_id, data['supplierId'])
        changed.append('supplier')
    for key, field in (('orderDate', 'order_date'), ('expectedDate', 'expected_date')):
        if data.get(key):
            setattr(order, field, data[key])
            changed.append(field)
    for key, field in (('notes', 'notes'), ('internalNotes', 'internal_notes')):
        if key in data:
            setattr(order, field, clean_text(data[key]))
            changed.append(field)
    if changed:
        order.save(update_fields=changed + ['updated_at'])
    return order


def _transition(user, order_id: int, allowed, target: str, message: str, action: str, **extra) -> PurchaseOrder:
    order = get_order(user, order_id, lock=True)
    if order.status not in allowed:
        logger.warning('purchase order %s: %s rejected from %s', order.order_number, action, order.status)
        raise BadRequest(message)
    previous = order.status
    order.status = target
    for field, value in extra.items():
        setattr(order, field, value)
    order.save(update_fields=['status', 'updated_at', *extra.keys()])
    log_action(user=user, action=f'purchase_order_{action}', object_type='purchase_order', object_id=order.id,
               detail={'from': previous, 'to': target})
    logger.info('purchase order %s %s -> %s', order.order_number, previous, target)
    return order


@transaction.atomic
def submit_purchase_order(user, order_id: int) -> PurchaseOrder:
    return _transition(user, order_id, (PurchaseOrder.STATUS_DRAFT,), PurchaseOrder.STATUS_PENDING,
                       '초안 상태의 발주서만 제출할 수 있습니다.', 'submit')


@transaction.atomic
def approve_purchase_order(user, order_id: int) -> PurchaseOrder:
    return _transition(user, order_id, (PurchaseOrder.STATUS_PENDING,), PurchaseOrder.STATUS_APPROVED,
                       '대기 상태의 발주서만 승인할 수 있습니다.', 'approve',
                       approved_by=user, approved_at=timezone.now())


@transaction.atomic
def mark_ordered(user, order_id: int) -> PurchaseOrder:
    fields = {}
    order = get_order(user, order_id)
    if not order.order_date:
        fields['order_date'] = timezone.localdate()
    return _transition(user, order_id, (PurchaseOrder.STATUS_APPROVED,), PurchaseOrder.STATUS_ORDERED,
                       '승인된 발주서만 주문 처리할 수 있습니다.', 'order', **fields)


@transaction.atomic
def cancel_purchase_order(user, order_id: int) -> PurchaseOrder:
    allowed = [s for s, _ in PurchaseOrder.STATUS_CHOICES
               if s not in (PurchaseOrder.STATUS_RECEIVED, PurchaseOrder.STATUS_CANCELLED)]
    return _transition(user, order_id, allowed, PurchaseOrder.STATUS_CANCELLED,
                       '입고 완료 또는 취소된 발주서는 취소할 수 없습니다.', 'cancel')


@transaction.atomic
def receive_purchase_order(user, order_id: int, lines: list[dict], notes: str = '') -> PurchaseOrder:
    """Record received quantities for some or all items of an approved order.

    Each line is ``{'itemId', 'receivedQuantity', 'lotNumber'?, 'expirationDate'?}``.
    A line for an item that is not on this order, or one that would take
    the item's received quantity above what was ordered, fails the whole
    receipt.
    """
    order = get_order(user, order_id, lock=True)
    if order.status not in PurchaseOrder.RECEIVABLE_STATUSES:
        raise BadRequest('승인된 발주서만 입고 처리할 수 있습니다.')
    if not lines:
        raise BadRequest('입고할 품목이 없습니다.')

    items = {i.id: i for i in PurchaseOrderItem.objects.select_for_update().filter(order=order)}
    for line in lines:
        item = items.get(line['itemId'])
        if item is None:
            raise BadRequest('발주서에 없는 품목입니다.')
        qty = int(line['receivedQuantity'])
        if qty < 1:
            raise BadRequest('입고 수량은 1 이상이어야 합니다.')
        if item.received_qty + qty > item.quantity:
            logger.warning('over-receipt on %s item %s: %s + %s > %s',
                           order.order_number, item.id, item.received_qty, qty, item.quantity)
            raise BadRequest('입고 수량이 잔여 발주 수량을 초과합니다.')

        item.received_qty += qty
        if line.get('lotNumber'):
            item.lot_number = line['lotNumber']
        if line.get('expirationDate'):
            item.expiration_date = line['expirationDate']
        item.save(update_fields=['received_qty', 'lot_number', 'expiration_date'])

        inventory.create_transaction(
            user, order.hospital_id, item.product_id, InventoryTransaction.TYPE_PURCHASE, qty,
            unit_cost=item.unit_price,
            lot_number=line.get('lotNumber') or '',
            expiration_date=line.get('expirationDate'),
            reference_type=REFERENCE_TYPE,
            reference_id=str(order.id),
            notes=notes,
        )

    all_received = all(i.received_qty >= i.quantity for i in items.values())
    order.status = PurchaseOrder.STATUS_RECEIVED if all_received else PurchaseOrder.STATUS_PARTIAL
    order.received_date = timezone.now() if all_received else None
    order.save(update_fields=['status', 'received_date', 'updated_at'])

    log_action(user=user, action='purchase_order_receive', object_type='purchase_order', object_id=order.id,
               detail={'status': order.status, 'lines': len(lines)})
    logger.info('purchase order %s received %s line(s), now %s', order.order_number, len(lines), order.status)
    if order.created_by_id:
        notify(
            order.created_by, Notification.TYPE_PURCHASE_ORDER_RECEIVED, '발주 입고',
            f'{order.order_number} 발주서가 {"입고 완료" if all_received else "부분 입고"}되었습니다.',
            hospital=order.hospital,
            data={'purchaseOrderId': order.id, 'status': order.status},
        )
    return order


def list_purchase_orders(hospital_id: int, *, status: Optional[str] = None, supplier_id=None,
                         page: int = 1, limit: int = 20):
    qs = PurchaseOrder.objects.filter(hospital_id=hospital_id).select_related('supplier')
    if status:
        qs = qs.filter(status=status)
    if supplier_id:
        qs = qs.filter(supplier_id=supplier_id)
    rows, total = paginate(qs.order_by('-created_at', '-id'), page, limit)
    return [format_order(o, with_items=False) for o in rows], total
