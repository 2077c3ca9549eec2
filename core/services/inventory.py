"""
Inventory ledger.

Every change to an ``InventoryStock`` row is paired with exactly one
append-only ``InventoryTransaction`` recording the quantity before and
after the movement.  The stock row is locked while it is read and
rewritten; an outbound movement that would take the quantity below
zero is refused before anything is written.
"""
from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F, Q, Sum
from django.utils import timezone
from rest_framework.exceptions import NotFound

from core.exceptions import BadRequest
from core.models import (
    HospitalStaff,
    InventoryStock,
    InventoryTransaction,
    Notification,
    Product,
    PurchaseOrder,
)
from core.services import sequences
from core.services.audit import log_action
from core.services.common import ZERO, clean_text, day_end, day_start, money, paginate, ts
from core.services.notifications import notify_many

logger = logging.getLogger(__name__)
User = get_user_model()

EXPIRY_WINDOW_DAYS = 30


def is_inbound(txn_type: str) -> bool:
    return txn_type in InventoryTransaction.INBOUND_TYPES


def format_transaction(t: InventoryTransaction) -> dict:
    return {
        'id': t.id,
        'transactionNumber': t.transaction_number,
        'hospitalId': t.hospital_id,
        'product': {'id': t.product_id, 'code': t.product.code, 'name': t.product.name, 'unit': t.product.unit},
        'type': t.type,
        'quantity': t.quantity,
        'previousQty': t.previous_qty,
        'currentQty': t.current_qty,
        'unitCost': t.unit_cost,
        'totalCost': t.total_cost,
        'lotNumber': t.lot_number or None,
        'expirationDate': t.expiration_date.isoformat() if t.expiration_date else None,
        'referenceType': t.reference_type or None,
        'referenceId': t.reference_id or None,
        'notes': t.notes,
        'processedBy': t.processed_by_id,
        'processedAt': ts(t.processed_at),
    }


def format_stock(s: InventoryStock) -> dict:
    return {
        'id': s.id,
        'hospitalId': s.hospital_id,
        'product': {
            'id': s.product_id,
            'code': s.product.code,
            'name': s.product.name,
            'type': s.product.type,
            'unit': s.product.unit,
            'minStockLevel': s.product.min_stock_level,
            'sellingPrice': s.product.selling_price,
        },
        'lotNumber': s.lot_number or None,
        'quantity': s.quantity,
        'reservedQty': s.reserved_qty,
        'availableQty': s.available_qty,
        'expirationDate': s.expiration_date.isoformat() if s.expiration_date else None,
        'lastCountedAt': ts(s.last_counted_at),
    }


def _get_product(hospital_id: int, product_id: int) -> Product:
    product = Product.objects.filter(id=product_id, hospital_id=hospital_id).first()
    if not product:
        raise NotFound('품목을 찾을 수 없습니다.')
    return product


def _lock_stock(hospital_id: int, product_id: int, lot_number: str, *, create: bool) -> Optional[InventoryStock]:
    qs = InventoryStock.objects.select_for_update()
    if create:
        stock, _ = qs.get_or_create(hospital_id=hospital_id, product_id=product_id, lot_number=lot_number)
        return stock
    return qs.filter(hospital_id=hospital_id, product_id=product_id, lot_number=lot_number).first()


def total_stock(product: Product) -> int:
    return InventoryStock.objects.filter(product=product).aggregate(n=Sum('quantity'))['n'] or 0


def _stock_managers(hospital_id: int):
    ids = set(User.objects.filter(hospital_id=hospital_id, role='hospital_admin', is_active=True)
              .values_list('id', flat=True))
    ids.update(HospitalStaff.objects.filter(
        hospital_id=hospital_id, is_active=True,
        position__in=[HospitalStaff.POSITION_OWNER, HospitalStaff.POSITION_MANAGER],
    ).values_list('user_id', flat=True))
    return User.objects.filter(id__in=ids)


def check_low_stock(product: Product) -> bool:
    """Alert the hospital's managers when the product is at or below its minimum level."""
    if not getattr(settings, 'LOW_STOCK_NOTIFY', True) or product.min_stock_level <= 0:
        return False
    remaining = total_stock(product)
    if remaining > product.min_stock_level:
        return False
    notify_many(
        _stock_managers(product.hospital_id), Notification.TYPE_LOW_STOCK_ALERT, '재고 부족 알림',
        f'{product.name}({product.code}) 재고가 {remaining}{product.unit} 남았습니다. (최소 {product.min_stock_level})',
        hospital=product.hospital,
        data={'productId': product.id, 'totalStock': remaining, 'minStockLevel': product.min_stock_level},
    )
    logger.info('low stock alert for product %s (%s <= %s)', product.code, remaining, product.min_stock_level)
    return True


@transaction.atomic
def create_transaction(user, hospital_id: int, product_id: int, txn_type: str, quantity: int, *,
                       unit_cost=None, lot_number: str = '', expiration_date: Optional[dt.date] = None,
                       reference_type: str = '', reference_id: str = '', notes: str = '') -> InventoryTransaction:
    qty = abs(int(quantity))
    if qty < 1:
        raise BadRequest('수량은 1 이상이어야 합니다')
    product = _get_product(hospital_id, product_id)
    lot = lot_number or ''
    inbound = is_inbound(txn_type)

    stock = _lock_stock(hospital_id, product.id, lot, create=inbound)
    previous = stock.quantity if stock else 0
    current = previous + qty if inbound else previous - qty
    if current < 0:
        logger.warning('stock movement rejected: %s %s x%s (have %s)', txn_type, product.code, qty, previous)
        raise BadRequest('재고가 부족합니다')

    stock.quantity = current
    stock.available_qty = current - stock.reserved_qty
    if expiration_date:
        stock.expiration_date = expiration_date
    stock.save()

    cost = money(unit_cost) if unit_cost is not None else None
    txn = InventoryTransaction.objects.create(
        transaction_number=sequences.next_number(sequences.INVENTORY_TRANSACTION, 'TXN'),
        hospital_id=hospital_id,
        product=product,
        type=txn_type,
        quantity=qty if inbound else -qty,
        previous_qty=previous,
        current_qty=current,
        unit_cost=cost,
        total_cost=money(cost * qty) if cost is not None else None,
        lot_number=lot,
        expiration_date=expiration_date,
        reference_type=reference_type or '',
        reference_id=str(reference_id or ''),
        notes=clean_text(notes),
        processed_by=user if getattr(user, 'is_authenticated', False) else None,
    )
    logger.info('stock %s %s %+d -> %s (lot=%s)', txn.transaction_number, product.code, txn.quantity, current, lot or '-')
    if not inbound:
        check_low_stock(product)
    return txn


@transaction.atomic
def adjust_stock(user, hospital_id: int, product_id: int, new_quantity: int, reason: str = '', *,
                 lot_number: str = '') -> InventoryStock:
    if new_quantity < 0:
        raise BadRequest('재고 수량은 0 이상이어야 합니다')
    product = _get_product(hospital_id, product_id)
    lot = lot_number or ''
    stock = _lock_stock(hospital_id, product.id, lot, create=True)
    previous = stock.quantity
    diff = new_quantity - previous

    stock.quantity = new_quantity
    stock.available_qty = new_quantity - stock.reserved_qty
    stock.last_counted_at = timezone.now()
    stock.save()

    if diff == 0:
        # count confirmed, nothing moved
        log_action(user=user, action='stock_count', object_type='product', object_id=product.id,
                   detail={'quantity': new_quantity, 'lot': lot})
        logger.info('stock count confirmed %s = %s (lot=%s)', product.code, new_quantity, lot or '-')
        return stock

    txn = InventoryTransaction.objects.create(
        transaction_number=sequences.next_number(sequences.INVENTORY_TRANSACTION, 'TXN'),
        hospital_id=hospital_id,
        product=product,
        type=InventoryTransaction.TYPE_ADJUSTMENT,
        quantity=diff,
        previous_qty=previous,
        current_qty=new_quantity,
        lot_number=lot,
        notes=clean_text(reason),
        processed_by=user,
    )
    log_action(user=user, action='stock_adjust', object_type='product', object_id=product.id,
               detail={'txn': txn.transaction_number, 'from': previous, 'to': new_quantity, 'lot': lot})
    logger.info('stock adjusted %s %s -> %s (lot=%s)', product.code, previous, new_quantity, lot or '-')
    if diff < 0:
        check_low_stock(product)
    return stock


def list_stocks(hospital_id: int, *, product_id=None, low_stock: bool = False, expiring_soon: bool = False) -> list[dict]:
    qs = InventoryStock.objects.filter(hospital_id=hospital_id).select_related('product')
    if product_id:
        qs = qs.filter(product_id=product_id)
    if low_stock:
        qs = qs.filter(quantity__lte=F('product__min_stock_level'))
    if expiring_soon:
        limit_day = timezone.localdate() + dt.timedelta(days=EXPIRY_WINDOW_DAYS)
        qs = qs.filter(expiration_date__isnull=False, expiration_date__lte=limit_day)
    return [format_stock(s) for s in qs.order_by('product__name', 'expiration_date', 'id')]


def list_transactions(hospital_id: int, *, product_id=None, txn_type=None,
                      start_date: Optional[dt.date] = None, end_date: Optional[dt.date] = None,
                      page: int = 1, limit: int = 20):
    qs = InventoryTransaction.objects.filter(hospital_id=hospital_id).select_related('product')
    if product_id:
        qs = qs.filter(product_id=product_id)
    if txn_type:
        qs = qs.filter(type=txn_type)
    if start_date:
        qs = qs.filter(processed_at__gte=day_start(start_date))
    if end_date:
        qs = qs.filter(processed_at__lte=day_end(end_date))
    rows, total = paginate(qs.order_by('-processed_at', '-id'), page, limit)
    return [format_transaction(t) for t in rows], total


def inventory_stats(hospital_id: int) -> dict:
    products = Product.objects.filter(hospital_id=hospital_id)
    low = (products.filter(is_active=True)
           .annotate(total=Sum('stocks__quantity'))
           .filter(Q(total__isnull=True) | Q(total__lte=F('min_stock_level')))
           .count())
    today = timezone.localdate()
    expiring = InventoryStock.objects.filter(
        hospital_id=hospital_id,
        expiration_date__gte=today,
        expiration_date__lte=today + dt.timedelta(days=EXPIRY_WINDOW_DAYS),
    ).count()
    value = ZERO
    for qty, cost in InventoryStock.objects.filter(hospital_id=hospital_id).values_list('quantity', 'product__cost_price'):
        value += Decimal(qty) * (cost or ZERO)
    recent = InventoryTransaction.objects.filter(
        hospital_id=hospital_id, processed_at__gte=timezone.now() - dt.timedelta(days=7),
    ).count()
    pending = PurchaseOrder.objects.filter(hospital_id=hospital_id, status__in=PurchaseOrder.OPEN_STATUSES).count()
    return {
        'totalProducts': products.count(),
        'activeProducts': products.filter(is_active=True).count(),
        'lowStockProducts': low,
        'expiringProducts': expiring,
        'totalStockValue': money(value),
        'recentTransactions': recent,
        'pendingOrders': pending,
    }
