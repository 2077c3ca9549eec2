"""
Product catalog: categories, suppliers and products of a hospital.

Supplier codes (``SUP-001``) and product codes (``MED-0001``) are
numbered per hospital; product codes are numbered per type prefix.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone
from rest_framework.exceptions import NotFound

from core.exceptions import BadRequest
from core.models import Product, ProductCategory, Supplier
from core.permissions import ensure_hospital_scope
from core.services.common import clean_text, paginate, ts

logger = logging.getLogger(__name__)

PRODUCT_PREFIXES = {
    'MEDICATION': 'MED',
    'VACCINE': 'VAC',
    'SUPPLIES': 'SUP',
    'EQUIPMENT': 'EQP',
    'FOOD': 'FOD',
    'SUPPLEMENT': 'SMP',
    'OTHER': 'OTH',
}

SUPPLIER_FIELDS = {
    'name': 'name',
    'businessNumber': 'business_number',
    'contactPerson': 'contact_person',
    'phone': 'phone',
    'email': 'email',
    'address': 'address',
    'paymentTerms': 'payment_terms',
    'notes': 'notes',
    'status': 'status',
}

PRODUCT_FIELDS = {
    'name': 'name',
    'categoryId': 'category_id',
    'supplierId': 'supplier_id',
    'unit': 'unit',
    'barcode': 'barcode',
    'costPrice': 'cost_price',
    'sellingPrice': 'selling_price',
    'minStockLevel': 'min_stock_level',
    'reorderPoint': 'reorder_point',
    'isActive': 'is_active',
}


def get_scoped(qs, pk: int, user, message: str):
    """Fetch ``pk`` from ``qs`` and check the user may act on its hospital."""
    obj = qs.filter(pk=pk).first()
    if not obj:
        raise NotFound(message)
    ensure_hospital_scope(user, obj.hospital_id)
    return obj


def _apply(obj, data: dict, mapping: dict, text_fields=('name', 'notes', 'address')) -> list[str]:
    changed = []
    for key, field in mapping.items():
        if key not in data:
            continue
        value = data[key]
        if field in text_fields:
            value = clean_text(value)
        elif value is None and not field.endswith('_id'):
            value = ''
        setattr(obj, field, value)
        changed.append(field)
    return changed


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

def format_category(c: ProductCategory) -> dict:
    return {
        'id': c.id,
        'hospitalId': c.hospital_id,
        'name': c.name,
        'description': c.description,
        'parentId': c.parent_id,
        'sortOrder': c.sort_order,
        'isActive': c.is_active,
        'productCount': getattr(c, 'product_count', None),
    }


def list_categories(hospital_id: int) -> list[dict]:
    qs = ProductCategory.objects.filter(hospital_id=hospital_id).annotate(product_count=Count('products'))
    return [format_category(c) for c in qs.order_by('sort_order', 'name')]


def _check_parent(hospital_id: int, parent_id: Optional[int], self_id: Optional[int] = None) -> None:
    if not parent_id:
        return
    if parent_id == self_id:
        raise BadRequest('자기 자신을 상위 카테고리로 지정할 수 없습니다.')
    if not ProductCategory.objects.filter(id=parent_id, hospital_id=hospital_id).exists():
        raise NotFound('상위 카테고리를 찾을 수 없습니다.')


def create_category(hospital_id: int, data: dict) -> ProductCategory:
    _check_parent(hospital_id, data.get('parentId'))
    return ProductCategory.objects.create(
        hospital_id=hospital_id,
        name=clean_text(data['name']),
        description=clean_text(data.get('description')),
        parent_id=data.get('parentId'),
        sort_order=data.get('sortOrder') or 0,
        is_active=data.get('isActive', True),
    )


def update_category(user, category_id: int, data: dict) -> ProductCategory:
    c = get_scoped(ProductCategory.objects.all(), category_id, user, '카테고리를 찾을 수 없습니다.')
    if 'parentId' in data:
        _check_parent(c.hospital_id, data['parentId'], c.id)
    changed = _apply(c, data, {
        'name': 'name', 'description': 'description', 'parentId': 'parent_id',
        'sortOrder': 'sort_order', 'isActive': 'is_active',
    }, text_fields=('name', 'description'))
    if changed:
        c.save(update_fields=changed)
    return c


def delete_category(user, category_id: int) -> None:
    c = get_scoped(ProductCategory.objects.all(), category_id, user, '카테고리를 찾을 수 없습니다.')
    if c.products.exists() or c.children.exists():
        raise BadRequest('하위 품목 또는 카테고리가 있어 삭제할 수 없습니다.')
    c.delete()


# ---------------------------------------------------------------------------
# Suppliers
# ---------------------------------------------------------------------------

def format_supplier(s: Supplier) -> dict:
    return {
        'id': s.id,
        'hospitalId': s.hospital_id,
        'code': s.code,
        'name': s.name,
        'businessNumber': s.business_number,
        'contactPerson': s.contact_person,
        'phone': s.phone,
        'email': s.email,
        'address': s.address,
        'paymentTerms': s.payment_terms,
        'notes': s.notes,
        'status': s.status,
        'createdAt': ts(s.created_at),
    }


def list_suppliers(hospital_id: int, *, status: Optional[str] = None, search: Optional[str] = None) -> list[dict]:
    qs = Supplier.objects.filter(hospital_id=hospital_id)
    if status:
        qs = qs.filter(status=status)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(code__icontains=search) | Q(contact_person__icontains=search))
    qs = qs.annotate(product_count=Count('products', distinct=True), order_count=Count('purchase_orders', distinct=True))
    data = []
    for s in qs.order_by('name'):
        item = format_supplier(s)
        item['productCount'] = s.product_count
        item['purchaseOrderCount'] = s.order_count
        data.append(item)
    return data


def get_supplier(user, supplier_id: int) -> Supplier:
    return get_scoped(Supplier.objects.all(), supplier_id, user, '공급업체를 찾을 수 없습니다.')


def _next_code(model, hospital_id: int, prefix: str, width: int) -> str:
    n = model.objects.filter(hospital_id=hospital_id, code__startswith=f'{prefix}-').count() + 1
    code = f'{prefix}-{n:0{width}d}'
    while model.objects.filter(hospital_id=hospital_id, code=code).exists():
        n += 1
        code = f'{prefix}-{n:0{width}d}'
    return code


@transaction.atomic
def create_supplier(hospital_id: int, data: dict) -> Supplier:
    s = Supplier(hospital_id=hospital_id, code=_next_code(Supplier, hospital_id, 'SUP', 3))
    _apply(s, data, SUPPLIER_FIELDS)
    s.save()
    logger.info('supplier %s created for hospital=%s', s.code, hospital_id)
    return s


def update_supplier(user, supplier_id: int, data: dict) -> Supplier:
    s = get_supplier(user, supplier_id)
    changed = _apply(s, data, SUPPLIER_FIELDS)
    if changed:
        s.save(update_fields=changed)
    return s


def delete_supplier(user, supplier_id: int) -> None:
    s = get_supplier(user, supplier_id)
    if s.purchase_orders.exists():
        raise BadRequest('발주 내역이 있어 삭제할 수 없습니다.')
    s.delete()


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

def format_product(p: Product, *, total_stock: Optional[int] = None) -> dict:
    data = {
        'id': p.id,
        'hospitalId': p.hospital_id,
        'code': p.code,
        'name': p.name,
        'type': p.type,
        'unit': p.unit,
        'barcode': p.barcode,
        'categoryId': p.category_id,
        'supplierId': p.supplier_id,
        'costPrice': p.cost_price,
        'sellingPrice': p.selling_price,
        'minStockLevel': p.min_stock_level,
        'reorderPoint': p.reorder_point,
        'isActive': p.is_active,
        'createdAt': ts(p.created_at),
    }
    if total_stock is not None:
        data['totalStock'] = total_stock
        data['lowStock'] = total_stock <= p.min_stock_level
    return data


def list_products(hospital_id: int, *, category_id=None, supplier_id=None, type=None, search=None,
                  low_stock: bool = False, page: int = 1, limit: int = 20):
    qs = Product.objects.filter(hospital_id=hospital_id).annotate(total_stock=Sum('stocks__quantity'))
    if category_id:
        qs = qs.filter(category_id=category_id)
    if supplier_id:
        qs = qs.filter(supplier_id=supplier_id)
    if type:
        qs = qs.filter(type=type)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(code__icontains=search) | Q(barcode__icontains=search))
    if low_stock:
        qs = qs.filter(Q(total_stock__isnull=True) | Q(total_stock__lte=F('min_stock_level')))
    rows, total = paginate(qs.order_by('name', 'id'), page, limit)
    return [format_product(p, total_stock=p.total_stock or 0) for p in rows], total


def get_product(user, product_id: int) -> Product:
    return get_scoped(Product.objects.select_related('category', 'supplier'), product_id, user, '품목을 찾을 수 없습니다.')


def product_detail(p: Product) -> dict:
    stocks = list(p.stocks.order_by('expiration_date', 'lot_number'))
    data = format_product(p, total_stock=sum(s.quantity for s in stocks))
    today = timezone.localdate()
    data['stocks'] = [
        {
            'id': s.id,
            'lotNumber': s.lot_number or None,
            'quantity': s.quantity,
            'availableQty': s.available_qty,
            'expirationDate': s.expiration_date.isoformat() if s.expiration_date else None,
            'nearExpiry': bool(s.expiration_date and 0 <= (s.expiration_date - today).days <= 30),
        }
        for s in stocks
    ]
    data['recentTransactions'] = [
        {'transactionNumber': t.transaction_number, 'type': t.type, 'quantity': t.quantity,
         'currentQty': t.current_qty, 'processedAt': ts(t.processed_at)}
        for t in p.transactions.order_by('-processed_at', '-id')[:20]
    ]
    return data


def _check_refs(hospital_id: int, data: dict) -> None:
    if data.get('categoryId') and not ProductCategory.objects.filter(id=data['categoryId'], hospital_id=hospital_id).exists():
        raise NotFound('카테고리를 찾을 수 없습니다.')
    if data.get('supplierId') and not Supplier.objects.filter(id=data['supplierId'], hospital_id=hospital_id).exists():
        raise NotFound('공급업체를 찾을 수 없습니다.')


@transaction.atomic
def create_product(hospital_id: int, data: dict) -> Product:
    _check_refs(hospital_id, data)
    ptype = data.get('type') or 'OTHER'
    p = Product(
        hospital_id=hospital_id,
        type=ptype,
        code=_next_code(Product, hospital_id, PRODUCT_PREFIXES.get(ptype, 'OTH'), 4),
    )
    _apply(p, data, PRODUCT_FIELDS, text_fields=('name',))
    p.save()
    logger.info('product %s created for hospital=%s', p.code, hospital_id)
    return p


def update_product(user, product_id: int, data: dict) -> Product:
    p = get_product(user, product_id)
    _check_refs(p.hospital_id, data)
    changed = _apply(p, data, PRODUCT_FIELDS, text_fields=('name',))
    if changed:
        p.save(update_fields=changed)
    return p


def delete_product(user, product_id: int) -> None:
    p = get_product(user, product_id)
    if p.transactions.exists():
        raise BadRequest('거래 내역이 있어 삭제할 수 없습니다. 비활성화를 권장합니다.')
    if p.purchase_order_items.exists():
        raise BadRequest('발주 내역이 있어 삭제할 수 없습니다.')
    p.delete()
