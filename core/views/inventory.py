"""
Inventory endpoints: catalog (categories, suppliers, products), stock
levels, the transaction ledger and inventory statistics.

Hospital staff act on the hospital they are bound to; a super admin
must name the hospital with ``hospitalId``.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsHospitalStaff, ensure_hospital_scope
from core.serializers.inventory import (
    CategorySerializer,
    CategoryUpdateSerializer,
    HospitalQuerySerializer,
    ProductListQuerySerializer,
    ProductSerializer,
    ProductUpdateSerializer,
    StockAdjustSerializer,
    StockListQuerySerializer,
    SupplierListQuerySerializer,
    SupplierSerializer,
    SupplierUpdateSerializer,
    TransactionCreateSerializer,
    TransactionListQuerySerializer,
)
from core.services import catalog, inventory
from core.services.common import page_meta
from core.services.stats import cached_inventory_stats


def _query(serializer_cls, request):
    q = serializer_cls(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    return ensure_hospital_scope(request.user, vd.get('hospitalId')), vd


def _body(serializer_cls, request):
    s = serializer_cls(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    return ensure_hospital_scope(request.user, vd.get('hospitalId')), vd


# ----- categories -----

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def categories(request):
    if request.method == 'POST':
        hospital_id, vd = _body(CategorySerializer, request)
        c = catalog.create_category(hospital_id, vd)
        return Response({'ok': True, 'data': catalog.format_category(c)}, status=status.HTTP_201_CREATED)
    hospital_id, _ = _query(HospitalQuerySerializer, request)
    return Response({'ok': True, 'data': catalog.list_categories(hospital_id)})


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def category_detail(request, category_id: int):
    if request.method == 'DELETE':
        catalog.delete_category(request.user, category_id)
        return Response({'ok': True, 'message': '카테고리가 삭제되었습니다.'})
    s = CategoryUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    c = catalog.update_category(request.user, category_id, s.validated_data)
    return Response({'ok': True, 'data': catalog.format_category(c)})


# ----- suppliers -----

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def suppliers(request):
    if request.method == 'POST':
        hospital_id, vd = _body(SupplierSerializer, request)
        s = catalog.create_supplier(hospital_id, vd)
        return Response({'ok': True, 'data': catalog.format_supplier(s)}, status=status.HTTP_201_CREATED)
    hospital_id, vd = _query(SupplierListQuerySerializer, request)
    data = catalog.list_suppliers(hospital_id, status=vd.get('status'), search=vd.get('search'))
    return Response({'ok': True, 'data': data})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def supplier_detail(request, supplier_id: int):
    if request.method == 'DELETE':
        catalog.delete_supplier(request.user, supplier_id)
        return Response({'ok': True, 'message': '공급업체가 삭제되었습니다.'})
    if request.method == 'PUT':
        s = SupplierUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        supplier = catalog.update_supplier(request.user, supplier_id, s.validated_data)
    else:
        supplier = catalog.get_supplier(request.user, supplier_id)
    return Response({'ok': True, 'data': catalog.format_supplier(supplier)})


# ----- products -----

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def products(request):
    if request.method == 'POST':
        hospital_id, vd = _body(ProductSerializer, request)
        p = catalog.create_product(hospital_id, vd)
        return Response({'ok': True, 'data': catalog.format_product(p)}, status=status.HTTP_201_CREATED)
    hospital_id, vd = _query(ProductListQuerySerializer, request)
    data, total = catalog.list_products(
        hospital_id,
        category_id=vd.get('categoryId'),
        supplier_id=vd.get('supplierId'),
        type=vd.get('type'),
        search=vd.get('search'),
        low_stock=vd.get('lowStock', False),
        page=vd['page'],
        limit=vd['limit'],
    )
    return Response({'ok': True, 'data': data, 'meta': page_meta(total, vd['page'], vd['limit'])})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def product_detail(request, product_id: int):
    if request.method == 'DELETE':
        catalog.delete_product(request.user, product_id)
        return Response({'ok': True, 'message': '품목이 삭제되었습니다.'})
    if request.method == 'PUT':
        s = ProductUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        p = catalog.update_product(request.user, product_id, s.validated_data)
        return Response({'ok': True, 'data': catalog.format_product(p)})
    p = catalog.get_product(request.user, product_id)
    return Response({'ok': True, 'data': catalog.product_detail(p)})


# ----- stock & ledger -----

@api_view(['GET'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def stocks(request):
    hospital_id, vd = _query(StockListQuerySerializer, request)
    data = inventory.list_stocks(
        hospital_id,
        product_id=vd.get('productId'),
        low_stock=vd.get('lowStock', False),
        expiring_soon=vd.get('expiringSoon', False),
    )
    return Response({'ok': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def stock_adjust(request):
    hospital_id, vd = _body(StockAdjustSerializer, request)
    stock = inventory.adjust_stock(
        request.user, hospital_id, vd['productId'], vd['newQuantity'], vd['reason'],
        lot_number=vd.get('lotNumber') or '',
    )
    return Response({'ok': True, 'data': inventory.format_stock(stock)})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def transactions(request):
    if request.method == 'POST':
        hospital_id, vd = _body(TransactionCreateSerializer, request)
        txn = inventory.create_transaction(
            request.user, hospital_id, vd['productId'], vd['type'], vd['quantity'],
            unit_cost=vd.get('unitCost'),
            lot_number=vd.get('lotNumber') or '',
            expiration_date=vd.get('expirationDate'),
            reference_type=vd.get('referenceType') or '',
            reference_id=vd.get('referenceId') or '',
            notes=vd.get('notes') or '',
        )
        return Response({'ok': True, 'data': inventory.format_transaction(txn)}, status=status.HTTP_201_CREATED)
    hospital_id, vd = _query(TransactionListQuerySerializer, request)
    data, total = inventory.list_transactions(
        hospital_id,
        product_id=vd.get('productId'),
        txn_type=vd.get('type'),
        start_date=vd.get('startDate'),
        end_date=vd.get('endDate'),
        page=vd['page'],
        limit=vd['limit'],
    )
    return Response({'ok': True, 'data': data, 'meta': page_meta(total, vd['page'], vd['limit'])})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def inventory_stats(request):
    hospital_id, _ = _query(HospitalQuerySerializer, request)
    return Response(cached_inventory_stats(hospital_id))
