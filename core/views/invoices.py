"""
Invoice, invoice item and statistics endpoints.

All writes go through :mod:`core.services.invoices`, which raises DRF
exceptions (NotFound / PermissionDenied / BadRequest) that the project
exception handler renders as ``{'ok': False, 'error': {...}}``.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsHospitalStaff, ensure_hospital_scope
from core.serializers.invoice import (
    InvoiceCreateSerializer,
    InvoiceItemSerializer,
    InvoiceItemUpdateSerializer,
    InvoiceListQuerySerializer,
    InvoiceStatsQuerySerializer,
    InvoiceUpdateSerializer,
)
from core.services import invoices as svc
from core.services.common import page_meta
from core.services.stats import cached_invoice_stats


def _detail(user, invoice_id: int) -> dict:
    inv = svc.get_invoice(invoice_id)
    return svc.format_invoice(inv, internal=user.role != 'guardian')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def invoices(request):
    if request.method == 'POST':
        s = InvoiceCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        inv = svc.create_invoice(request.user, s.validated_data)
        return Response({'ok': True, 'data': _detail(request.user, inv.id)}, status=status.HTTP_201_CREATED)

    q = InvoiceListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    data, total = svc.list_invoices(
        request.user,
        hospital_id=vd.get('hospitalId'),
        guardian_id=vd.get('guardianId'),
        animal_id=vd.get('animalId'),
        status=vd.get('status'),
        start_date=vd.get('startDate'),
        end_date=vd.get('endDate'),
        page=vd['page'],
        limit=vd['limit'],
    )
    return Response({'ok': True, 'data': data, 'meta': page_meta(total, vd['page'], vd['limit'])})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def invoice_stats(request):
    """Billing statistics for one hospital (cached)."""
    q = InvoiceStatsQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    hospital_id = ensure_hospital_scope(request.user, vd.get('hospitalId'))
    return Response(cached_invoice_stats(hospital_id, vd.get('startDate'), vd.get('endDate')))


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, invoice_id: int):
    if request.method == 'PUT':
        s = InvoiceUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        svc.update_invoice(request.user, invoice_id, s.validated_data)
        return Response({'ok': True, 'data': _detail(request.user, invoice_id)})
    if request.method == 'DELETE':
        svc.delete_invoice(request.user, invoice_id)
        return Response({'ok': True, 'message': '청구서가 삭제되었습니다'})
    inv = svc.get_invoice(invoice_id)
    svc.ensure_can_view(request.user, inv)
    return Response({'ok': True, 'data': svc.format_invoice(inv, internal=request.user.role != 'guardian')})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def invoice_items(request, invoice_id: int):
    s = InvoiceItemSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    item = svc.add_item(request.user, invoice_id, s.validated_data)
    return Response({'ok': True, 'data': svc.format_item(item), 'invoice': _detail(request.user, invoice_id)},
                    status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def invoice_item_detail(request, item_id: int):
    if request.method == 'DELETE':
        inv = svc.delete_item(request.user, item_id)
        return Response({'ok': True, 'message': '항목이 삭제되었습니다', 'invoice': _detail(request.user, inv.id)})
    s = InvoiceItemUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    item = svc.update_item(request.user, item_id, s.validated_data)
    return Response({'ok': True, 'data': svc.format_item(item), 'invoice': _detail(request.user, item.invoice_id)})
