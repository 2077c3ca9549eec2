from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import IsHospitalAdmin, IsHospitalStaff, ensure_hospital_scope
from core.serializers.inventory import (
    PurchaseOrderCreateSerializer,
    PurchaseOrderListQuerySerializer,
    PurchaseOrderUpdateSerializer,
    ReceiveSerializer,
)
from core.services import purchase_orders as svc
from core.services.common import page_meta


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def purchase_orders(request):
    if request.method == 'POST':
        s = PurchaseOrderCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        hospital_id = ensure_hospital_scope(request.user, s.validated_data.get('hospitalId'))
        order = svc.create_purchase_order(request.user, hospital_id, s.validated_data)
        return Response({'ok': True, 'data': svc.format_order(order)}, status=status.HTTP_201_CREATED)
    q = PurchaseOrderListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    hospital_id = ensure_hospital_scope(request.user, vd.get('hospitalId'))
    data, total = svc.list_purchase_orders(
        hospital_id, status=vd.get('status'), supplier_id=vd.get('supplierId'), page=vd['page'], limit=vd['limit'],
    )
    return Response({'ok': True, 'data': data, 'meta': page_meta(total, vd['page'], vd['limit'])})


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def purchase_order_detail(request, order_id: int):
    if request.method == 'PUT':
        s = PurchaseOrderUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        order = svc.update_purchase_order(request.user, order_id, s.validated_data)
    else:
        order = svc.get_order(request.user, order_id)
    return Response({'ok': True, 'data': svc.format_order(order)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def purchase_order_submit(request, order_id: int):
    order = svc.submit_purchase_order(request.user, order_id)
    return Response({'ok': True, 'data': svc.format_order(order)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsHospitalAdmin])
def purchase_order_approve(request, order_id: int):
    order = svc.approve_purchase_order(request.user, order_id)
    return Response({'ok': True, 'data': svc.format_order(order)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def purchase_order_mark_ordered(request, order_id: int):
    order = svc.mark_ordered(request.user, order_id)
    return Response({'ok': True, 'data': svc.format_order(order)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def purchase_order_receive(request, order_id: int):
    s = ReceiveSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    order = svc.receive_purchase_order(request.user, order_id, s.validated_data['items'],
                                       s.validated_data.get('notes') or '')
    return Response({'ok': True, 'data': svc.format_order(order)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsHospitalStaff])
def purchase_order_cancel(request, order_id: int):
    order = svc.cancel_purchase_order(request.user, order_id)
    return Response({'ok': True, 'data': svc.format_order(order)})
