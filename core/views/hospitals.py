"""
Hospital and staff endpoints.

Any authenticated user may register a hospital (becoming its owner);
listing shows ACTIVE hospitals unless a super admin asks for another
status.  Staff management is limited to the hospital's owner/manager.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.serializers.hospital import (
    HospitalCreateSerializer,
    HospitalListQuerySerializer,
    HospitalUpdateSerializer,
    StaffAddSerializer,
    StaffUpdateSerializer,
)
from core.services.common import page_meta
from core.services.hospitals import (
    add_staff,
    create_hospital,
    deactivate_hospital,
    format_hospital,
    format_staff,
    get_hospital,
    list_hospitals,
    remove_staff,
    update_hospital,
    update_staff,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def hospitals(request):
    if request.method == 'POST':
        s = HospitalCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        h = create_hospital(request.user, s.validated_data)
        return Response({'ok': True, 'data': format_hospital(h, with_staff=True)}, status=status.HTTP_201_CREATED)

    q = HospitalListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    wanted = vd.get('status') if getattr(request.user, 'role', '') == 'super' else None
    data, total = list_hospitals(status=wanted, q=vd.get('q'), page=vd['page'], limit=vd['limit'])
    return Response({'ok': True, 'data': data, 'meta': page_meta(total, vd['page'], vd['limit'])})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def hospital_detail(request, hospital_id: int):
    if request.method == 'PUT':
        s = HospitalUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        h = update_hospital(request.user, hospital_id, s.validated_data)
        return Response({'ok': True, 'data': format_hospital(h, with_staff=True)})
    if request.method == 'DELETE':
        deactivate_hospital(request.user, hospital_id)
        return Response({'ok': True, 'message': '병원이 비활성화되었습니다'})
    return Response({'ok': True, 'data': format_hospital(get_hospital(hospital_id), with_staff=True)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def hospital_staff(request, hospital_id: int):
    s = StaffAddSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    member = add_staff(request.user, hospital_id, user_id=s.validated_data['userId'],
                       position=s.validated_data['position'])
    return Response({'ok': True, 'data': format_staff(member)}, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def hospital_staff_detail(request, hospital_id: int, staff_id: int):
    if request.method == 'DELETE':
        remove_staff(request.user, hospital_id, staff_id)
        return Response({'ok': True, 'message': '직원이 비활성화되었습니다'})
    s = StaffUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    member = update_staff(request.user, hospital_id, staff_id, s.validated_data)
    return Response({'ok': True, 'data': format_staff(member)})
