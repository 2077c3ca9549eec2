from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.serializers.animal import AnimalCreateSerializer, AnimalUpdateSerializer
from core.services.animals import (
    can_access_animal,
    deactivate_animal,
    format_animal,
    get_animal,
    get_animal_by_code,
    list_my_animals,
    register_animal,
    update_animal,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def animals(request):
    """List the caller's own animals, or register a new one."""
    if request.method == 'POST':
        s = AnimalCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        a = register_animal(request.user, s.validated_data)
        return Response({'ok': True, 'data': format_animal(a)}, status=status.HTTP_201_CREATED)
    include_inactive = request.query_params.get('includeInactive') in ('1', 'true')
    return Response({'ok': True, 'data': list_my_animals(request.user, include_inactive=include_inactive)})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def animal_detail(request, animal_id: int):
    if request.method == 'PUT':
        s = AnimalUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        a = update_animal(request.user, animal_id, s.validated_data)
        return Response({'ok': True, 'data': format_animal(a)})
    if request.method == 'DELETE':
        deactivate_animal(request.user, animal_id)
        return Response({'ok': True, 'message': '동물이 비활성화되었습니다'})
    a = get_animal(animal_id)
    if not can_access_animal(request.user, a):
        raise PermissionDenied('동물 정보를 조회할 권한이 없습니다')
    return Response({'ok': True, 'data': format_animal(a)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def animal_by_code(request, code: str):
    a = get_animal_by_code(code)
    if not can_access_animal(request.user, a):
        raise PermissionDenied('동물 정보를 조회할 권한이 없습니다')
    return Response({'ok': True, 'data': format_animal(a)})
