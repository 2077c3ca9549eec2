from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.serializers.notification import NotificationListQuerySerializer
from core.services.common import page_meta
from core.services.notifications import (
    format_notification,
    list_notifications,
    mark_all_read,
    mark_read,
    unread_count,
)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notifications(request):
    q = NotificationListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    data, total = list_notifications(request.user, unread_only=vd['unreadOnly'], page=vd['page'], limit=vd['limit'])
    return Response({'ok': True, 'data': data, 'meta': page_meta(total, vd['page'], vd['limit'])})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notifications_unread_count(request):
    return Response({'ok': True, 'count': unread_count(request.user)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def notification_read(request, notification_id: int):
    n = mark_read(request.user, notification_id)
    return Response({'ok': True, 'data': format_notification(n)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def notifications_read_all(request):
    return Response({'ok': True, 'updated': mark_all_read(request.user)})
