"""
In-app notifications.

Rows are written inside the caller's transaction; the realtime push to
the user's channel group happens only after that transaction commits,
so a rolled-back payment never produces a push.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from core.models import Notification
from core.services.common import paginate, ts

logger = logging.getLogger(__name__)


def user_group(user_id: int) -> str:
    return f"notifications.{user_id}"


def format_notification(n: Notification) -> dict:
    return {
        'id': n.id,
        'hospitalId': n.hospital_id,
        'type': n.type,
        'title': n.title,
        'message': n.message,
        'data': n.data,
        'isRead': n.is_read,
        'readAt': ts(n.read_at),
        'createdAt': ts(n.created_at),
    }


def _push(notification: Notification) -> None:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    payload = {'type': 'notification.push', 'notification': format_notification(notification)}
    async_to_sync(channel_layer.group_send)(user_group(notification.user_id), payload)


def notify(user, type: str, title: str, message: str = '', *, hospital=None, data: Optional[dict] = None) -> Notification:
    n = Notification.objects.create(
        user=user, hospital=hospital, type=type, title=title, message=message, data=data or {},
    )
    transaction.on_commit(lambda: _push(n))
    logger.info('notification %s queued for user=%s', type, getattr(user, 'id', user))
    return n


def notify_many(users: Iterable, type: str, title: str, message: str = '', *, hospital=None, data: Optional[dict] = None) -> int:
    count = 0
    for u in users:
        notify(u, type, title, message, hospital=hospital, data=data)
        count += 1
    return count


def list_notifications(user, *, unread_only: bool = False, page: int = 1, limit: int = 20):
    qs = Notification.objects.filter(user=user)
    if unread_only:
        qs = qs.filter(is_read=False)
    rows, total = paginate(qs.order_by('-created_at', '-id'), page, limit)
    return [format_notification(n) for n in rows], total


def mark_read(user, notification_id: int) -> Notification:
    n = Notification.objects.filter(id=notification_id, user=user).first()
    if not n:
        raise NotFound('알림을 찾을 수 없습니다')
    if not n.is_read:
        n.is_read = True
        n.read_at = timezone.now()
        n.save(update_fields=['is_read', 'read_at'])
    return n


def mark_all_read(user) -> int:
    return Notification.objects.filter(user=user, is_read=False).update(is_read=True, read_at=timezone.now())


def unread_count(user) -> int:
    return Notification.objects.filter(user=user, is_read=False).count()
