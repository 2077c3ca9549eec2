import json

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.contrib.auth.models import AnonymousUser
from rest_framework.exceptions import NotFound

from core.services.notifications import mark_read, unread_count, user_group

STAFF_ROLES = {"super", "hospital_admin", "vet", "staff"}


async def _ws_error(ws, code: int, message: str, *, close: bool = False):
    """
    Send an error frame in the common shape.
    App codes: 4xxx for client errors, 5xxx for server errors.
    """
    payload = {"type": "error", "code": code, "message": message}
    try:
        await ws.send(json.dumps(payload, ensure_ascii=False))
    finally:
        if close:
            await ws.close(code=code)


class UpdatesConsumer(AsyncWebsocketConsumer):
    """Statistics refresh broadcasts for hospital staff."""
    GROUP = "updates"

    async def connect(self):
        user = self.scope.get("user") or AnonymousUser()
        if not user.is_authenticated or getattr(user, "role", None) not in STAFF_ROLES:
            await self.close(code=4003)
            return
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def broadcast_refresh(self, event):
        # event: {"type": "broadcast.refresh", "version": int, "ts": "...", "keys": [...]}
        await self.send(json.dumps(event))


class NotificationConsumer(AsyncWebsocketConsumer):
    """Per-user notification stream.

    On connect the client receives ``{"type": "unread", "count": n}``;
    every new notification then arrives as ``{"type": "notification", "data": {...}}``.
    The client may send ``{"action": "read", "id": <notificationId>}``.
    """

    async def connect(self):
        user = self.scope.get("user") or AnonymousUser()
        if not user.is_authenticated:
            await self.close(code=4001)
            return
        self.user = user
        self.group_name = user_group(user.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        count = await sync_to_async(unread_count)(user)
        await self.send(json.dumps({"type": "unread", "count": count}))

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        if not text_data:
            return
        try:
            msg = json.loads(text_data)
        except json.JSONDecodeError:
            await _ws_error(self, 4000, "invalid json")
            return
        if msg.get("action") != "read":
            await _ws_error(self, 4000, "unknown action")
            return
        try:
            notification_id = int(msg.get("id"))
        except (TypeError, ValueError):
            await _ws_error(self, 4000, "id required")
            return
        try:
            await sync_to_async(mark_read)(self.user, notification_id)
        except NotFound as e:
            await _ws_error(self, 4004, str(e.detail))
            return
        count = await sync_to_async(unread_count)(self.user)
        await self.send(json.dumps({"type": "unread", "count": count}))

    async def notification_push(self, event):
        # event: {"type": "notification.push", "notification": {...}}
        await self.send(json.dumps({"type": "notification", "data": event["notification"]}, ensure_ascii=False))
