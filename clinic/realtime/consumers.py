import json
from urllib.parse import parse_qs

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from rest_framework.authtoken.models import Token

from clinic.services.notifications import group_name


def _user_for_token(key: str):
    token = Token.objects.select_related('user').filter(key=key).first()
    if token is None or token.user.status == 'banned':
        return None
    return token.user


class NotificationConsumer(AsyncWebsocketConsumer):
    """Pushes a user's new notifications.

    Browsers cannot set headers on a WebSocket, so besides the session
    the legacy token may be passed as ``?token=<key>``.
    """

    async def connect(self):
        user = self.scope.get("user")
        if not (user and user.is_authenticated):
            key = (parse_qs(self.scope.get("query_string", b"").decode()).get("token") or [""])[0]
            user = await sync_to_async(_user_for_token)(key) if key else None
        if user is None or getattr(user, "status", None) == "banned":
            await self.close(code=4001)
            return

        self.group_name = group_name(user.id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def notification_created(self, event):
        # event: {"type": "notification.created", "notification": {...}}
        await self.send(json.dumps({"type": "notification", "notification": event["notification"]}))
