import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.shortcuts import get_object_or_404

from clinic.models import Notification

logger = logging.getLogger(__name__)


def group_name(user_id) -> str:
    return f"notifications.{user_id}"


def _as_payload(n: Notification) -> dict:
    return {
        'id': n.id,
        'title': n.title,
        'description': n.description,
        'isRead': n.is_read,
        'createdAt': n.created_at.isoformat(),
    }


def trim(recipient, keep: int | None = None) -> int:
    """Keep only the newest ``keep`` notifications of a recipient."""
    keep = keep or settings.NOTIFICATIONS_KEEP
    stale = list(Notification.objects.filter(recipient=recipient).values_list('id', flat=True)[keep:])
    if not stale:
        return 0
    deleted, _ = Notification.objects.filter(id__in=stale).delete()
    return deleted


def notify(recipient, *, title: str, description: str = '') -> Notification:
    n = Notification.objects.create(recipient=recipient, title=title, description=description)
    trim(recipient)
    channel_layer = get_channel_layer()
    if channel_layer is not None:
        async_to_sync(channel_layer.group_send)(
            group_name(recipient.id),
            {"type": "notification.created", "notification": _as_payload(n)},
        )
    return n


def list_for(user):
    qs = Notification.objects.filter(recipient=user)
    return qs[:settings.NOTIFICATIONS_KEEP], qs.filter(is_read=False).count()


def mark_read(user, pk) -> Notification:
    n = get_object_or_404(Notification, recipient=user, pk=pk)
    if not n.is_read:
        n.is_read = True
        n.save(update_fields=['is_read'])
    return n


def mark_all_read(user) -> int:
    return Notification.objects.filter(recipient=user, is_read=False).update(is_read=True)


def clear(user) -> int:
    deleted, _ = Notification.objects.filter(recipient=user).delete()
    logger.debug("Cleared %d notifications of user %s", deleted, user.id)
    return deleted
