from rest_framework import serializers

from clinic.models import Notification
from .common import CleanCharField


class NotificationSerializer(serializers.ModelSerializer):
    isRead = serializers.BooleanField(source='is_read', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Notification
        fields = ['id', 'title', 'description', 'isRead', 'createdAt']
        read_only_fields = ['id', 'title', 'description']


class NotificationCreateSerializer(serializers.Serializer):
    title = CleanCharField(max_length=255)
    description = CleanCharField(required=False, allow_blank=True, default='')
