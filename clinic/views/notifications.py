from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.serializers.notifications import NotificationCreateSerializer, NotificationSerializer
from clinic.services import notifications as svc


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_notifications(request):
    items, unread = svc.list_for(request.user)
    return Response({'ok': True, 'data': NotificationSerializer(items, many=True).data, 'unreadCount': unread})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_notification(request):
    s = NotificationCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    n = svc.notify(request.user, title=s.validated_data['title'], description=s.validated_data['description'])
    return Response({'ok': True, 'notification': NotificationSerializer(n).data}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_notification_read(request, pk):
    n = svc.mark_read(request.user, pk)
    return Response({'ok': True, 'notification': NotificationSerializer(n).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def mark_all_notifications_read(request):
    return Response({'ok': True, 'updated': svc.mark_all_read(request.user)})


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def clear_notifications(request):
    return Response({'ok': True, 'deleted': svc.clear(request.user)})
