"""Profile endpoints for the signed-in user."""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.serializers.accounts import ChangePasswordSerializer, ProfileUpdateSerializer, UserSerializer
from clinic.services import accounts


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_profile(request):
    return Response({'ok': True, 'user': UserSerializer(request.user).data})


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_profile_update(request):
    s = ProfileUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = accounts.update_profile(request.user, s.validated_data)
    return Response({'ok': True, 'user': UserSerializer(user).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    s = ChangePasswordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    accounts.change_password(request.user, s.validated_data['oldPassword'], s.validated_data['newPassword'])
    return Response({'ok': True})
