"""
User administration for the ``admin`` role.

Non-admins, and admins whose account is not active, get 403.  The
default administrator and the calling admin cannot be deleted.
"""
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import User
from clinic.permissions import IsActiveAccount, IsAdminRole
from clinic.serializers.accounts import (
    AdminUserCreateSerializer,
    AdminUserUpdateSerializer,
    RoleSerializer,
    UserListQuerySerializer,
    UserSerializer,
)
from clinic.services import accounts
from clinic.services.stats import patient_stats


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveAccount, IsAdminRole])
def list_users(request):
    q = UserListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    users = accounts.list_users(
        status=q.validated_data.get('status'),
        role=q.validated_data.get('role'),
        q=(q.validated_data.get('q') or '').strip() or None,
    )
    return Response({'ok': True, 'data': UserSerializer(users, many=True).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount, IsAdminRole])
def create_user(request):
    s = AdminUserCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    user = accounts.add_user(
        request.user, username=v['username'], password=v['password'], email=v['email'],
        phone_number=v.get('phoneNumber', ''), role=v['role'],
    )
    return Response({'ok': True, 'user': UserSerializer(user).data}, status=status.HTTP_201_CREATED)


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsActiveAccount, IsAdminRole])
def update_user(request, pk):
    target = get_object_or_404(User, pk=pk)
    s = AdminUserUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = accounts.update_user(request.user, target, s.validated_data)
    return Response({'ok': True, 'user': UserSerializer(user).data})


@api_view(['POST', 'DELETE'])
@permission_classes([IsAuthenticated, IsActiveAccount, IsAdminRole])
def delete_user(request, pk):
    target = get_object_or_404(User, pk=pk)
    accounts.delete_user(request.user, target)
    return Response({'ok': True})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount, IsAdminRole])
def set_user_role(request, pk):
    target = get_object_or_404(User, pk=pk)
    s = RoleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = accounts.set_role(request.user, target, s.validated_data['role'])
    return Response({'ok': True, 'user': UserSerializer(user).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount, IsAdminRole])
def toggle_user_active(request, pk):
    target = get_object_or_404(User, pk=pk)
    user = accounts.toggle_active(request.user, target)
    return Response({'ok': True, 'user': UserSerializer(user).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsActiveAccount, IsAdminRole])
def approve_user(request, pk):
    target = get_object_or_404(User, pk=pk)
    user = accounts.approve(request.user, target)
    return Response({'ok': True, 'user': UserSerializer(user).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsActiveAccount, IsAdminRole])
def admin_patient_stats(request):
    return Response({'ok': True, 'data': patient_stats()})
