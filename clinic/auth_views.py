"""
Authentication views: login, signup, JWT refresh and logout.

Login answers with both the legacy DRF token and a JWT pair so either
``Authorization: Token <key>`` or ``Authorization: Bearer <jwt>`` can be
used afterwards.  Pending accounts may log in; the ``status`` field of
the payload tells the client to show the awaiting-approval screen.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from clinic.models import User
from clinic.serializers.accounts import LoginSerializer, SignupSerializer, UserSerializer
from clinic.services import accounts
from clinic.services.audit import log_action
from clinic.throttles import LoginRateThrottle, SignupRateThrottle

logger = logging.getLogger(__name__)


def _client_ip(request):
    return request.META.get('REMOTE_ADDR')


def token_payload(user: User) -> dict:
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'status': user.status,
        'user': UserSerializer(user).data,
    }


# ---------------------------------------------------------------------
# Username/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if not user:
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'username': username, 'ip': _client_ip(request)})
        return Response({'ok': False, 'error': {'code': 'invalid_credentials',
                                                'message': 'Invalid username or password.'}},
                        status=status.HTTP_400_BAD_REQUEST)

    if user.status == User.STATUS_BANNED:
        log_action(user=user, action='login', object_type='user', object_id=user.id,
                   detail={'result': 'banned', 'ip': _client_ip(request)})
        return Response({'ok': False, 'error': {'code': 'account_banned',
                                                'message': 'This account has been banned.'}},
                        status=status.HTTP_403_FORBIDDEN)

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': _client_ip(request)})
    return Response(token_payload(user), status=200)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([SignupRateThrottle])
def signup_view(request):
    s = SignupSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    user = accounts.signup(
        username=v['username'], password=v['password'], email=v['email'],
        phone_number=v.get('phoneNumber', ''), request_ip=_client_ip(request),
    )
    return Response(token_payload(user), status=status.HTTP_201_CREATED)


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        raise InvalidToken(e.args[0])
    data = {'ok': True, 'jwt_access': s.validated_data['access']}
    if 'refresh' in s.validated_data:
        data['jwt_refresh'] = s.validated_data['refresh']
    return Response(data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist one refresh token, or every outstanding token of the caller."""
    refresh = request.data.get('refresh')
    if refresh:
        try:
            token = RefreshToken(refresh)
        except TokenError:
            raise ValidationError({'refresh': ['Invalid or expired token.']})
        if str(token.get('user_id')) != str(request.user.id):
            raise ValidationError({'refresh': ['Token does not belong to this user.']})
        token.blacklist()
        count = 1
    else:
        count = 0
        for outstanding in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=outstanding)
            count += int(created)
        Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return Response({'ok': True, 'blacklisted': count})
