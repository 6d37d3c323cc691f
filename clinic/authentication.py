"""
Authentication classes for the legacy ``Token`` keyword and JWT bearers.

Both classes reject banned accounts at authentication time, so a ban
takes effect immediately even for tokens issued before it.  Keeping
them out of the view modules avoids circular imports when Django REST
framework loads the configured authentication classes.
"""
from __future__ import annotations

from rest_framework import authentication, exceptions
from rest_framework_simplejwt import authentication as jwt_authentication


def _reject_banned(user):
    if getattr(user, 'status', None) == 'banned':
        raise exceptions.AuthenticationFailed('This account has been banned.')
    return user


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Token`` keyword."""

    keyword = 'Token'

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        return _reject_banned(user), token


class JWTAuthentication(jwt_authentication.JWTAuthentication):
    """simplejwt ``Bearer`` authentication."""

    def get_user(self, validated_token):
        return _reject_banned(super().get_user(validated_token))
