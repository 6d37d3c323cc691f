"""
Exception types and the unified DRF exception handler.

Every error leaving the API has the shape
``{"ok": false, "error": {"code": ..., "message": ...}}`` so the
front-end can handle failures in one place.
"""
import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The record conflicts with an existing one.'
    default_code = 'conflict'


class UpstreamServiceError(APIException):
    """The language model could not be reached or answered with an error."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'The AI service failed to answer.'
    default_code = 'upstream_error'


class InvalidModelOutput(APIException):
    """The language model answered, but not with the expected structure."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'The AI service returned an unexpected answer.'
    default_code = 'invalid_model_output'


class ServiceUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Service temporarily unavailable.'
    default_code = 'service_unavailable'


def _error_code(exc) -> str:
    if isinstance(exc, APIException):
        return exc.default_code
    if isinstance(exc, Http404):
        return 'not_found'
    if isinstance(exc, DjangoPermissionDenied):
        return 'permission_denied'
    return 'api_error'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        request = context.get('request')
        logger.exception("Unhandled error on %s", getattr(request, 'path', '?'))
        message = str(exc) if settings.DEBUG else 'Internal server error'
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': message}}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    if resp.status_code >= 500:
        logger.warning("%s: %s", _error_code(exc), detail)
    out = Response({'ok': False, 'error': {'code': _error_code(exc), 'message': detail}}, status=resp.status_code)
    for header in ('WWW-Authenticate', 'Retry-After'):
        if header in resp:
            out[header] = resp[header]
    return out
