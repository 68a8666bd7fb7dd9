"""
Domain exceptions and the DRF exception handler that translates them.

Services raise the exceptions below; views let them propagate and
custom_exception_handler turns them into consistent JSON responses.
"""
import logging
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from django_ratelimit.exceptions import Ratelimited

logger = logging.getLogger(__name__)

RATE_LIMIT_RETRY_AFTER = 60  # seconds


class TaskboardException(Exception):
    """Base exception for Taskboard-specific errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = 'ERROR'

    def __init__(self, message, details=None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class Unauthenticated(TaskboardException):
    """Raised when no caller can be resolved from the request credential."""
    status_code = status.HTTP_401_UNAUTHORIZED
    code = 'UNAUTHENTICATED'


class Forbidden(TaskboardException):
    """Raised when a resolved caller lacks the capability or ownership."""
    status_code = status.HTTP_403_FORBIDDEN
    code = 'FORBIDDEN'


class NotFound(TaskboardException):
    """Raised when a target resource id does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    code = 'NOT_FOUND'


class InvalidSelfChange(TaskboardException):
    """Raised when a caller attempts to change their own role."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'INVALID_SELF_CHANGE'


class ValidationError(TaskboardException):
    """Raised when required fields are missing or malformed."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'VALIDATION_ERROR'


# DRF error codes folded into the taxonomy above
DRF_CODE_MAP = {
    'not_authenticated': Unauthenticated.code,
    'authentication_failed': Unauthenticated.code,
    'permission_denied': Forbidden.code,
    'not_found': NotFound.code,
    'parse_error': ValidationError.code,
    'invalid': ValidationError.code,
}


def _reshape_drf_error(data):
    """Give DRF's {detail} and field-error bodies the {error, code, details} shape."""
    if 'detail' in data:
        detail = data.pop('detail')
        drf_code = getattr(detail, 'code', None) or 'error'
        body = {
            'error': str(detail),
            'code': DRF_CODE_MAP.get(drf_code, drf_code.upper()),
        }
        if data:
            body['details'] = data
        return body
    return {
        'error': 'Invalid input',
        'code': ValidationError.code,
        'details': data,
    }


def _request_id(request):
    return getattr(request, 'request_id', None) if request else None


def custom_exception_handler(exc, context):
    """
    Custom exception handler that logs errors and returns consistent format.
    """
    request = context.get('request')
    request_id = _request_id(request)

    if isinstance(exc, TaskboardException):
        logger.info(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={
                'request_id': request_id,
                'path': request.path if request else None,
                'method': request.method if request else None,
                'code': exc.code,
            }
        )
        body = {
            'error': exc.message,
            'code': exc.code,
            'request_id': request_id,
        }
        if exc.details:
            body['details'] = exc.details
        return Response(body, status=exc.status_code)

    if isinstance(exc, Ratelimited):
        from apps.core.logging import SecurityLogger

        ip_address = request.META.get('REMOTE_ADDR', 'unknown') if request else 'unknown'
        SecurityLogger.log_rate_limit_exceeded(
            endpoint=request.path if request else 'unknown',
            ip_address=ip_address,
            limit='Rate limit exceeded'
        )

        response = Response(
            {
                'error': 'Rate limit exceeded. Please try again later.',
                'code': 'RATE_LIMIT_EXCEEDED',
                'request_id': request_id,
                'retry_after': RATE_LIMIT_RETRY_AFTER,
            },
            status=status.HTTP_429_TOO_MANY_REQUESTS
        )
        response['Retry-After'] = str(RATE_LIMIT_RETRY_AFTER)
        return response

    # Call DRF's default exception handler first
    response = exception_handler(exc, context)

    if response is None:
        logger.error(
            f"API Exception: {exc.__class__.__name__}",
            extra={
                'exception': str(exc),
                'request_id': request_id,
                'path': request.path if request else None,
                'method': request.method if request else None,
            },
            exc_info=True
        )
        return Response(
            {
                'error': 'Internal server error',
                'detail': 'An unexpected error occurred',
                'request_id': request_id,
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    logger.warning(
        f"API Exception: {exc.__class__.__name__}",
        extra={
            'exception': str(exc),
            'request_id': request_id,
            'path': request.path if request else None,
            'method': request.method if request else None,
        }
    )

    if isinstance(response.data, dict):
        response.data = _reshape_drf_error(response.data)
        response.data['request_id'] = request_id

    return response
