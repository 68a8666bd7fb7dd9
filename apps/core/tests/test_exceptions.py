"""
Tests for the custom DRF exception handler.
"""
from rest_framework import exceptions as drf_exceptions
from rest_framework.test import APIRequestFactory
from rest_framework.request import Request
from django_ratelimit.exceptions import Ratelimited

from apps.core.exceptions import (
    Forbidden, InvalidSelfChange, NotFound, Unauthenticated, ValidationError,
    custom_exception_handler,
)


def _handle(exc, request_id='req-1'):
    request = Request(APIRequestFactory().get('/v1/projects'))
    request._request.request_id = request_id
    return custom_exception_handler(exc, {'request': request})


class TestTaxonomy:
    """Test that each domain error maps to its status and code."""

    def test_status_codes(self):
        cases = [
            (Unauthenticated('x'), 401, 'UNAUTHENTICATED'),
            (Forbidden('x'), 403, 'FORBIDDEN'),
            (NotFound('x'), 404, 'NOT_FOUND'),
            (InvalidSelfChange('x'), 400, 'INVALID_SELF_CHANGE'),
            (ValidationError('x'), 400, 'VALIDATION_ERROR'),
        ]
        for exc, status_code, code in cases:
            response = _handle(exc)
            assert response.status_code == status_code
            assert response.data['code'] == code
            assert response.data['error'] == 'x'

    def test_details_included_when_present(self):
        response = _handle(ValidationError('Invalid input', details={'title': ['required']}))

        assert response.data['details'] == {'title': ['required']}

    def test_details_omitted_when_empty(self):
        assert 'details' not in _handle(NotFound('Project not found')).data

    def test_request_id_included(self):
        assert _handle(Forbidden('x'), request_id='abc').data['request_id'] == 'abc'


class TestDRFErrors:
    """Test that DRF's own errors are reshaped into the same body."""

    def test_not_authenticated(self):
        response = _handle(drf_exceptions.NotAuthenticated())

        assert response.status_code == 401
        assert response.data['code'] == 'UNAUTHENTICATED'
        assert response.data['error']

    def test_permission_denied(self):
        response = _handle(drf_exceptions.PermissionDenied('Insufficient capabilities'))

        assert response.status_code == 403
        assert response.data == {
            'error': 'Insufficient capabilities',
            'code': 'FORBIDDEN',
            'request_id': 'req-1',
        }

    def test_parse_error(self):
        response = _handle(drf_exceptions.ParseError())

        assert response.status_code == 400
        assert response.data['code'] == 'VALIDATION_ERROR'

    def test_field_errors(self):
        response = _handle(drf_exceptions.ValidationError({'name': ['This field is required.']}))

        assert response.status_code == 400
        assert response.data['code'] == 'VALIDATION_ERROR'
        assert response.data['details'] == {'name': ['This field is required.']}

    def test_method_not_allowed(self):
        response = _handle(drf_exceptions.MethodNotAllowed('PUT'))

        assert response.status_code == 405
        assert response.data['code'] == 'METHOD_NOT_ALLOWED'


class TestOtherErrors:

    def test_rate_limited(self):
        response = _handle(Ratelimited())

        assert response.status_code == 429
        assert response.data['code'] == 'RATE_LIMIT_EXCEEDED'
        assert response['Retry-After'] == '60'

    def test_unexpected_exception_is_500(self):
        response = _handle(RuntimeError('boom'))

        assert response.status_code == 500
        assert response.data['error'] == 'Internal server error'
        assert 'boom' not in str(response.data)
