"""
Tests for core views and request tracing.
"""
from unittest.mock import patch

import pytest
from rest_framework import status


@pytest.mark.django_db
class TestHealthCheckView:
    """Test GET /v1/health/."""

    def test_healthy(self, api_client):
        response = api_client.get('/v1/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'status': 'healthy', 'database': 'healthy', 'cache': 'healthy'}

    def test_cache_failure_is_503(self, api_client):
        with patch('apps.core.views.cache.get', return_value=None):
            response = api_client.get('/v1/health/')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['cache'] == 'unhealthy'
        assert response.data['errors']


@pytest.mark.django_db
class TestRequestID:
    """Test RequestIDMiddleware."""

    def test_request_id_generated(self, api_client):
        response = api_client.get('/v1/health/')

        assert response['X-Request-ID']

    def test_request_id_propagated(self, api_client):
        response = api_client.get('/v1/health/', HTTP_X_REQUEST_ID='trace-123')

        assert response['X-Request-ID'] == 'trace-123'

    def test_request_id_in_error_body(self, api_client):
        response = api_client.get('/v1/projects', HTTP_X_REQUEST_ID='trace-456')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['request_id'] == 'trace-456'


class TestLoggingFilter:

    def test_adds_thread_request_id(self):
        import logging
        import threading
        from apps.core.middleware import LoggingFilter

        record = logging.LogRecord('test', logging.INFO, __file__, 1, 'msg', None, None)
        threading.current_thread().request_id = 'thread-req'
        try:
            assert LoggingFilter().filter(record)
        finally:
            del threading.current_thread().request_id

        assert record.request_id == 'thread-req'
