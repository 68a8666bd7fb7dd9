"""
Tests for JWTAuthentication.
"""
from unittest.mock import patch

import pytest
from django.conf import settings
from rest_framework.test import APIRequestFactory

from apps.core.authentication import JWTAuthentication
from apps.rbac.caller import Caller
from apps.rbac.services import AuthService


@pytest.mark.django_db
class TestJWTAuthentication:
    """Test credential extraction and resolution."""

    def test_bearer_token(self, member_user):
        token = AuthService.generate_jwt(member_user)
        request = APIRequestFactory().get('/v1/auth/me', HTTP_AUTHORIZATION=f'Bearer {token}')

        user, caller = JWTAuthentication().authenticate(request)

        assert user == member_user
        assert caller == Caller(member_user.email, member_user.role)

    def test_cookie_token(self, manager_user):
        factory = APIRequestFactory()
        factory.cookies[settings.AUTH_COOKIE_NAME] = AuthService.generate_jwt(manager_user)

        user, caller = JWTAuthentication().authenticate(factory.get('/v1/auth/me'))

        assert caller.identity == manager_user.email

    def test_resolves_through_auth_service(self, member_user):
        request = APIRequestFactory().get('/v1/auth/me', HTTP_AUTHORIZATION='Bearer abc')

        with patch.object(AuthService, 'authenticate', return_value=None) as resolve:
            assert JWTAuthentication().authenticate(request) is None

        resolve.assert_called_once_with('abc')

    def test_no_credentials(self):
        assert JWTAuthentication().authenticate(APIRequestFactory().get('/v1/auth/me')) is None

    def test_malformed_header(self):
        request = APIRequestFactory().get('/v1/auth/me', HTTP_AUTHORIZATION='Bearer a b')

        assert JWTAuthentication().authenticate(request) is None
