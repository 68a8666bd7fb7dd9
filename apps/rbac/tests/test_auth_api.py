"""
Tests for authentication API endpoints.
"""
import pytest
from django.conf import settings
from rest_framework import status

from apps.rbac.models import Role
from apps.rbac.services import AuthService


@pytest.mark.django_db
class TestLoginEndpoint:
    """Test POST /v1/auth/login endpoint."""

    def test_login_success(self, api_client, member_user):
        """Test successful login returns the user, a token and the cookie."""
        response = api_client.post('/v1/auth/login', {
            'email': member_user.email,
            'password': 'testpass123'
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user'] == {'email': member_user.email, 'role': 'member'}
        assert response.data['token']
        assert response.data['message'] == 'Login successful'

        cookie = response.cookies[settings.AUTH_COOKIE_NAME]
        assert cookie.value == response.data['token']
        assert cookie['httponly']

    def test_login_response_has_no_secret(self, api_client, member_user):
        response = api_client.post('/v1/auth/login', {
            'email': member_user.email,
            'password': 'testpass123'
        }, format='json')

        assert 'password' not in response.data['user']
        assert 'password_hash' not in response.data['user']

    def test_login_wrong_password(self, api_client, member_user):
        response = api_client.post('/v1/auth/login', {
            'email': member_user.email,
            'password': 'wrongpassword'
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'UNAUTHENTICATED'
        assert settings.AUTH_COOKIE_NAME not in response.cookies

    def test_login_unknown_email(self, api_client):
        response = api_client.post('/v1/auth/login', {
            'email': 'ghost@example.com',
            'password': 'testpass123'
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error'] == 'Invalid email or password'

    def test_login_missing_fields(self, api_client):
        response = api_client.post('/v1/auth/login', {'email': 'admin@example.com'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['code'] == 'VALIDATION_ERROR'
        assert 'password' in response.data['details']

    def test_login_rate_limited(self, api_client, member_user, settings):
        """Test that repeated attempts from one IP get 429."""
        settings.LOGIN_RATE_LIMIT = '2/m'
        payload = {'email': member_user.email, 'password': 'wrongpassword'}

        for _ in range(2):
            response = api_client.post('/v1/auth/login', payload, format='json')
            assert response.status_code == status.HTTP_401_UNAUTHORIZED

        response = api_client.post('/v1/auth/login', payload, format='json')

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.data['code'] == 'RATE_LIMIT_EXCEEDED'
        assert response['Retry-After'] == '60'

    def test_rate_limit_can_be_disabled(self, api_client, member_user, settings):
        settings.LOGIN_RATE_LIMIT = '1/m'
        settings.RATELIMIT_ENABLE = False
        payload = {'email': member_user.email, 'password': 'wrongpassword'}

        for _ in range(3):
            response = api_client.post('/v1/auth/login', payload, format='json')
            assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestMeEndpoint:
    """Test GET /v1/auth/me endpoint."""

    def test_me_with_bearer_token(self, api_client, manager_user, authenticate):
        authenticate(api_client, manager_user)

        response = api_client.get('/v1/auth/me')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {'email': manager_user.email, 'role': 'manager'}

    def test_me_with_login_cookie(self, api_client, member_user):
        """Test that the cookie set at login authenticates later requests."""
        api_client.post('/v1/auth/login', {
            'email': member_user.email,
            'password': 'testpass123'
        }, format='json')

        response = api_client.get('/v1/auth/me')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['email'] == member_user.email

    def test_me_reflects_current_role(self, api_client, member_user, authenticate):
        authenticate(api_client, member_user)
        member_user.role = Role.MANAGER
        member_user.save()

        response = api_client.get('/v1/auth/me')

        assert response.data['role'] == 'manager'

    def test_me_without_credentials(self, api_client):
        response = api_client.get('/v1/auth/me')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'UNAUTHENTICATED'
        assert response['WWW-Authenticate'] == 'Bearer'

    def test_me_with_invalid_token(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')

        response = api_client.get('/v1/auth/me')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_token_of_removed_user_is_rejected(self, api_client, member_user):
        token = AuthService.generate_jwt(member_user)
        member_user.delete()
        api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

        response = api_client.get('/v1/auth/me')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestLogoutEndpoint:
    """Test POST /v1/auth/logout endpoint."""

    def test_logout_clears_cookie(self, api_client, member_user):
        api_client.post('/v1/auth/login', {
            'email': member_user.email,
            'password': 'testpass123'
        }, format='json')

        response = api_client.post('/v1/auth/logout')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Logout successful'
        assert response.cookies[settings.AUTH_COOKIE_NAME].value == ''

        assert api_client.get('/v1/auth/me').status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_without_session(self, api_client):
        response = api_client.post('/v1/auth/logout')

        assert response.status_code == status.HTTP_200_OK
