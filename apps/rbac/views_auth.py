"""
Authentication REST API views.

Implements endpoints for:
- Login (JWT issued in the body and as an HTTP-only cookie)
- Logout (clears the cookie)
- Current user
"""
import logging

from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from django.conf import settings
from django_ratelimit.decorators import ratelimit
from django_ratelimit.exceptions import Ratelimited
from django.utils.decorators import method_decorator
from drf_spectacular.utils import extend_schema, OpenApiExample
from drf_spectacular.types import OpenApiTypes

from apps.core.exceptions import Unauthenticated, ValidationError
from apps.core.logging import SecurityLogger
from apps.rbac.services import AuthService
from apps.rbac.serializers import LoginSerializer, UserSerializer

logger = logging.getLogger(__name__)


def login_rate(group, request):
    """Login rate limit, read per request so it follows settings overrides."""
    return settings.LOGIN_RATE_LIMIT


def _set_auth_cookie(response, token):
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        max_age=settings.JWT_EXPIRATION_HOURS * 3600,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite=settings.AUTH_COOKIE_SAMESITE,
    )


@extend_schema(
    tags=['Authentication'],
    summary='Login',
    description='''
Authenticate with email and password and receive a JWT.

The token is returned in the body and also set as an HTTP-only
`auth-token` cookie, so browser clients need not store it.

**No authentication required** - this is a public endpoint.

**Rate limit**: per IP address (default 5/min)
    ''',
    request=LoginSerializer,
    responses={
        200: OpenApiTypes.OBJECT,
        400: OpenApiTypes.OBJECT,
        401: OpenApiTypes.OBJECT,
        429: OpenApiTypes.OBJECT,
    },
    examples=[
        OpenApiExample(
            'Login Request',
            value={
                'email': 'admin@example.com',
                'password': 'admin123'
            },
            request_only=True
        ),
        OpenApiExample(
            'Success Response',
            value={
                'user': {
                    'email': 'admin@example.com',
                    'role': 'admin'
                },
                'token': 'eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...',
                'message': 'Login successful'
            },
            response_only=True
        ),
        OpenApiExample(
            'Invalid Credentials',
            value={
                'error': 'Invalid email or password',
                'code': 'UNAUTHENTICATED'
            },
            response_only=True,
            status_codes=['401']
        ),
    ]
)
@method_decorator(ratelimit(key='ip', rate=login_rate, method='POST', block=False), name='dispatch')
class LoginView(APIView):
    """
    POST /v1/auth/login

    Authenticate user and return JWT token.

    No authentication required.
    Rate limited per IP address.
    """
    authentication_classes = []
    permission_classes = []

    def post(self, request):
        """Login user."""
        if getattr(request, 'limited', False):
            raise Ratelimited()

        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError('Email and password are required', details=serializer.errors)

        email = serializer.validated_data['email']
        result = AuthService.login(
            email=email,
            password=serializer.validated_data['password']
        )

        if not result:
            SecurityLogger.log_failed_login(
                email=email,
                ip_address=request.META.get('REMOTE_ADDR', 'unknown'),
                reason='Invalid credentials'
            )
            raise Unauthenticated('Invalid email or password')

        response = Response(
            {
                'user': UserSerializer(result['user']).data,
                'token': result['token'],
                'message': 'Login successful'
            },
            status=status.HTTP_200_OK
        )
        _set_auth_cookie(response, result['token'])
        return response


@extend_schema(
    tags=['Authentication'],
    summary='Logout',
    description='Clear the auth cookie. Tokens are stateless, so a copied token stays valid until it expires.',
    request=None,
    responses={200: OpenApiTypes.OBJECT},
)
class LogoutView(APIView):
    """
    POST /v1/auth/logout

    Logout user by clearing the auth cookie.
    """
    authentication_classes = []
    permission_classes = []

    def post(self, request):
        """Logout user."""
        response = Response(
            {
                'message': 'Logout successful'
            },
            status=status.HTTP_200_OK
        )
        response.delete_cookie(settings.AUTH_COOKIE_NAME, samesite=settings.AUTH_COOKIE_SAMESITE)
        return response


@extend_schema(
    tags=['Authentication'],
    summary='Current user',
    description='Return the identity and current role of the authenticated caller.',
    responses={200: UserSerializer, 401: OpenApiTypes.OBJECT},
)
class MeView(APIView):
    """
    GET /v1/auth/me

    Return the authenticated user's identity and role.
    """

    def get(self, request):
        return Response(UserSerializer(request.user).data)
