"""
Custom DRF authentication classes.
"""
import logging

from django.conf import settings
from rest_framework.authentication import BaseAuthentication, get_authorization_header

logger = logging.getLogger(__name__)


class JWTAuthentication(BaseAuthentication):
    """
    DRF authentication class that resolves a JWT to a Caller.

    The token is read from the `Authorization: Bearer <token>` header, or
    failing that from the auth cookie set at login. On success DRF gets
    (user, caller): request.user is the stored User and request.auth is the
    Caller every service operation takes.

    An invalid, expired or orphaned token authenticates nobody, so
    permission checks answer 401.
    """

    keyword = 'Bearer'

    def authenticate(self, request):
        """
        Return (user, caller) for a valid token, None otherwise.
        """
        token = self.get_token(request)
        if not token:
            return None

        from apps.rbac.services import AuthService

        result = AuthService.authenticate(token)
        if result is None:
            logger.debug(
                "Credential did not resolve to a caller",
                extra={'request_id': getattr(request, 'request_id', None)}
            )
            return None

        return result

    def get_token(self, request):
        auth = get_authorization_header(request).split()
        if auth and auth[0].lower() == self.keyword.lower().encode():
            if len(auth) != 2:
                return None
            try:
                return auth[1].decode()
            except UnicodeError:
                return None

        return request.COOKIES.get(settings.AUTH_COOKIE_NAME)

    def authenticate_header(self, request):
        return self.keyword
