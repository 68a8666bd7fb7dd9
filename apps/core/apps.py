from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
import logging

logger = logging.getLogger(__name__)

KEY_HINT = "Generate a strong key with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core'
    verbose_name = 'Core'

    def ready(self):
        """
        Perform startup validation checks when Django initializes.

        Settings already reject short JWT keys and a JWT key equal to
        SECRET_KEY; these checks cover weak values.
        """
        import sys
        if 'runserver' not in sys.argv and 'gunicorn' not in sys.argv[0]:
            # Skip validation for management commands (except runserver)
            if len(sys.argv) > 1 and sys.argv[1] not in ['runserver', 'test']:
                return

        self._validate_jwt_configuration()
        self._validate_security_settings()

        logger.info("✓ All startup security validations passed")

    def _validate_jwt_configuration(self):
        """Validate JWT secret key strength."""
        jwt_secret = getattr(settings, 'JWT_SECRET_KEY', None)

        if not jwt_secret:
            raise ImproperlyConfigured(f"JWT_SECRET_KEY must be set in environment variables. {KEY_HINT}")

        unique_chars = len(set(jwt_secret))
        if unique_chars < 16:
            raise ImproperlyConfigured(
                f"JWT_SECRET_KEY has insufficient entropy. "
                f"Found only {unique_chars} unique characters, need at least 16. {KEY_HINT}"
            )

    def _validate_security_settings(self):
        """Validate general security settings."""
        secret_key = getattr(settings, 'SECRET_KEY', None)

        if not secret_key:
            raise ImproperlyConfigured(f"SECRET_KEY must be set in environment variables. {KEY_HINT}")

        if getattr(settings, 'DEBUG', False):
            return

        weak_patterns = ['your-secret-key', 'change-me', 'django-insecure', '12345']
        secret_lower = secret_key.lower()
        for pattern in weak_patterns:
            if pattern in secret_lower:
                raise ImproperlyConfigured(
                    f"SECRET_KEY appears to be a default or weak value (contains '{pattern}'). {KEY_HINT}"
                )

        if not getattr(settings, 'AUTH_COOKIE_SECURE', False):
            logger.warning(
                "⚠ AUTH_COOKIE_SECURE is not enabled in production. "
                "The auth cookie should only be sent over HTTPS."
            )
