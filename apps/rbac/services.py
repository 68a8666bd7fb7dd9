"""
RBAC and Authentication services.

Implements:
- RBACService: role changes guarded against self-change, gated authorization
- AuthService: JWT issuance, credential login, token → Caller resolution
"""
import logging
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Any, Dict, Optional, Tuple

import jwt
from django.conf import settings

from apps.core.exceptions import Forbidden, InvalidSelfChange, NotFound, ValidationError
from apps.core.logging import SecurityLogger
from apps.rbac.caller import Caller
from apps.rbac.capabilities import Action, ResourceKind
from apps.rbac.models import Role, User
from apps.rbac.policy import authorize, is_self_role_change
from apps.rbac.store import UserStore

logger = logging.getLogger(__name__)


class RBACService:
    """
    Service for RBAC operations: authorization gates and role management.
    """

    @classmethod
    def require(cls, caller: Caller, action: Action, resource_kind: ResourceKind,
                resource=None, related_project=None, message: str = None):
        """
        Raise Forbidden unless the caller is authorized.

        Args:
            caller: Resolved caller
            action: Action being performed
            resource_kind: Kind of the target resource
            resource: Target record (None for create/collection checks)
            related_project: Project context for task decisions
            message: Optional error message

        Raises:
            Forbidden: If the authorization engine denies the request
        """
        decision = authorize(caller, action, resource_kind, resource, related_project)
        if decision.allowed:
            return

        resource_id = getattr(resource, 'pk', None)
        SecurityLogger.log_permission_denied(
            identity=caller.identity,
            role=caller.role.value,
            action=Action(action).value,
            resource_kind=ResourceKind(resource_kind).value,
            resource_id=resource_id,
        )
        raise Forbidden(
            message or f"Not permitted to {Action(action).value} this {ResourceKind(resource_kind).value}",
            details={'action': Action(action).value, 'resource': ResourceKind(resource_kind).value}
        )

    @classmethod
    def change_user_role(cls, caller: Caller, target_identity: str, new_role) -> User:
        """
        Change another user's role.

        Checks run in a fixed order: self-change, capability, role value,
        target existence.

        Args:
            caller: Resolved caller
            target_identity: Email of the user whose role changes
            new_role: Role (or its string value) to assign

        Returns:
            The updated User

        Raises:
            InvalidSelfChange: If the target is the caller
            Forbidden: If the caller may not edit users
            ValidationError: If new_role is not a known role
            NotFound: If no user has target_identity
        """
        if is_self_role_change(caller, target_identity):
            SecurityLogger.log_self_role_change(
                identity=caller.identity,
                requested_role=str(new_role),
            )
            raise InvalidSelfChange('Cannot change your own role')

        cls.require(caller, Action.EDIT, ResourceKind.USER,
                    message='Only administrators can change user roles')

        if new_role not in Role.values:
            raise ValidationError(
                'Invalid role',
                details={'role': [f"Must be one of: {', '.join(Role.values)}"]}
            )

        user = UserStore.update_role(target_identity, Role(new_role))
        if user is None:
            raise NotFound('User not found')

        logger.info(
            f"User role updated to {new_role}",
            extra={'identity': caller.identity, 'target_identity': target_identity}
        )
        return user


class AuthService:
    """
    Service for authentication: JWT issuance and resolution of a credential
    to a Caller.
    """

    @classmethod
    def generate_jwt(cls, user: User) -> str:
        """
        Generate JWT token for a user.

        Args:
            user: User instance

        Returns:
            JWT token string
        """
        now = datetime.now(dt_timezone.utc)
        payload = {
            'sub': user.email,
            'exp': now + timedelta(hours=settings.JWT_EXPIRATION_HOURS),
            'iat': now,
        }

        return jwt.encode(
            payload,
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

    @classmethod
    def validate_jwt(cls, token: str) -> Optional[Dict[str, Any]]:
        """
        Validate JWT token and return payload.

        Returns:
            Decoded payload dict or None if invalid
        """
        try:
            return jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM]
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Rejected expired token")
            return None
        except jwt.InvalidTokenError:
            logger.debug("Rejected invalid token")
            return None

    @classmethod
    def get_user_from_jwt(cls, token: str) -> Optional[User]:
        """Extract the still-existing user a token was issued for."""
        payload = cls.validate_jwt(token)
        if not payload:
            return None

        identity = payload.get('sub')
        if not identity:
            return None
        return UserStore.get(identity)

    @classmethod
    def authenticate(cls, token: str) -> Optional[Tuple[User, Caller]]:
        """
        Resolve an opaque credential to the stored user and its Caller.

        The role comes from the stored user, so a role change applies to
        tokens issued before it.

        Returns:
            Tuple of (user, caller), or None if the token is invalid or the
            user is gone
        """
        if not token:
            return None
        user = cls.get_user_from_jwt(token)
        if user is None:
            return None
        return user, Caller.from_user(user)

    @classmethod
    def resolve(cls, token: str) -> Optional[Caller]:
        """Resolve an opaque credential to a Caller, or None."""
        result = cls.authenticate(token)
        return result[1] if result else None

    @classmethod
    def login(cls, email: str, password: str) -> Optional[Dict[str, Any]]:
        """
        Authenticate user and return JWT token.

        Returns:
            Dict with user and token, or None if authentication failed
        """
        user = UserStore.get(email)
        if user is None:
            # Run the hasher once so unknown and known emails cost the same
            User().set_password(password)
            return None

        if not user.check_password(password):
            return None

        logger.info("User logged in", extra={'identity': user.email})
        return {
            'user': user,
            'token': cls.generate_jwt(user),
        }
