"""
DRF permission classes and decorators for capability enforcement.

This module provides:
- HasCapability: DRF permission class that checks a view's required
  capabilities against the caller's role in the permission table
- @requires_capability: Decorator to declare required capabilities on views

These are coarse gates only. Ownership and assignment rules are applied by
the service layer through the authorization engine.
"""
import logging
from functools import wraps
from rest_framework.permissions import BasePermission

logger = logging.getLogger(__name__)


class HasCapability(BasePermission):
    """
    DRF permission class that enforces capability requirements on API endpoints.

    Checks every (resource kind, action) pair in the view's
    required_capabilities against request.auth (the Caller set by
    JWTAuthentication). Views without required_capabilities are allowed.

    Usage in views:
        @requires_capability('admin', 'access')
        class AnalyticsView(APIView):
            permission_classes = [IsAuthenticated, HasCapability]
    """

    def has_permission(self, request, view):
        required = getattr(view, 'required_capabilities', None)
        if not required:
            return True

        from apps.rbac.caller import Caller
        from apps.rbac.capabilities import Action, Capability, ResourceKind, has_capability

        caller = getattr(request, 'auth', None)
        if not isinstance(caller, Caller):
            return False

        missing = [
            Capability(ResourceKind(kind), Action(action)).code for kind, action in required
            if not has_capability(caller.role, kind, action)
        ]

        if missing:
            from apps.core.logging import SecurityLogger

            SecurityLogger.log_permission_denied(
                identity=caller.identity,
                role=caller.role.value,
                action=','.join(missing),
                resource_kind=view.__class__.__name__,
                resource_id=None,
            )
            logger.warning(
                f"Permission denied: {caller.role.value} missing capabilities: {missing}",
                extra={
                    'missing_capabilities': missing,
                    'view': view.__class__.__name__,
                    'method': request.method,
                    'path': request.path,
                    'request_id': getattr(request, 'request_id', None),
                }
            )
            return False

        return True


def requires_capability(kind, action):
    """
    Decorator to declare a required capability on view classes or methods.

    Stacking the decorator adds further requirements.

    Args:
        kind: ResourceKind (or its string value)
        action: Action (or its string value)

    Returns:
        Decorator function that extends required_capabilities
    """
    def decorator(view_or_method):
        if isinstance(view_or_method, type):
            existing = getattr(view_or_method, 'required_capabilities', ())
            view_or_method.required_capabilities = tuple(existing) + ((kind, action),)
            return view_or_method

        existing = getattr(view_or_method, 'required_capabilities', ())
        capabilities = tuple(existing) + ((kind, action),)

        @wraps(view_or_method)
        def wrapped(self, request, *args, **kwargs):
            self.required_capabilities = capabilities
            if not HasCapability().has_permission(request, self):
                self.permission_denied(request, message='Insufficient capabilities')
            return view_or_method(self, request, *args, **kwargs)

        wrapped.required_capabilities = capabilities
        return wrapped

    return decorator
