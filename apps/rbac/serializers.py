"""
RBAC serializers for REST API endpoints.

Provides serialization for:
- Authentication (login)
- Users as they may leave the API (identity and role, never the secret)
- Role changes
"""
from rest_framework import serializers


# ===== AUTHENTICATION SERIALIZERS =====

class LoginSerializer(serializers.Serializer):
    """Serializer for user login."""

    email = serializers.CharField(required=True, max_length=254)
    password = serializers.CharField(
        required=True,
        write_only=True,
        trim_whitespace=False,
        style={'input_type': 'password'}
    )


# ===== USER SERIALIZERS =====

class UserSerializer(serializers.Serializer):
    """
    Serializer for User and UserRecord instances.

    Only email and role are exposed. The password hash has no field here,
    so no listing or profile response can carry it.
    """

    email = serializers.CharField(read_only=True)
    role = serializers.SerializerMethodField()

    def get_role(self, obj):
        return getattr(obj.role, 'value', obj.role)


class RoleUpdateSerializer(serializers.Serializer):
    """
    Serializer for a role change request.

    Only presence is checked here. Whether the role value is valid is
    decided by RBACService after the self-change and capability checks.
    """

    email = serializers.CharField(required=True, max_length=254)
    role = serializers.CharField(required=True, max_length=16)
