"""
RBAC REST API views.

Implements endpoints for:
- User listing for assignment pickers (scoped by role)
- Administrator user listing and role changes
"""
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiExample
from drf_spectacular.types import OpenApiTypes

from apps.core.exceptions import ValidationError
from apps.core.permissions import requires_capability
from apps.rbac.capabilities import Action, ResourceKind
from apps.rbac.scoping import visible_users
from apps.rbac.services import RBACService
from apps.rbac.serializers import UserSerializer, RoleUpdateSerializer
from apps.rbac.store import UserStore


@extend_schema_view(
    get=extend_schema(
        tags=['Users'],
        summary='List users',
        description='''
List users visible to the caller, e.g. to pick a task assignee.

- **admin**, **manager**: every user
- **member**: administrators, managers and themselves

Only `email` and `role` are returned.
        ''',
        responses={200: UserSerializer(many=True)},
        examples=[
            OpenApiExample(
                'Success Response',
                value={
                    'count': 2,
                    'users': [
                        {'email': 'admin@example.com', 'role': 'admin'},
                        {'email': 'member@example.com', 'role': 'member'}
                    ]
                },
                response_only=True
            )
        ]
    )
)
class UserListView(APIView):
    """
    GET /v1/users

    List users visible to the caller.
    """

    def get(self, request):
        users = visible_users(request.auth)
        return Response({
            'count': len(users),
            'users': UserSerializer(users, many=True).data
        })


@extend_schema_view(
    get=extend_schema(
        tags=['Admin'],
        summary='List all users',
        description='List every user with their role. **Requires:** `admin:access`',
        responses={200: UserSerializer(many=True), 403: OpenApiTypes.OBJECT},
    ),
    patch=extend_schema(
        tags=['Admin'],
        summary="Change a user's role",
        description='''
Change another user's role.

Checks run in this order:
1. Target is the caller: `400 INVALID_SELF_CHANGE`
2. Caller lacks `user:edit`: `403 FORBIDDEN`
3. Role is not one of admin, manager, member: `400 VALIDATION_ERROR`
4. No user with that email: `404 NOT_FOUND`
        ''',
        request=RoleUpdateSerializer,
        responses={
            200: UserSerializer,
            400: OpenApiTypes.OBJECT,
            403: OpenApiTypes.OBJECT,
            404: OpenApiTypes.OBJECT,
        },
        examples=[
            OpenApiExample(
                'Role Change Request',
                value={'email': 'member@example.com', 'role': 'manager'},
                request_only=True
            ),
            OpenApiExample(
                'Self Change',
                value={'error': 'Cannot change your own role', 'code': 'INVALID_SELF_CHANGE'},
                response_only=True,
                status_codes=['400']
            ),
        ]
    ),
)
class AdminUserView(APIView):
    """
    GET /v1/admin/users
    PATCH /v1/admin/users

    Administrator user management.
    """

    @requires_capability(ResourceKind.ADMIN, Action.ACCESS)
    def get(self, request):
        users = UserStore.list()
        return Response({
            'count': len(users),
            'users': UserSerializer(users, many=True).data
        })

    def patch(self, request):
        serializer = RoleUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError('Email and role are required', details=serializer.errors)

        user = RBACService.change_user_role(
            request.auth,
            serializer.validated_data['email'],
            serializer.validated_data['role'],
        )
        return Response(UserSerializer(user).data, status=status.HTTP_200_OK)
