"""
RBAC API URLs.

Provides endpoints for:
- User listing (scoped by role)
- Administrator user listing and role changes
"""
from django.urls import path
from apps.rbac.views import UserListView, AdminUserView

app_name = 'rbac'

urlpatterns = [
    path('users', UserListView.as_view(), name='user-list'),
    path('admin/users', AdminUserView.as_view(), name='admin-users'),
]
