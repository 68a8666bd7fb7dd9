"""
URL configuration for Taskboard.
"""
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    # API Documentation
    path('schema/', SpectacularAPIView.as_view(), name='schema'),
    path('schema/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # API v1
    path('v1/', include('apps.core.urls')),

    # Authentication endpoints
    path('v1/auth/', include('apps.rbac.urls_auth')),  # login, logout, me

    # Users and role management
    path('v1/', include('apps.rbac.urls')),

    # Projects, tasks and dashboard
    path('v1/', include('apps.projects.urls')),
]
