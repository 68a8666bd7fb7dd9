"""
Pytest configuration and fixtures.
"""
import os
import tempfile

import pytest
from django.conf import settings


def pytest_configure(config):
    """Configure Django settings for tests."""
    # File backed so store tests can share the database across threads.
    test_db = os.path.join(tempfile.gettempdir(), f"taskboard_test_{os.getpid()}.sqlite3")
    settings.DATABASES['default'] = {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': test_db,
        'ATOMIC_REQUESTS': False,
        'OPTIONS': {'timeout': 30},
        'TEST': {'NAME': test_db},
    }
    # Fill in Django's per-database defaults (TIME_ZONE etc.) for the replaced entry.
    from django.db import connections
    connections.settings = connections.configure_settings(settings.DATABASES)
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']


@pytest.fixture(autouse=True)
def clear_cache():
    """Reset rate limit counters between tests."""
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Return DRF API client."""
    from rest_framework.test import APIClient
    return APIClient()


def _make_user(email, role, password='testpass123'):
    from apps.rbac.models import User
    return User.objects.create_user(email=email, password=password, role=role)


@pytest.fixture
def admin_user(db):
    from apps.rbac.models import Role
    return _make_user('admin@example.com', Role.ADMIN)


@pytest.fixture
def manager_user(db):
    from apps.rbac.models import Role
    return _make_user('manager@example.com', Role.MANAGER)


@pytest.fixture
def other_manager_user(db):
    from apps.rbac.models import Role
    return _make_user('manager2@example.com', Role.MANAGER)


@pytest.fixture
def member_user(db):
    from apps.rbac.models import Role
    return _make_user('alice@example.com', Role.MEMBER)


@pytest.fixture
def other_member_user(db):
    from apps.rbac.models import Role
    return _make_user('bob@example.com', Role.MEMBER)


@pytest.fixture
def admin_caller(admin_user):
    from apps.rbac.caller import Caller
    return Caller.from_user(admin_user)


@pytest.fixture
def manager_caller(manager_user):
    from apps.rbac.caller import Caller
    return Caller.from_user(manager_user)


@pytest.fixture
def other_manager_caller(other_manager_user):
    from apps.rbac.caller import Caller
    return Caller.from_user(other_manager_user)


@pytest.fixture
def member_caller(member_user):
    from apps.rbac.caller import Caller
    return Caller.from_user(member_user)


@pytest.fixture
def other_member_caller(other_member_user):
    from apps.rbac.caller import Caller
    return Caller.from_user(other_member_user)


@pytest.fixture
def project(manager_user):
    """A project owned by manager_user."""
    from apps.projects.store import ProjectStore
    return ProjectStore.create(
        name='Website Redesign',
        description='Refresh the marketing site',
        owner=manager_user.email,
    )


@pytest.fixture
def other_project(other_manager_user):
    """A project owned by other_manager_user."""
    from apps.projects.store import ProjectStore
    return ProjectStore.create(
        name='Mobile App',
        description='First public release',
        owner=other_manager_user.email,
    )


@pytest.fixture
def member_task(project, member_user):
    """A pending task in project assigned to member_user."""
    from apps.projects.store import TaskStore
    return TaskStore.create(
        project_id=project.pk,
        title='Draft wireframes',
        assigned_to=member_user.email,
    )


@pytest.fixture
def other_member_task(project, other_member_user):
    """A pending task in project assigned to other_member_user."""
    from apps.projects.store import TaskStore
    return TaskStore.create(
        project_id=project.pk,
        title='Write homepage copy',
        assigned_to=other_member_user.email,
    )


@pytest.fixture
def authenticate():
    """Return a helper that authenticates an API client as a user via Bearer JWT."""
    from apps.rbac.services import AuthService

    def _authenticate(client, user):
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {AuthService.generate_jwt(user)}')
        return client

    return _authenticate
