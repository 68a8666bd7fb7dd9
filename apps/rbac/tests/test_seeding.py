"""
Tests for user seeding and the seed_users command.
"""
import json
from io import StringIO

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.rbac.models import Role, User
from apps.rbac.seeding import DEMO_USERS, load_seed_users, seed_users


@pytest.fixture
def seed_file(tmp_path):
    def _write(content):
        path = tmp_path / 'users.json'
        path.write_text(content if isinstance(content, str) else json.dumps(content))
        return str(path)
    return _write


class TestLoadSeedUsers:

    def test_defaults_to_demo_users(self, settings):
        settings.SEED_USERS_FILE = None

        assert load_seed_users() == DEMO_USERS

    def test_reads_file(self, seed_file):
        path = seed_file([{'email': 'x@example.com', 'password': 'pw', 'role': 'admin'}])

        assert load_seed_users(path)[0]['email'] == 'x@example.com'

    def test_reads_file_from_settings(self, seed_file, settings):
        settings.SEED_USERS_FILE = seed_file([{'email': 'y@example.com', 'password': 'pw', 'role': 'member'}])

        assert load_seed_users()[0]['email'] == 'y@example.com'

    @pytest.mark.parametrize('content', [
        'not json',
        {'email': 'x@example.com'},
        [{'email': 'x@example.com', 'role': 'admin'}],
        [{'email': 'x@example.com', 'password': 'pw', 'role': 'owner'}],
    ])
    def test_rejects_malformed_files(self, seed_file, content):
        with pytest.raises(ImproperlyConfigured):
            load_seed_users(seed_file(content))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImproperlyConfigured):
            load_seed_users(str(tmp_path / 'missing.json'))


@pytest.mark.django_db
class TestSeedUsers:

    def test_creates_users_with_hashed_passwords(self):
        results = seed_users(DEMO_USERS)

        assert all(created for _, created in results)
        admin = User.objects.get(email='admin@taskboard.dev')
        assert admin.role == Role.ADMIN
        assert admin.password_hash != 'admin123'
        assert admin.check_password('admin123')

    def test_is_idempotent_and_keeps_current_role(self, admin_caller):
        from apps.rbac.services import RBACService

        seed_users(DEMO_USERS)
        RBACService.change_user_role(admin_caller, 'alice@taskboard.dev', 'manager')

        results = seed_users(DEMO_USERS)

        assert not any(created for _, created in results)
        assert User.objects.get(email='alice@taskboard.dev').role == Role.MANAGER


@pytest.mark.django_db
class TestSeedUsersCommand:

    def test_seeds_demo_users(self, settings):
        settings.SEED_USERS_FILE = None
        out = StringIO()

        call_command('seed_users', stdout=out)

        assert User.objects.count() == len(DEMO_USERS)
        assert 'Created admin@taskboard.dev' in out.getvalue()

    def test_rerun_reports_existing(self, settings):
        settings.SEED_USERS_FILE = None
        call_command('seed_users', stdout=StringIO())
        out = StringIO()

        call_command('seed_users', stdout=out)

        assert 'Exists admin@taskboard.dev' in out.getvalue()
        assert User.objects.count() == len(DEMO_USERS)

    def test_bad_file_is_command_error(self, seed_file):
        with pytest.raises(CommandError):
            call_command('seed_users', file=seed_file('[]x'), stdout=StringIO())
