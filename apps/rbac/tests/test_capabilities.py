"""
Tests for the static permission table.
"""
import pytest

from apps.rbac.capabilities import (
    ALL_CAPABILITIES, ROLE_CAPABILITIES, Action, Capability, ResourceKind,
    capabilities_for, has_capability,
)
from apps.rbac.models import Role


class TestPermissionTable:
    """Test the role to capability mapping."""

    def test_every_role_has_an_entry(self):
        """Test that the table covers the whole Role enumeration."""
        assert set(ROLE_CAPABILITIES) == set(Role)

    def test_admin_holds_every_capability(self):
        assert capabilities_for(Role.ADMIN) == ALL_CAPABILITIES
        for kind in ResourceKind:
            for action in Action:
                assert has_capability(Role.ADMIN, kind, action)

    def test_manager_capabilities(self):
        """Test manager: view/create/edit projects; view/create/edit/delete/assign tasks."""
        expected = {
            'project:view', 'project:create', 'project:edit',
            'task:view', 'task:create', 'task:edit', 'task:delete', 'task:assign',
        }
        assert {cap.code for cap in capabilities_for(Role.MANAGER)} == expected

    def test_manager_has_no_user_or_admin_capabilities(self):
        for action in Action:
            assert not has_capability(Role.MANAGER, ResourceKind.USER, action)
            assert not has_capability(Role.MANAGER, ResourceKind.ADMIN, action)

    def test_member_capabilities(self):
        """Test member: view projects and tasks only."""
        assert {cap.code for cap in capabilities_for(Role.MEMBER)} == {'project:view', 'task:view'}

    def test_member_cannot_delete_projects(self):
        assert not has_capability(Role.MEMBER, ResourceKind.PROJECT, Action.DELETE)

    def test_string_values_are_accepted(self):
        """Test that plain strings resolve the same as enum members."""
        assert has_capability('manager', 'task', 'assign')
        assert not has_capability('member', 'task', 'edit')

    def test_unknown_role_has_no_capabilities(self):
        assert capabilities_for('owner') == frozenset()
        assert not has_capability('owner', ResourceKind.PROJECT, Action.VIEW)

    def test_unknown_kind_or_action_raises(self):
        with pytest.raises(ValueError):
            has_capability(Role.ADMIN, 'invoice', Action.VIEW)

    def test_capability_code(self):
        assert Capability(ResourceKind.TASK, Action.MARK_DONE).code == 'task:mark_done'
