"""
Tests for scoped project and task listing.
"""
import pytest

from apps.projects.models import TaskStatus
from apps.projects.scoping import (
    projects_with_assigned_tasks, scoped_list, visible_projects, visible_tasks,
)
from apps.projects.store import TaskStore
from apps.rbac.capabilities import ResourceKind
from apps.rbac.scoping import UserRecord


@pytest.mark.django_db
class TestVisibleProjects:

    def test_admin_sees_all(self, admin_caller, project, other_project):
        assert visible_projects(admin_caller) == [project, other_project]

    def test_manager_sees_owned_only(self, manager_caller, other_manager_caller, project, other_project):
        assert visible_projects(manager_caller) == [project]
        assert visible_projects(other_manager_caller) == [other_project]

    def test_member_sees_all(self, member_caller, project, other_project):
        assert visible_projects(member_caller) == [project, other_project]


@pytest.mark.django_db
class TestVisibleTasks:

    @pytest.fixture
    def foreign_task(self, other_project, member_user):
        return TaskStore.create(other_project.pk, 'Store listing', member_user.email)

    def test_member_sees_only_assigned(self, other_member_caller, member_task, other_member_task):
        """Bob sees his task and not Alice's in the same project."""
        assert visible_tasks(other_member_caller) == [other_member_task]

    def test_member_sees_assigned_across_projects(self, member_caller, member_task, other_member_task,
                                                  foreign_task):
        assert visible_tasks(member_caller) == [member_task, foreign_task]

    def test_manager_sees_every_task(self, manager_caller, member_task, other_member_task, foreign_task):
        assert visible_tasks(manager_caller) == [member_task, other_member_task, foreign_task]

    def test_project_filter(self, admin_caller, project, member_task, other_member_task, foreign_task):
        assert visible_tasks(admin_caller, project_id=project.pk) == [member_task, other_member_task]

    def test_status_filter_applies_after_scoping(self, member_caller, member_task, other_member_task):
        TaskStore.update(other_member_task.pk, {'status': TaskStatus.DONE})

        assert visible_tasks(member_caller, status=TaskStatus.DONE) == []
        TaskStore.update(member_task.pk, {'status': TaskStatus.DONE})
        assert [t.pk for t in visible_tasks(member_caller, status=TaskStatus.DONE)] == [member_task.pk]

    def test_projects_with_assigned_tasks(self, member_caller, project, other_project, member_task):
        assert projects_with_assigned_tasks(member_caller) == [project]


@pytest.mark.django_db
class TestScopedList:

    def test_dispatch(self, admin_caller, project, member_task):
        assert scoped_list(admin_caller, ResourceKind.PROJECT) == [project]
        assert scoped_list(admin_caller, 'task', {'project_id': project.pk}) == [member_task]
        assert UserRecord('admin@example.com', 'admin') in scoped_list(admin_caller, ResourceKind.USER)

    def test_users_carry_no_secret(self, admin_caller):
        for record in scoped_list(admin_caller, ResourceKind.USER):
            assert set(record.as_dict()) == {'email', 'role'}

    def test_admin_collection_is_not_listable(self, admin_caller):
        with pytest.raises(ValueError):
            scoped_list(admin_caller, ResourceKind.ADMIN)

    def test_unknown_kind(self, admin_caller):
        with pytest.raises(ValueError):
            scoped_list(admin_caller, 'widgets')
