"""
Gated project and task operations.

Each operation follows the same flow: look the target up in the store,
ask the authorization engine, and only then let the store mutate. Denials
surface as Forbidden, missing targets as NotFound.
"""
import logging
import math
from typing import Any, Dict, List, Optional

from apps.core.exceptions import NotFound, ValidationError
from apps.projects.models import Project, Task, TaskStatus
from apps.projects.scoping import (
    projects_with_assigned_tasks, visible_projects, visible_tasks,
)
from apps.projects.store import ProjectStore, TaskStore
from apps.rbac.caller import Caller
from apps.rbac.capabilities import Action, ResourceKind
from apps.rbac.models import Role
from apps.rbac.services import RBACService
from apps.rbac.store import UserStore

logger = logging.getLogger(__name__)

PROJECT_EDITABLE_FIELDS = ('name', 'description')
PROJECT_IMMUTABLE_FIELDS = ('id', 'owner')
TASK_EDITABLE_FIELDS = ('title', 'assigned_to', 'status')
TASK_IMMUTABLE_FIELDS = ('id', 'project_id', 'project')


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _require_fields(data: Dict[str, Any], fields) -> None:
    missing = [field for field in fields if _is_blank(data.get(field))]
    if missing:
        raise ValidationError(
            f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required",
            details={field: ['This field is required.'] for field in missing}
        )


def _check_changes(changes: Dict[str, Any], editable, immutable) -> None:
    if not changes:
        raise ValidationError('No changes supplied')

    locked = [field for field in changes if field in immutable]
    if locked:
        raise ValidationError(
            'Immutable fields cannot be changed',
            details={field: ['This field cannot be changed.'] for field in locked}
        )

    unknown = [field for field in changes if field not in editable]
    if unknown:
        raise ValidationError(
            'Unknown fields',
            details={field: ['Unknown field.'] for field in unknown}
        )

    _require_fields(changes, list(changes))


def _coerce_id(value, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Invalid {field}",
            details={field: ['A valid integer is required.']}
        )


def _validate_status(status) -> str:
    if status not in TaskStatus.values:
        raise ValidationError(
            'Invalid status',
            details={'status': [f"Must be one of: {', '.join(TaskStatus.values)}"]}
        )
    return status


def _validate_assignee(identity: str) -> str:
    if UserStore.get(identity) is None:
        raise ValidationError(
            'Assignee does not exist',
            details={'assigned_to': ['No user with this identity.']}
        )
    return identity


class ProjectService:
    """Project operations gated by the authorization engine."""

    @classmethod
    def list_projects(cls, caller: Caller) -> List[Project]:
        return visible_projects(caller)

    @classmethod
    def get_project(cls, caller: Caller, project_id) -> Project:
        """
        Fetch one project.

        Raises:
            NotFound: If the project does not exist
            Forbidden: If the caller may not view it
        """
        project = ProjectStore.get(project_id)
        if project is None:
            raise NotFound('Project not found')
        RBACService.require(caller, Action.VIEW, ResourceKind.PROJECT, project)
        return project

    @classmethod
    def create_project(cls, caller: Caller, name: str, description: str) -> Project:
        """
        Create a project owned by the caller.

        Raises:
            Forbidden: If the caller's role cannot create projects
            ValidationError: If name or description is missing
        """
        RBACService.require(caller, Action.CREATE, ResourceKind.PROJECT)
        _require_fields({'name': name, 'description': description}, ('name', 'description'))
        return ProjectStore.create(name=name, description=description, owner=caller.identity)

    @classmethod
    def update_project(cls, caller: Caller, project_id, changes: Dict[str, Any]) -> Project:
        """
        Change a project's name and/or description.

        Raises:
            NotFound: If the project does not exist
            Forbidden: Unless the caller is an admin or the owning manager
            ValidationError: If changes touch id/owner or are malformed
        """
        project = ProjectStore.get(project_id)
        if project is None:
            raise NotFound('Project not found')
        RBACService.require(caller, Action.EDIT, ResourceKind.PROJECT, project)
        _check_changes(changes, PROJECT_EDITABLE_FIELDS, PROJECT_IMMUTABLE_FIELDS)

        updated = ProjectStore.update(project.pk, changes)
        if updated is None:
            raise NotFound('Project not found')
        return updated

    @classmethod
    def delete_project(cls, caller: Caller, project_id) -> int:
        """
        Delete a project together with its tasks.

        Returns:
            Number of tasks removed by the cascade
        """
        project = ProjectStore.get(project_id)
        if project is None:
            raise NotFound('Project not found')
        RBACService.require(caller, Action.DELETE, ResourceKind.PROJECT, project)

        removed = ProjectStore.delete(project.pk)
        if removed is None:
            raise NotFound('Project not found')
        return removed


class TaskService:
    """
    Task operations gated by the authorization engine.

    The project context handed to the engine is always the task's own
    project, looked up by task.project_id.
    """

    @classmethod
    def list_tasks(cls, caller: Caller, project_id=None, status: Optional[str] = None) -> List[Task]:
        if status is not None:
            _validate_status(status)
        if project_id is not None:
            project_id = _coerce_id(project_id, 'project_id')
        return visible_tasks(caller, project_id=project_id, status=status)

    @classmethod
    def _get_with_project(cls, task_id):
        task = TaskStore.get(task_id)
        if task is None:
            raise NotFound('Task not found')
        return task, ProjectStore.get(task.project_id)

    @classmethod
    def get_task(cls, caller: Caller, task_id) -> Task:
        task, project = cls._get_with_project(task_id)
        RBACService.require(caller, Action.VIEW, ResourceKind.TASK, task, project)
        return task

    @classmethod
    def create_task(cls, caller: Caller, project_id, title: str, assigned_to: str,
                    status: Optional[str] = None) -> Task:
        """
        Create a task in an existing project.

        Args:
            caller: Resolved caller
            project_id: Id of the project the task belongs to
            title: Task title
            assigned_to: Identity of an existing user
            status: 'pending' (default) or 'done'

        Raises:
            ValidationError: If a required field is missing, the status is
                unknown or the assignee does not exist
            NotFound: If the project does not exist
            Forbidden: Unless the caller is an admin or owns the project
        """
        _require_fields(
            {'title': title, 'assigned_to': assigned_to, 'project_id': project_id},
            ('title', 'assigned_to', 'project_id')
        )
        project_id = _coerce_id(project_id, 'project_id')
        status = _validate_status(TaskStatus.PENDING if status is None else status)

        project = ProjectStore.get(project_id)
        if project is None:
            raise NotFound('Project not found')
        RBACService.require(caller, Action.CREATE, ResourceKind.TASK, related_project=project)
        # Only callers allowed to create may learn whether an identity exists.
        _validate_assignee(assigned_to)

        return TaskStore.create(
            project_id=project.pk,
            title=title,
            assigned_to=assigned_to,
            status=status,
        )

    @classmethod
    def update_task(cls, caller: Caller, task_id, changes: Dict[str, Any]) -> Task:
        """
        Apply a change set to a task.

        A status-only change needs mark-done rights, which members hold on
        their assigned tasks. Touching title or assigned_to needs edit
        rights, plus mark-done rights when status is changed alongside.

        Raises:
            NotFound: If the task does not exist
            ValidationError: If changes touch id/project or are malformed
            Forbidden: If the engine denies any required action
        """
        task, project = cls._get_with_project(task_id)
        _check_changes(changes, TASK_EDITABLE_FIELDS, TASK_IMMUTABLE_FIELDS)

        if 'title' in changes or 'assigned_to' in changes:
            RBACService.require(caller, Action.EDIT, ResourceKind.TASK, task, project)
        if 'status' in changes:
            RBACService.require(caller, Action.MARK_DONE, ResourceKind.TASK, task, project)
            _validate_status(changes['status'])
        if 'assigned_to' in changes:
            _validate_assignee(changes['assigned_to'])

        updated = TaskStore.update(task.pk, changes)
        if updated is None:
            raise NotFound('Task not found')
        return updated

    @classmethod
    def delete_task(cls, caller: Caller, task_id) -> None:
        task, project = cls._get_with_project(task_id)
        RBACService.require(caller, Action.DELETE, ResourceKind.TASK, task, project)
        if not TaskStore.delete(task.pk):
            raise NotFound('Task not found')


def _completion_rate(done: int, total: int) -> int:
    if not total:
        return 0
    # Halves round up.
    return math.floor(done * 100 / total + 0.5)


class AnalyticsService:
    """Aggregate views over the whole store."""

    @classmethod
    def analytics(cls, caller: Caller) -> Dict[str, Any]:
        """
        System-wide totals for administrators.

        Raises:
            Forbidden: Unless the caller holds (admin, access)
        """
        RBACService.require(caller, Action.ACCESS, ResourceKind.ADMIN,
                            message='Administrator access required')

        users = UserStore.list()
        stats = TaskStore.stats()
        return {
            'total_users': len(users),
            'users_by_role': {
                role.value: sum(1 for user in users if user.role == role)
                for role in Role
            },
            'total_projects': len(ProjectStore.list()),
            'total_tasks': stats['total'],
            'completed_tasks': stats['done'],
            'pending_tasks': stats['total'] - stats['done'],
            'completion_rate': _completion_rate(stats['done'], stats['total']),
        }

    @classmethod
    def dashboard(cls, caller: Caller) -> Dict[str, Any]:
        """Per-role summary of what the caller can see and is assigned."""
        projects = visible_projects(caller)
        tasks = visible_tasks(caller)
        done = sum(1 for task in tasks if task.status == TaskStatus.DONE)

        summary = {
            'role': caller.role.value,
            'visible_projects': len(projects),
            'visible_tasks': len(tasks),
            'my_tasks': sum(1 for task in tasks if task.assigned_to == caller.identity),
            'completed_tasks': done,
            'pending_tasks': len(tasks) - done,
            'completion_rate': _completion_rate(done, len(tasks)),
        }
        if caller.role == Role.MEMBER:
            summary['my_projects'] = [
                {'id': project.pk, 'name': project.name}
                for project in projects_with_assigned_tasks(caller)
            ]
        return summary
