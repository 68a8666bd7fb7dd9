"""
Authorization engine.

Every decision function here is pure and total: it returns a bool for any
well-formed input and never raises. Decisions combine the static permission
table with ownership (Project.owner) and assignment (Task.assigned_to).

Contract for task decisions: the project argument is Optional. When it is
None, or is not the task's own project, a manager's ownership cannot be
proven and the decision is deny.
"""
import logging
from enum import Enum
from typing import Optional, TYPE_CHECKING

from apps.rbac.caller import Caller
from apps.rbac.capabilities import Action, ResourceKind, has_capability
from apps.rbac.models import Role

if TYPE_CHECKING:
    from apps.projects.models import Project, Task

logger = logging.getLogger(__name__)


class Decision(str, Enum):
    ALLOW = 'allow'
    DENY = 'deny'

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW

    @classmethod
    def of(cls, allowed: bool) -> 'Decision':
        return cls.ALLOW if allowed else cls.DENY


def _owns(caller: Caller, project: Optional['Project']) -> bool:
    return project is not None and project.owner == caller.identity


def _is_task_project(task: 'Task', project: Optional['Project']) -> bool:
    return project is not None and project.pk == task.project_id


def _is_assignee(caller: Caller, task: 'Task') -> bool:
    return task.assigned_to == caller.identity


# ===== PROJECTS =====

def can_view_project(caller: Caller, project: 'Project') -> bool:
    """Every authenticated caller may view every project."""
    return has_capability(caller.role, ResourceKind.PROJECT, Action.VIEW)


def can_edit_project(caller: Caller, project: 'Project') -> bool:
    if caller.role == Role.ADMIN:
        return True
    if caller.role == Role.MANAGER:
        return _owns(caller, project)
    return False


def can_delete_project(caller: Caller, project: 'Project') -> bool:
    """Same rule as edit: admin, or the owning manager."""
    return can_edit_project(caller, project)


# ===== TASKS =====

def can_create_task(caller: Caller, project: Optional['Project']) -> bool:
    if caller.role == Role.ADMIN:
        return True
    if caller.role == Role.MANAGER:
        return _owns(caller, project)
    return False


def can_view_task(caller: Caller, task: 'Task', project: Optional['Project'] = None) -> bool:
    """
    Admins and managers may view any task; members only their own.

    Managers are not restricted to owned projects for viewing, so the
    project context is not consulted here.
    """
    if caller.role in (Role.ADMIN, Role.MANAGER):
        return True
    if caller.role == Role.MEMBER:
        return _is_assignee(caller, task)
    return False


def can_edit_task(caller: Caller, task: 'Task', project: Optional['Project'] = None) -> bool:
    if caller.role == Role.ADMIN:
        return True
    if caller.role == Role.MANAGER:
        return _is_task_project(task, project) and _owns(caller, project)
    return False


def can_delete_task(caller: Caller, task: 'Task', project: Optional['Project'] = None) -> bool:
    return can_edit_task(caller, task, project)


def can_mark_task_done(caller: Caller, task: 'Task', project: Optional['Project'] = None) -> bool:
    """
    Toggle a task's status.

    The one write a member may perform, and only on a task assigned to them.
    """
    if caller.role == Role.ADMIN:
        return True
    if caller.role == Role.MANAGER:
        return _is_task_project(task, project) and _owns(caller, project)
    if caller.role == Role.MEMBER:
        return _is_assignee(caller, task)
    return False


# ===== USERS =====

def is_self_role_change(caller: Caller, target_identity: str) -> bool:
    return caller.identity == target_identity


def can_change_user_role(caller: Caller, target_identity: str) -> bool:
    if is_self_role_change(caller, target_identity):
        return False
    return has_capability(caller.role, ResourceKind.USER, Action.EDIT)


# ===== DISPATCH =====

_PROJECT_DECISIONS = {
    Action.VIEW: can_view_project,
    Action.EDIT: can_edit_project,
    Action.DELETE: can_delete_project,
}

_TASK_DECISIONS = {
    Action.VIEW: can_view_task,
    Action.EDIT: can_edit_task,
    Action.ASSIGN: can_edit_task,
    Action.DELETE: can_delete_task,
    Action.MARK_DONE: can_mark_task_done,
}


def _decide(caller: Caller, action: Action, kind: ResourceKind, resource,
            related_project) -> bool:
    if kind == ResourceKind.PROJECT:
        if action == Action.CREATE:
            return has_capability(caller.role, kind, action)
        decide = _PROJECT_DECISIONS.get(action)
        return decide is not None and resource is not None and decide(caller, resource)

    if kind == ResourceKind.TASK:
        if action == Action.CREATE:
            # The target of task creation is the project it will belong to.
            return can_create_task(caller, related_project)
        decide = _TASK_DECISIONS.get(action)
        return decide is not None and resource is not None and decide(caller, resource, related_project)

    if kind == ResourceKind.USER:
        if action == Action.EDIT and resource is not None:
            return can_change_user_role(caller, resource.email)
        return has_capability(caller.role, kind, action)

    if kind == ResourceKind.ADMIN:
        return has_capability(caller.role, kind, action)

    return False


def authorize(caller: Caller, action, resource_kind, resource=None,
              related_project: Optional['Project'] = None) -> Decision:
    """
    Decide allow/deny for a caller performing action on a resource.

    Args:
        caller: Resolved caller
        action: Action (or its string value)
        resource_kind: ResourceKind (or its string value)
        resource: Target record; None for creation and collection checks
        related_project: The project a task belongs to, or the project a
            task is being created in

    Returns:
        Decision.ALLOW or Decision.DENY
    """
    try:
        action = Action(action)
        resource_kind = ResourceKind(resource_kind)
    except ValueError:
        return Decision.DENY

    decision = Decision.of(_decide(caller, action, resource_kind, resource, related_project))

    logger.debug(
        f"Authorization {decision.value}: {caller.role} {action.value} {resource_kind.value}",
        extra={
            'identity': caller.identity,
            'resource_id': getattr(resource, 'pk', None),
        }
    )
    return decision
