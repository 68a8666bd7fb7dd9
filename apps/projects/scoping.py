"""
Scoped query layer.

Filters whole-collection reads down to the records a caller is entitled to
see. This is a relevance filter, not a permission check: no per-item
authorization is evaluated here, and results keep insertion (id) order.
"""
from typing import List, Optional

from apps.projects.models import Project, Task
from apps.projects.store import ProjectStore, TaskStore
from apps.rbac.caller import Caller
from apps.rbac.capabilities import ResourceKind
from apps.rbac.models import Role
from apps.rbac.scoping import visible_users


def visible_projects(caller: Caller) -> List[Project]:
    """
    Projects listed for the caller.

    Admins and members see every project. Managers see the projects they
    own.
    """
    projects = ProjectStore.list()
    if caller.role == Role.MANAGER:
        return [project for project in projects if project.owner == caller.identity]
    if caller.role in (Role.ADMIN, Role.MEMBER):
        return projects
    return []


def visible_tasks(caller: Caller, project_id=None, status: Optional[str] = None) -> List[Task]:
    """
    Tasks listed for the caller, optionally narrowed to one project.

    Admins and managers see every task. Members see only tasks assigned to
    them. The status filter applies after role scoping.
    """
    tasks = TaskStore.list(project_id=project_id)
    if caller.role == Role.MEMBER:
        tasks = [task for task in tasks if task.assigned_to == caller.identity]
    elif caller.role not in (Role.ADMIN, Role.MANAGER):
        return []

    if status is not None:
        tasks = [task for task in tasks if task.status == status]
    return tasks


def projects_with_assigned_tasks(caller: Caller) -> List[Project]:
    """Projects that contain at least one task assigned to the caller."""
    return ProjectStore.list_by_ids(TaskStore.project_ids_assigned_to(caller.identity))


def scoped_list(caller: Caller, resource_kind, filter: Optional[dict] = None) -> list:
    """
    List one collection as seen by the caller.

    Args:
        caller: Resolved caller
        resource_kind: ResourceKind (or its string value) to list
        filter: Optional narrowing; tasks accept 'project_id' and 'status'

    Returns:
        Ordered list of records (UserRecord for users, secret stripped)

    Raises:
        ValueError: If resource_kind is not a listable collection
    """
    resource_kind = ResourceKind(resource_kind)
    filter = filter or {}

    if resource_kind == ResourceKind.PROJECT:
        return visible_projects(caller)
    if resource_kind == ResourceKind.TASK:
        return visible_tasks(
            caller,
            project_id=filter.get('project_id'),
            status=filter.get('status'),
        )
    if resource_kind == ResourceKind.USER:
        return visible_users(caller)
    raise ValueError(f"'{resource_kind.value}' is not a listable collection")
