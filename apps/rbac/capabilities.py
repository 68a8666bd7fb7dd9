"""
Static permission table.

Maps each Role to the set of coarse (resource kind, action) capabilities it
holds. Ownership and assignment rules live in apps.rbac.policy; this module
only answers "may this role ever do this kind of thing".
"""
from enum import Enum
from itertools import product
from typing import Dict, FrozenSet, NamedTuple

from apps.rbac.models import Role


class ResourceKind(str, Enum):
    PROJECT = 'project'
    TASK = 'task'
    USER = 'user'
    ADMIN = 'admin'


class Action(str, Enum):
    VIEW = 'view'
    CREATE = 'create'
    EDIT = 'edit'
    DELETE = 'delete'
    ASSIGN = 'assign'
    ACCESS = 'access'
    # Status toggle on a task. Never granted by the table to non-admins;
    # decided by assignment/ownership in the policy module.
    MARK_DONE = 'mark_done'


class Capability(NamedTuple):
    kind: ResourceKind
    action: Action

    @property
    def code(self) -> str:
        """Scope-style code, e.g. 'project:edit'."""
        return f"{self.kind.value}:{self.action.value}"


ALL_CAPABILITIES: FrozenSet[Capability] = frozenset(
    Capability(kind, action) for kind, action in product(ResourceKind, Action)
)


def _capabilities_for(role: Role) -> FrozenSet[Capability]:
    if role == Role.ADMIN:
        return ALL_CAPABILITIES
    if role == Role.MANAGER:
        return frozenset({
            Capability(ResourceKind.PROJECT, Action.VIEW),
            Capability(ResourceKind.PROJECT, Action.CREATE),
            Capability(ResourceKind.PROJECT, Action.EDIT),
            Capability(ResourceKind.TASK, Action.VIEW),
            Capability(ResourceKind.TASK, Action.CREATE),
            Capability(ResourceKind.TASK, Action.EDIT),
            Capability(ResourceKind.TASK, Action.DELETE),
            Capability(ResourceKind.TASK, Action.ASSIGN),
        })
    if role == Role.MEMBER:
        return frozenset({
            Capability(ResourceKind.PROJECT, Action.VIEW),
            Capability(ResourceKind.TASK, Action.VIEW),
        })
    raise ValueError(f"No capabilities defined for role '{role}'")


# Built at import time so a Role without an entry fails loudly on startup.
ROLE_CAPABILITIES: Dict[Role, FrozenSet[Capability]] = {
    role: _capabilities_for(role) for role in Role
}


def capabilities_for(role) -> FrozenSet[Capability]:
    """Return the capability set for a role (empty for an unknown value)."""
    try:
        role = Role(role)
    except ValueError:
        return frozenset()
    return ROLE_CAPABILITIES[role]


def has_capability(role, kind: ResourceKind, action: Action) -> bool:
    """Pure set-membership lookup in the permission table."""
    return Capability(ResourceKind(kind), Action(action)) in capabilities_for(role)
