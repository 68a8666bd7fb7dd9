"""
Scoped user listing.

Returns secret-free user records filtered by what the caller may discover.
"""
from dataclasses import dataclass, asdict
from typing import List

from apps.rbac.caller import Caller
from apps.rbac.models import Role
from apps.rbac.store import UserStore


@dataclass(frozen=True)
class UserRecord:
    """A user as it may leave the core: identity and role, never the secret."""
    email: str
    role: Role

    @classmethod
    def from_user(cls, user) -> 'UserRecord':
        return cls(email=user.email, role=Role(user.role))

    def as_dict(self) -> dict:
        data = asdict(self)
        data['role'] = self.role.value
        return data


def visible_users(caller: Caller) -> List[UserRecord]:
    """
    Users visible to the caller, e.g. for an assignment picker.

    Admins and managers see everyone. Members see admins, managers and
    themselves, so they cannot discover other members.
    """
    users = UserStore.list()
    if caller.role not in (Role.ADMIN, Role.MANAGER):
        users = [
            user for user in users
            if user.role in (Role.ADMIN, Role.MANAGER) or user.email == caller.identity
        ]
    return [UserRecord.from_user(user) for user in users]
