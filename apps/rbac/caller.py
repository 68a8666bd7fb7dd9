"""
The authenticated actor of a request.
"""
from dataclasses import dataclass

from apps.rbac.models import Role


@dataclass(frozen=True)
class Caller:
    """
    Identity and role of the caller, resolved once per request.

    identity is the user's email and is treated as an opaque key.
    """
    identity: str
    role: Role

    def __post_init__(self):
        # Coerce plain strings so comparisons against Role members are exact.
        object.__setattr__(self, 'role', Role(self.role))

    @classmethod
    def from_user(cls, user) -> 'Caller':
        return cls(identity=user.email, role=user.role)

