"""
User collection store.

The only code that mutates User rows. Users are seeded, never deleted, and
only their role changes after creation.
"""
import logging
from typing import List, Optional, Tuple

from django.db import transaction

from apps.rbac.models import Role, User

logger = logging.getLogger(__name__)


class UserStore:
    """CRUD over the user collection."""

    @classmethod
    def get(cls, identity: str) -> Optional[User]:
        return User.objects.by_email(identity)

    @classmethod
    def list(cls) -> List[User]:
        return list(User.objects.order_by('id'))

    @classmethod
    @transaction.atomic
    def update_role(cls, identity: str, role: Role) -> Optional[User]:
        """
        Set a user's role.

        Returns:
            The updated User, or None if no user has that identity
        """
        user = User.objects.select_for_update().filter(email=identity).first()
        if user is None:
            return None

        previous = user.role
        user.role = role
        user.save(update_fields=['role', 'updated_at'])

        logger.info(
            f"Role changed from {previous} to {role}",
            extra={'target_identity': identity}
        )
        return user

    @classmethod
    @transaction.atomic
    def seed(cls, email: str, password: str, role: Role) -> Tuple[User, bool]:
        """
        Idempotently create a seeded user.

        An existing user keeps its current role and password.

        Returns:
            Tuple of (user, created)
        """
        user = User.objects.select_for_update().filter(email=email).first()
        if user is not None:
            return user, False
        return User.objects.create_user(email=email, password=password, role=role), True
