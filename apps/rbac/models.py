"""
RBAC models.

Implements:
- Role (closed set of roles: admin, manager, member)
- User (identity, hashed secret, role); the AUTH_USER_MODEL
"""
import logging
from django.db import models
from django.contrib.auth.hashers import make_password, check_password

logger = logging.getLogger(__name__)


class Role(models.TextChoices):
    """The three roles a user can hold."""
    ADMIN = 'admin', 'Admin'
    MANAGER = 'manager', 'Manager'
    MEMBER = 'member', 'Member'


class UserManager(models.Manager):
    """
    Manager for User queries.

    Compatible with Django's authentication system.
    """

    def by_email(self, email):
        """Find user by email (exact match)."""
        return self.filter(email=email).first()

    def create_user(self, email, password=None, role=Role.MEMBER, **extra_fields):
        """Create a new user with hashed password."""
        if not email:
            raise ValueError('Email address is required')
        if role not in Role.values:
            raise ValueError(f"Unknown role '{role}'")

        user = self.model(email=email, role=role, **extra_fields)
        if password:
            user.set_password(password)
        user.save(using=self._db)
        return user

    def get_by_natural_key(self, email):
        return self.get(**{self.model.USERNAME_FIELD: email})


class User(models.Model):
    """
    A seeded user account.

    The email is the user's identity and is compared by exact string
    equality everywhere. Role is the only field that changes after
    seeding, and only through RBACService.change_user_role.
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        help_text="User email address (identity)"
    )
    password_hash = models.CharField(
        max_length=255,
        help_text="Hashed password",
        db_column='password_hash'
    )
    role = models.CharField(
        max_length=16,
        choices=Role.choices,
        default=Role.MEMBER,
        db_index=True,
        help_text="Role granting coarse capabilities"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        db_table = 'users'
        ordering = ['id']

    def __str__(self):
        return self.email

    @property
    def identity(self):
        return self.email

    def check_password(self, raw_password):
        """Check if provided password matches stored hash."""
        return check_password(raw_password, self.password_hash)

    def set_password(self, raw_password):
        """Set user password (hashes automatically)."""
        self.password_hash = make_password(raw_password)

    @property
    def is_active(self):
        return True

    @property
    def is_authenticated(self):
        """
        Always return True for User instances.
        This is required for Django authentication compatibility.
        """
        return True

    @property
    def is_anonymous(self):
        """
        Always return False for User instances.
        This is required for Django authentication compatibility.
        """
        return False
