"""
Seeded user definitions.

Users are never created through the API. They come either from the JSON
file named by SEED_USERS_FILE or from the built-in demo set below.
"""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from apps.rbac.models import Role
from apps.rbac.store import UserStore

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {'email': 'admin@taskboard.dev', 'password': 'admin123', 'role': Role.ADMIN},
    {'email': 'manager@taskboard.dev', 'password': 'manager123', 'role': Role.MANAGER},
    {'email': 'manager2@taskboard.dev', 'password': 'manager123', 'role': Role.MANAGER},
    {'email': 'alice@taskboard.dev', 'password': 'member123', 'role': Role.MEMBER},
    {'email': 'bob@taskboard.dev', 'password': 'member123', 'role': Role.MEMBER},
]


def load_seed_users(path: Optional[str] = None) -> List[Dict]:
    """
    Read seed user definitions.

    Args:
        path: JSON file of [{"email", "password", "role"}]; falls back to
            settings.SEED_USERS_FILE, then to DEMO_USERS

    Raises:
        ImproperlyConfigured: If the file is unreadable or an entry is malformed
    """
    path = path or settings.SEED_USERS_FILE
    if not path:
        return [dict(entry) for entry in DEMO_USERS]

    try:
        entries = json.loads(Path(path).read_text())
    except (OSError, ValueError) as e:
        raise ImproperlyConfigured(f"Cannot read seed users from {path}: {e}")

    if not isinstance(entries, list):
        raise ImproperlyConfigured(f"Seed users file {path} must contain a JSON list")

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict) or not entry.get('email') or not entry.get('password'):
            raise ImproperlyConfigured(f"Seed user #{index} needs an email and a password")
        if entry.get('role') not in Role.values:
            raise ImproperlyConfigured(
                f"Seed user {entry['email']} has unknown role '{entry.get('role')}'"
            )
    return entries


def seed_users(entries: List[Dict]) -> List[tuple]:
    """
    Idempotently create the given users.

    Returns:
        List of (user, created) tuples in input order
    """
    results = []
    for entry in entries:
        user, created = UserStore.seed(entry['email'], entry['password'], Role(entry['role']))
        results.append((user, created))
    logger.info(
        f"Seeded users: {sum(1 for _, created in results if created)} created",
        extra={'total': len(results)}
    )
    return results
