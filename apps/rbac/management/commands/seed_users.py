"""
Management command to seed the user collection.

Creates each user that does not exist yet. Existing users keep their
password and current role, so re-running is safe.
"""
from django.core.management.base import BaseCommand, CommandError
from django.core.exceptions import ImproperlyConfigured

from apps.rbac.seeding import load_seed_users, seed_users


class Command(BaseCommand):
    help = 'Seed users from SEED_USERS_FILE (or --file), or the built-in demo users'

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            '--file',
            type=str,
            default=None,
            help='JSON file of [{"email", "password", "role"}]',
        )

    def handle(self, *args, **options):
        try:
            entries = load_seed_users(options['file'])
        except ImproperlyConfigured as e:
            raise CommandError(str(e))

        for user, created in seed_users(entries):
            if created:
                self.stdout.write(self.style.SUCCESS(f'✓ Created {user.email} ({user.role})'))
            else:
                self.stdout.write(self.style.WARNING(f'↻ Exists {user.email} ({user.role})'))
