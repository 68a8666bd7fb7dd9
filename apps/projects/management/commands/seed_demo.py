"""
Management command to create a demo workspace.

Creates:
- The seeded users (see seed_users)
- One project per manager, owned by that manager
- Tasks assigned to the demo members, some already done

Projects and tasks are written through the stores, so ids follow the
normal allocation rule.
"""
from django.core.management.base import BaseCommand, CommandError
from django.core.exceptions import ImproperlyConfigured

from apps.projects.models import TaskStatus
from apps.projects.store import ProjectStore, TaskStore
from apps.rbac.models import Role
from apps.rbac.seeding import load_seed_users, seed_users

DEMO_PROJECTS = [
    {
        'name': 'Website Redesign',
        'description': 'Refresh the marketing site and landing pages',
        'tasks': [
            ('Draft wireframes', TaskStatus.DONE),
            ('Write homepage copy', TaskStatus.PENDING),
            ('Set up analytics', TaskStatus.PENDING),
        ],
    },
    {
        'name': 'Mobile App Launch',
        'description': 'Ship the first public release of the mobile app',
        'tasks': [
            ('Prepare store listing', TaskStatus.PENDING),
            ('Fix crash on login', TaskStatus.DONE),
        ],
    },
]


class Command(BaseCommand):
    help = 'Create demo users, projects and tasks'

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument(
            '--users-file',
            type=str,
            default=None,
            help='JSON file of seed users (defaults to SEED_USERS_FILE or built-in users)',
        )

    def handle(self, *args, **options):
        """Create demo data."""
        self.stdout.write('=' * 70)
        self.stdout.write('Creating Demo Workspace')
        self.stdout.write('=' * 70)

        self.stdout.write('\n1. Seeding users...')
        try:
            entries = load_seed_users(options['users_file'])
        except ImproperlyConfigured as e:
            raise CommandError(str(e))
        users = [user for user, _ in seed_users(entries)]
        self.stdout.write(self.style.SUCCESS(f'   ✓ {len(users)} users ready'))

        if ProjectStore.list():
            self.stdout.write(
                self.style.WARNING('\n↻ Projects already exist, skipping demo projects and tasks')
            )
            return

        managers = [user for user in users if user.role == Role.MANAGER]
        members = [user for user in users if user.role == Role.MEMBER]
        if not managers or not members:
            raise CommandError('Demo data needs at least one manager and one member')

        self.stdout.write('\n2. Creating projects and tasks...')
        for index, entry in enumerate(DEMO_PROJECTS):
            owner = managers[index % len(managers)]
            project = ProjectStore.create(
                name=entry['name'],
                description=entry['description'],
                owner=owner.email,
            )
            self.stdout.write(
                self.style.SUCCESS(f'   ✓ Project #{project.pk} {project.name} (owner {owner.email})')
            )

            for task_index, (title, status) in enumerate(entry['tasks']):
                assignee = members[task_index % len(members)]
                task = TaskStore.create(
                    project_id=project.pk,
                    title=title,
                    assigned_to=assignee.email,
                    status=status,
                )
                self.stdout.write(f'     - Task #{task.pk} {task.title} → {assignee.email} [{task.status}]')

        self.stdout.write(self.style.SUCCESS('\n✓ Demo workspace ready'))
