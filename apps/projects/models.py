"""
Project and task models.

Primary keys are allocated by apps.projects.store (max + 1 against a
per-collection high-water mark), never by the database, so ids stay
monotonic and are not reused after deletion.
"""
from django.db import models


class TaskStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    DONE = 'done', 'Done'


class IdSequence(models.Model):
    """
    High-water mark for one collection's ids.

    The row is locked for the duration of every create/cascade on its
    collection.
    """

    name = models.CharField(max_length=32, primary_key=True)
    last_value = models.PositiveBigIntegerField(default=0)

    class Meta:
        db_table = 'id_sequences'

    def __str__(self):
        return f"{self.name}={self.last_value}"


class Project(models.Model):
    """
    A project owned by the identity that created it.

    owner is immutable after creation.
    """

    id = models.PositiveIntegerField(primary_key=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    owner = models.CharField(
        max_length=254,
        db_index=True,
        help_text="Identity (email) of the owning user"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'projects'
        ordering = ['id']

    def __str__(self):
        return self.name


class Task(models.Model):
    """A unit of work inside a project, assigned to one identity."""

    id = models.PositiveIntegerField(primary_key=True)
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='tasks',
    )
    title = models.CharField(max_length=255)
    assigned_to = models.CharField(
        max_length=254,
        db_index=True,
        help_text="Identity (email) of the assignee"
    )
    status = models.CharField(
        max_length=16,
        choices=TaskStatus.choices,
        default=TaskStatus.PENDING,
        db_index=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tasks'
        ordering = ['id']
        indexes = [
            models.Index(fields=['project', 'assigned_to'], name='tasks_project_assignee_idx'),
        ]

    def __str__(self):
        return self.title

    @property
    def is_done(self):
        return self.status == TaskStatus.DONE
