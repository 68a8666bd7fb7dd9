"""
Project and task collection stores.

The only code that writes Project, Task and IdSequence rows. Every mutation
of a collection runs inside transaction.atomic while holding that
collection's in-process lock, so concurrent requests never observe a
half-applied write or allocate the same id twice.
"""
import logging
import threading
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import Max

from apps.core.exceptions import NotFound
from apps.projects.models import IdSequence, Project, Task, TaskStatus

logger = logging.getLogger(__name__)

# Lock order when both are needed: project, then task.
_PROJECT_LOCK = threading.RLock()
_TASK_LOCK = threading.RLock()


class IdAllocator:
    """
    Allocates ids as max(existing ids) + 1.

    The high-water mark is persisted, so an id freed by deletion is never
    handed out again.
    """

    @classmethod
    def next_id(cls, name: str, model) -> int:
        """
        Allocate the next id for a collection.

        Must be called inside transaction.atomic.
        """
        sequence, _ = IdSequence.objects.select_for_update().get_or_create(name=name)
        current_max = model.objects.aggregate(value=Max('id'))['value'] or 0
        next_value = max(sequence.last_value, current_max) + 1
        sequence.last_value = next_value
        sequence.save(update_fields=['last_value'])
        return next_value


class ProjectStore:
    """CRUD over the project collection."""

    SEQUENCE = 'project'

    @classmethod
    def get(cls, project_id) -> Optional[Project]:
        return Project.objects.filter(pk=project_id).first()

    @classmethod
    def list(cls) -> List[Project]:
        return list(Project.objects.order_by('id'))

    @classmethod
    def list_by_ids(cls, ids) -> List[Project]:
        return list(Project.objects.filter(pk__in=list(ids)).order_by('id'))

    @classmethod
    def create(cls, name: str, description: str, owner: str) -> Project:
        with _PROJECT_LOCK, transaction.atomic():
            project = Project.objects.create(
                id=IdAllocator.next_id(cls.SEQUENCE, Project),
                name=name,
                description=description,
                owner=owner,
            )

        logger.info(
            f"Project created: {project.pk}",
            extra={'project_id': project.pk, 'owner': owner}
        )
        return project

    @classmethod
    def update(cls, project_id, changes: Dict[str, Any]) -> Optional[Project]:
        """
        Apply name/description changes.

        Returns:
            The updated Project, or None if it no longer exists
        """
        with _PROJECT_LOCK, transaction.atomic():
            project = Project.objects.select_for_update().filter(pk=project_id).first()
            if project is None:
                return None
            for field in ('name', 'description'):
                if field in changes:
                    setattr(project, field, changes[field])
            project.save()
        return project

    @classmethod
    def delete(cls, project_id) -> Optional[int]:
        """
        Delete a project and every task in it as one unit.

        Returns:
            Number of tasks removed, or None if the project did not exist
        """
        with _PROJECT_LOCK, _TASK_LOCK, transaction.atomic():
            project = Project.objects.select_for_update().filter(pk=project_id).first()
            if project is None:
                return None
            removed, _ = Task.objects.filter(project_id=project.pk).delete()
            project.delete()

        logger.info(
            f"Project deleted: {project_id}",
            extra={'project_id': project_id, 'tasks_removed': removed}
        )
        return removed


class TaskStore:
    """CRUD over the task collection."""

    SEQUENCE = 'task'

    @classmethod
    def get(cls, task_id) -> Optional[Task]:
        return Task.objects.select_related('project').filter(pk=task_id).first()

    @classmethod
    def list(cls, project_id=None, status: Optional[str] = None,
             assigned_to: Optional[str] = None) -> List[Task]:
        queryset = Task.objects.all()
        if project_id is not None:
            queryset = queryset.filter(project_id=project_id)
        if status is not None:
            queryset = queryset.filter(status=status)
        if assigned_to is not None:
            queryset = queryset.filter(assigned_to=assigned_to)
        return list(queryset.order_by('id'))

    @classmethod
    def project_ids_assigned_to(cls, identity: str) -> List[int]:
        return list(
            Task.objects.filter(assigned_to=identity)
            .order_by('project_id')
            .values_list('project_id', flat=True)
            .distinct()
        )

    @classmethod
    def create(cls, project_id, title: str, assigned_to: str,
               status: str = TaskStatus.PENDING) -> Task:
        """
        Create a task in an existing project.

        Raises:
            NotFound: If the project was deleted before the task was written
        """
        with _TASK_LOCK, transaction.atomic():
            project = Project.objects.select_for_update().filter(pk=project_id).first()
            if project is None:
                raise NotFound('Project not found')
            task = Task.objects.create(
                id=IdAllocator.next_id(cls.SEQUENCE, Task),
                project=project,
                title=title,
                assigned_to=assigned_to,
                status=status,
            )

        logger.info(
            f"Task created: {task.pk}",
            extra={'task_id': task.pk, 'project_id': project.pk}
        )
        return task

    @classmethod
    def update(cls, task_id, changes: Dict[str, Any]) -> Optional[Task]:
        """
        Apply title/assigned_to/status changes.

        Returns:
            The updated Task, or None if it no longer exists
        """
        with _TASK_LOCK, transaction.atomic():
            task = Task.objects.select_for_update().filter(pk=task_id).first()
            if task is None:
                return None
            for field in ('title', 'assigned_to', 'status'):
                if field in changes:
                    setattr(task, field, changes[field])
            task.save()
        return task

    @classmethod
    def delete(cls, task_id) -> bool:
        with _TASK_LOCK, transaction.atomic():
            removed, _ = Task.objects.filter(pk=task_id).delete()

        if removed:
            logger.info(f"Task deleted: {task_id}", extra={'task_id': task_id})
        return bool(removed)

    @classmethod
    def stats(cls) -> Dict[str, int]:
        return {
            'total': Task.objects.count(),
            'done': Task.objects.filter(status=TaskStatus.DONE).count(),
        }
