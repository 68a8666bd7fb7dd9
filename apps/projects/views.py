"""
Project, task, dashboard and analytics API views.

Views resolve nothing themselves: they hand request.auth (the Caller) and
the parsed body to the services, and let service exceptions reach the
DRF exception handler.
"""
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiExample
from drf_spectacular.types import OpenApiTypes
import logging

from apps.core.exceptions import ValidationError
from apps.projects.serializers import (
    ProjectSerializer, TaskSerializer,
    ProjectCreateSerializer, TaskCreateSerializer, TaskQuerySerializer,
)
from apps.projects.services import AnalyticsService, ProjectService, TaskService
from apps.rbac.capabilities import Action, ResourceKind

logger = logging.getLogger(__name__)


def _changes(request):
    if not isinstance(request.data, dict):
        raise ValidationError('Request body must be a JSON object')
    return dict(request.data)


def _validated(serializer_class, data):
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise ValidationError('Invalid input', details=serializer.errors)
    return serializer.validated_data


class ProjectListView(APIView):
    """
    List and create projects.

    GET /v1/projects - List projects visible to the caller
    POST /v1/projects - Create a project owned by the caller
    """

    def check_permissions(self, request):
        """Set required capabilities based on HTTP method before permission check."""
        if request.method == 'POST':
            self.required_capabilities = ((ResourceKind.PROJECT, Action.CREATE),)
        else:
            self.required_capabilities = ((ResourceKind.PROJECT, Action.VIEW),)
        super().check_permissions(request)

    @extend_schema(
        tags=['Projects'],
        summary="List projects",
        description='''
List projects visible to the caller.

- **admin**, **member**: every project
- **manager**: projects they own
        ''',
        responses={200: ProjectSerializer(many=True)}
    )
    def get(self, request):
        projects = ProjectService.list_projects(request.auth)
        return Response({
            'count': len(projects),
            'projects': ProjectSerializer(projects, many=True).data
        })

    @extend_schema(
        tags=['Projects'],
        summary="Create project",
        description="Create a project owned by the caller. **Requires:** `project:create`",
        request=ProjectCreateSerializer,
        responses={201: ProjectSerializer, 400: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT},
        examples=[
            OpenApiExample(
                'Create Request',
                value={'name': 'Website Redesign', 'description': 'Refresh the marketing site'},
                request_only=True
            )
        ]
    )
    def post(self, request):
        data = _validated(ProjectCreateSerializer, request.data)
        project = ProjectService.create_project(
            request.auth,
            name=data.get('name'),
            description=data.get('description'),
        )
        return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)


class ProjectDetailView(APIView):
    """
    Retrieve, update and delete one project.

    GET /v1/projects/{id}
    PATCH /v1/projects/{id} - admin or owning manager; name/description only
    DELETE /v1/projects/{id} - admin or owning manager; removes its tasks
    """

    @extend_schema(
        tags=['Projects'],
        summary="Get project",
        responses={200: ProjectSerializer, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT}
    )
    def get(self, request, project_id):
        project = ProjectService.get_project(request.auth, project_id)
        return Response(ProjectSerializer(project).data)

    @extend_schema(
        tags=['Projects'],
        summary="Update project",
        description="Change name and/or description. `id` and `owner` cannot change.",
        request=ProjectCreateSerializer,
        responses={
            200: ProjectSerializer,
            400: OpenApiTypes.OBJECT,
            403: OpenApiTypes.OBJECT,
            404: OpenApiTypes.OBJECT,
        }
    )
    def patch(self, request, project_id):
        project = ProjectService.update_project(request.auth, project_id, _changes(request))
        return Response(ProjectSerializer(project).data)

    @extend_schema(
        tags=['Projects'],
        summary="Delete project",
        description="Delete the project and every task in it.",
        responses={200: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT}
    )
    def delete(self, request, project_id):
        removed = ProjectService.delete_project(request.auth, project_id)
        return Response({
            'message': 'Project deleted successfully',
            'tasks_removed': removed,
        })


class TaskListView(APIView):
    """
    List and create tasks.

    GET /v1/tasks - List tasks visible to the caller
    POST /v1/tasks - Create a task in a project the caller may manage
    """

    def check_permissions(self, request):
        """Set required capabilities based on HTTP method before permission check."""
        if request.method == 'GET':
            self.required_capabilities = ((ResourceKind.TASK, Action.VIEW),)
        else:
            # Creation is decided against the target project by the service.
            self.required_capabilities = ()
        super().check_permissions(request)

    @extend_schema(
        tags=['Tasks'],
        summary="List tasks",
        description='''
List tasks visible to the caller, in creation order.

- **admin**, **manager**: every task
- **member**: tasks assigned to them
        ''',
        parameters=[
            OpenApiParameter(
                name='project_id',
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description='Only tasks in this project'
            ),
            OpenApiParameter(
                name='status',
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                description='Filter by status (pending, done)'
            ),
        ],
        responses={200: TaskSerializer(many=True)}
    )
    def get(self, request):
        query = _validated(TaskQuerySerializer, request.query_params)
        tasks = TaskService.list_tasks(
            request.auth,
            project_id=query.get('project_id'),
            status=query.get('status'),
        )
        return Response({
            'count': len(tasks),
            'tasks': TaskSerializer(tasks, many=True).data
        })

    @extend_schema(
        tags=['Tasks'],
        summary="Create task",
        description='''
Create a task. `project_id`, `title` and `assigned_to` are required and the
assignee must be an existing user. Allowed for administrators and for the
manager who owns the project.
        ''',
        request=TaskCreateSerializer,
        responses={
            201: TaskSerializer,
            400: OpenApiTypes.OBJECT,
            403: OpenApiTypes.OBJECT,
            404: OpenApiTypes.OBJECT,
        },
        examples=[
            OpenApiExample(
                'Create Request',
                value={'project_id': 1, 'title': 'Draft wireframes', 'assigned_to': 'member@example.com'},
                request_only=True
            )
        ]
    )
    def post(self, request):
        data = _validated(TaskCreateSerializer, request.data)
        task = TaskService.create_task(
            request.auth,
            project_id=data.get('project_id'),
            title=data.get('title'),
            assigned_to=data.get('assigned_to'),
            status=data.get('status'),
        )
        return Response(TaskSerializer(task).data, status=status.HTTP_201_CREATED)


class TaskDetailView(APIView):
    """
    Retrieve, update and delete one task.

    GET /v1/tasks/{id}
    PATCH /v1/tasks/{id} - status alone: admin, owning manager or assignee;
        title/assigned_to: admin or owning manager
    DELETE /v1/tasks/{id} - admin or owning manager
    """

    @extend_schema(
        tags=['Tasks'],
        summary="Get task",
        responses={200: TaskSerializer, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT}
    )
    def get(self, request, task_id):
        task = TaskService.get_task(request.auth, task_id)
        return Response(TaskSerializer(task).data)

    @extend_schema(
        tags=['Tasks'],
        summary="Update task",
        description="Change title, assigned_to and/or status. `id` and `project_id` cannot change.",
        request=OpenApiTypes.OBJECT,
        responses={
            200: TaskSerializer,
            400: OpenApiTypes.OBJECT,
            403: OpenApiTypes.OBJECT,
            404: OpenApiTypes.OBJECT,
        },
        examples=[
            OpenApiExample(
                'Mark Done',
                value={'status': 'done'},
                request_only=True
            )
        ]
    )
    def patch(self, request, task_id):
        task = TaskService.update_task(request.auth, task_id, _changes(request))
        return Response(TaskSerializer(task).data)

    @extend_schema(
        tags=['Tasks'],
        summary="Delete task",
        responses={200: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT, 404: OpenApiTypes.OBJECT}
    )
    def delete(self, request, task_id):
        TaskService.delete_task(request.auth, task_id)
        return Response({'message': 'Task deleted successfully'})


class DashboardView(APIView):
    """
    GET /v1/dashboard

    Per-role summary of visible projects and tasks.
    """

    @extend_schema(
        tags=['Dashboard'],
        summary="Dashboard summary",
        description="Counts of visible projects and tasks. Members also get the projects that contain their tasks.",
        responses={200: OpenApiTypes.OBJECT}
    )
    def get(self, request):
        return Response(AnalyticsService.dashboard(request.auth))


class AnalyticsView(APIView):
    """
    GET /v1/admin/analytics

    System-wide totals. Administrators only.
    """

    @extend_schema(
        tags=['Admin'],
        summary="Analytics",
        description="User, project and task totals with completion rate. **Requires:** `admin:access`",
        responses={200: OpenApiTypes.OBJECT, 403: OpenApiTypes.OBJECT},
        examples=[
            OpenApiExample(
                'Success Response',
                value={
                    'total_users': 5,
                    'users_by_role': {'admin': 1, 'manager': 2, 'member': 2},
                    'total_projects': 3,
                    'total_tasks': 8,
                    'completed_tasks': 3,
                    'pending_tasks': 5,
                    'completion_rate': 38
                },
                response_only=True
            )
        ]
    )
    def get(self, request):
        return Response(AnalyticsService.analytics(request.auth))
