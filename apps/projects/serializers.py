"""
Project and task serializers for REST API endpoints.

Request serializers only check shape and types. Required-field, status
and assignee validation belongs to the services so the same rules apply
to every caller of the core.
"""
from rest_framework import serializers

from apps.projects.models import Project, Task


class ProjectSerializer(serializers.ModelSerializer):
    """Serializer for Project model."""

    class Meta:
        model = Project
        fields = ['id', 'name', 'description', 'owner', 'created_at', 'updated_at']
        read_only_fields = fields


class TaskSerializer(serializers.ModelSerializer):
    """Serializer for Task model."""

    project_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Task
        fields = ['id', 'project_id', 'title', 'assigned_to', 'status', 'created_at', 'updated_at']
        read_only_fields = fields


class ProjectCreateSerializer(serializers.Serializer):
    """Serializer for project creation."""

    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)


class TaskCreateSerializer(serializers.Serializer):
    """Serializer for task creation."""

    project_id = serializers.IntegerField(required=False, min_value=1)
    title = serializers.CharField(required=False, allow_blank=True, max_length=255)
    assigned_to = serializers.CharField(required=False, allow_blank=True, max_length=254)
    status = serializers.CharField(required=False, max_length=16)


class TaskQuerySerializer(serializers.Serializer):
    """Query parameters accepted by the task listing."""

    project_id = serializers.IntegerField(required=False, min_value=1)
    status = serializers.CharField(required=False, max_length=16)
