"""
Project and task API URLs.
"""
from django.urls import path
from apps.projects.views import (
    ProjectListView,
    ProjectDetailView,
    TaskListView,
    TaskDetailView,
    DashboardView,
    AnalyticsView,
)

app_name = 'projects'

urlpatterns = [
    path('projects', ProjectListView.as_view(), name='project-list'),
    path('projects/<int:project_id>', ProjectDetailView.as_view(), name='project-detail'),
    path('tasks', TaskListView.as_view(), name='task-list'),
    path('tasks/<int:task_id>', TaskDetailView.as_view(), name='task-detail'),
    path('dashboard', DashboardView.as_view(), name='dashboard'),
    path('admin/analytics', AnalyticsView.as_view(), name='admin-analytics'),
]
