from django.apps import apps
from django.urls import path
from taskflow.api import views as api

reminders = apps.get_app_config('api').reminders
task_list = api.TaskListView.as_view(reminders=reminders)
task_detail = api.TaskDetailView.as_view(reminders=reminders)

urlpatterns = [
    # Health (accept with and without trailing slash)
    path('health', api.health),
    path('health/', api.health),

    # Auth endpoints
    path('auth/register', api.register),
    path('auth/register/', api.register),
    path('auth/login', api.login),
    path('auth/login/', api.login),

    # Tasks collection and detail
    path('api/tasks', task_list),
    path('api/tasks/', task_list),
    path('api/tasks/<int:task_id>', task_detail),
    path('api/tasks/<int:task_id>/', task_detail),
]
