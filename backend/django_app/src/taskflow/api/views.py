import logging
from datetime import timezone as dt_timezone

from django.contrib.auth import authenticate
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from django.utils.dateparse import parse_datetime
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from taskflow.api.authentication import issue_token
from taskflow.api.models import Task

logger = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 6

@api_view(["GET"])
@authentication_classes([])
@permission_classes([AllowAny])
def health(request):
    return Response({"status": "ok"})

@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def register(request):
    body = _body(request)
    email = (body.get('email') or '').strip().lower()
    password = body.get('password') or ''
    try:
        validate_email(email)
    except ValidationError:
        return Response({"error": "valid email required"}, status=400)
    if len(password) < PASSWORD_MIN_LENGTH:
        return Response({"error": f"password must be at least {PASSWORD_MIN_LENGTH} characters"}, status=400)
    if User.objects.filter(username=email).exists():
        return Response({"error": "email already registered"}, status=409)
    try:
        user = User.objects.create_user(username=email, email=email, password=password)
    except IntegrityError:
        return Response({"error": "email already registered"}, status=409)
    logger.info("User registered id=%s", user.id)
    return Response({"id": user.id, "email": user.email}, status=201)

@api_view(["POST"])
@authentication_classes([])
@permission_classes([AllowAny])
def login(request):
    body = _body(request)
    email = (body.get('email') or '').strip().lower()
    password = body.get('password') or ''
    try:
        validate_email(email)
    except ValidationError:
        return Response({"error": "valid email required"}, status=400)
    if not password:
        return Response({"error": "password required"}, status=400)
    user = authenticate(request, username=email, password=password)
    if user is None:
        return Response({"error": "invalid credentials"}, status=401)
    token = issue_token(user)
    return Response({"token": token.key})


class TaskListView(APIView):
    """GET lists the caller's tasks, POST creates one."""

    reminders = None

    def get(self, request):
        tasks = Task.objects.filter(user=request.user).order_by('-id')
        return Response([t.to_json() for t in tasks])

    def post(self, request):
        body = _body(request)
        title = (body.get('title') or '').strip()
        if not title:
            return Response({"error": "title required"}, status=400)
        task = Task.objects.create(
            user=request.user,
            title=title,
            due_at=_parse_due_at(body.get('due_at')),
        )
        if task.due_at is not None:
            _notify_on_commit(self.reminders, task.id)
        return Response(task.to_json(), status=201)


class TaskDetailView(APIView):
    """PATCH updates title/done/due_at of one of the caller's tasks, DELETE removes it."""

    reminders = None

    def patch(self, request, task_id):
        try:
            task = Task.objects.get(user=request.user, pk=task_id)
        except Task.DoesNotExist:
            return Response({"error": "task not found"}, status=404)
        body = _body(request)
        if body.get('title') is not None:
            task.title = str(body['title'])
        if body.get('done') is not None:
            if not isinstance(body['done'], bool):
                return Response({"error": "done must be a boolean"}, status=400)
            task.done = body['done']
        raw_due = body.get('due_at')
        if raw_due is not None:
            if raw_due == '':
                task.due_at = None
            else:
                parsed = _parse_due_at(raw_due)
                if parsed is not None:
                    task.due_at = parsed
        task.save()
        if task.wants_reminder:
            _notify_on_commit(self.reminders, task.id)
        return Response(task.to_json())

    def delete(self, request, task_id):
        deleted, _ = Task.objects.filter(user=request.user, pk=task_id).delete()
        if not deleted:
            return Response({"error": "task not found"}, status=404)
        return Response({"deleted": str(task_id)})

# Utils

def _body(request):
    data = request.data
    return data if isinstance(data, dict) else {}

def _parse_due_at(raw):
    """RFC 3339 timestamp with offset, else None."""
    if not raw or not isinstance(raw, str):
        return None
    try:
        value = parse_datetime(raw.strip())
    except ValueError:
        value = None
    if value is None or value.tzinfo is None:
        logger.debug("Ignoring unparsable due_at=%r", raw)
        return None
    return value.astimezone(dt_timezone.utc)

def _notify_on_commit(reminders, task_id):
    if reminders is None:
        return
    transaction.on_commit(lambda: reminders.offer(task_id))
