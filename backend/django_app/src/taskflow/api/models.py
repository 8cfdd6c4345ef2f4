from django.db import models
from django.contrib.auth.models import User

class Task(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='tasks')
    title = models.CharField(max_length=255)
    done = models.BooleanField(default=False)
    due_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-id']

    @property
    def wants_reminder(self):
        return self.due_at is not None and not self.done

    def to_json(self):
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "done": self.done,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if self.due_at is not None:
            data["due_at"] = self.due_at.isoformat()
        return data
