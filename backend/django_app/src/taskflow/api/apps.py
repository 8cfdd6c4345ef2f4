import atexit
import logging

from django.apps import AppConfig
from django.conf import settings

logger = logging.getLogger(__name__)


class ApiConfig(AppConfig):
    name = 'taskflow.api'
    label = 'api'
    default_auto_field = 'django.db.models.BigAutoField'

    reminders = None

    def ready(self):
        from taskflow.api.store import fetch_task
        from taskflow.reminders import ReminderService

        config = getattr(settings, 'TASKFLOW_REMINDERS', {})
        self.reminders = ReminderService.from_settings(config, fetch_task)

    def start_reminders(self):
        """Start the dispatcher thread; called by the server entry point only."""
        if not getattr(settings, 'TASKFLOW_REMINDERS', {}).get('AUTOSTART', True):
            logger.info("Reminder dispatcher not started (AUTOSTART off)")
            return
        if self.reminders.is_running:
            return
        self.reminders.start()
        atexit.register(self.reminders.close)
