import os

from django.apps import apps
from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'taskflow.settings')

application = get_wsgi_application()

# Only serving processes run reminders; manage.py commands such as migrate and
# the runserver autoreload parent never import this module.
apps.get_app_config('api').start_reminders()
