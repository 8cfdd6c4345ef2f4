import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'dev-secret-change-me')
DEBUG = os.environ.get('DJANGO_DEBUG', 'false').lower() == 'true'
ALLOWED_HOSTS = ['*']

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'rest_framework',
    'rest_framework.authtoken',
    'corsheaders',
    'taskflow.api',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'taskflow.urls'

WSGI_APPLICATION = 'taskflow.wsgi.application'

# Database: SQLite stored in /data
SQLITE_FILE = os.environ.get('SQLITE_FILE', str(BASE_DIR / 'data.sqlite'))
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': SQLITE_FILE,
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# CORS settings - parse comma-separated CORS_ORIGIN env
_cors = os.environ.get('CORS_ORIGIN', '')
if _cors:
    CORS_ALLOWED_ORIGINS = [o.strip() for o in _cors.split(',') if o.strip()]
else:
    CORS_ALLOWED_ORIGINS = []

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'taskflow.api.authentication.BearerTokenAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'EXCEPTION_HANDLER': 'taskflow.api.exceptions.api_exception_handler',
}

# Bearer tokens issued at login expire after this many hours
TOKEN_TTL_HOURS = int(os.environ.get('TOKEN_TTL_HOURS', '24'))

def _optional_number(name, cast):
    raw = os.environ.get(name, '').strip()
    return cast(raw) if raw else None

# Reminder dispatcher. OVERFLOW is one of drop_newest, drop_oldest, block;
# MAX_CONCURRENT_ATTEMPTS unset means one thread per notification.
TASKFLOW_REMINDERS = {
    'QUEUE_CAPACITY': int(os.environ.get('REMINDER_QUEUE_CAPACITY', '100')),
    'OVERFLOW': os.environ.get('REMINDER_OVERFLOW', 'drop_newest'),
    'BLOCK_TIMEOUT': _optional_number('REMINDER_BLOCK_TIMEOUT', float),
    'MAX_CONCURRENT_ATTEMPTS': _optional_number('REMINDER_MAX_CONCURRENT_ATTEMPTS', int),
    'REPLACE_PENDING': os.environ.get('REMINDER_REPLACE_PENDING', 'false').lower() == 'true',
    'AUTOSTART': os.environ.get('REMINDERS_AUTOSTART', 'true').lower() == 'true',
}

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'default': {
            'format': '%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'default',
        },
    },
    'loggers': {
        'taskflow': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
        },
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
        },
    },
}
