"""Development settings for FlyNext project.

Debug on, every host and CORS origin allowed, emails printed to the
console and Celery tasks run inline so no broker is needed locally.
"""

from .base import *  # noqa: F401,F403

DEBUG = True

ALLOWED_HOSTS = ['*']
CORS_ALLOW_ALL_ORIGINS = True

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = os.environ.get('CELERY_TASK_ALWAYS_EAGER', 'true').lower() == 'true'

LOGGING['loggers']['apps']['level'] = os.environ.get('LOG_LEVEL', 'DEBUG')  # noqa: F405
