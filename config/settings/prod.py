"""Production settings for FlyNext project.

Secrets, hosts, the database, the cache and the flight supplier key all
come from environment variables.
"""

from django.core.exceptions import ImproperlyConfigured  # type: ignore

from .base import *  # noqa: F401,F403

DEBUG = False

ALLOWED_HOSTS = os.environ.get('DJANGO_ALLOWED_HOSTS', '').split(',')

if SECRET_KEY == 'replace-me-in-production':  # noqa: F405
    raise ImproperlyConfigured('DJANGO_SECRET_KEY must be set in production')
if not FLIGHT_SUPPLIER_API_KEY:  # noqa: F405
    raise ImproperlyConfigured('FLIGHT_SUPPLIER_API_KEY must be set in production')

CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.redis.RedisCache',
        'LOCATION': os.environ.get('CACHE_LOCATION', 'redis://localhost:6379/1'),
    }
}

EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'
EMAIL_HOST = os.environ.get('EMAIL_HOST', 'localhost')
EMAIL_PORT = int(os.environ.get('EMAIL_PORT', 25))
EMAIL_USE_TLS = os.environ.get('EMAIL_USE_TLS', 'false').lower() == 'true'
EMAIL_HOST_USER = os.environ.get('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.environ.get('EMAIL_HOST_PASSWORD', '')
