"""ASGI entry point for the FlyNext API.

The API is plain request/response HTTP; ASGI servers (uvicorn, daphne) can
serve it through Django's ASGI handler.
"""

import os
from django.core.asgi import get_asgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_asgi_application()
