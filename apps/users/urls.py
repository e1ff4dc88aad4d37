"""URL declarations for the users app (``me/`` and the staff directory)."""

from __future__ import annotations

from rest_framework.routers import SimpleRouter  # type: ignore

from .views import UserViewSet

router = SimpleRouter()
router.register(r'', UserViewSet, basename='user')

urlpatterns = router.urls
