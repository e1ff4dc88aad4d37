"""URL routing for notifications."""

from __future__ import annotations

from rest_framework.routers import SimpleRouter  # type: ignore

from .views import NotificationViewSet

router = SimpleRouter()
router.register(r'', NotificationViewSet, basename='notification')

urlpatterns = router.urls
