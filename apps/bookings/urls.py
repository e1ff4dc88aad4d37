"""URL routing for the booking domain.

``cart/``, ``hotels/`` and ``flights/`` are list-level actions of the
booking viewset; ``<id>/cancel/``, ``<id>/components/cancel/`` and
``<id>/invoice/`` act on a single booking.
"""

from __future__ import annotations

from rest_framework.routers import SimpleRouter  # type: ignore

from .views import BookingViewSet

router = SimpleRouter()
router.register(r"", BookingViewSet, basename="booking")

urlpatterns = router.urls
