"""URL routing for the finance domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import SimpleRouter  # type: ignore

from .views import PaymentViewSet, ValidateCardView

router = SimpleRouter()
router.register(r"payments", PaymentViewSet, basename="payment")

urlpatterns = [
    path("validate-card/", ValidateCardView.as_view(), name="validate-card"),
    path("", include(router.urls)),
]
