"""URL routing for flight search."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import FlightSearchView

urlpatterns = [
    path("search/", FlightSearchView.as_view(), name="flight-search"),
]
