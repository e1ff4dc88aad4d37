"""Tests for the cached city list."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from django.core.cache import cache
from django.urls import reverse
from rest_framework.test import APIClient

from apps.flights.client import FlightSupplierError
from apps.hotels.cache import get_cities, invalidate_cities
from apps.hotels.models import City


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.mark.django_db
@patch("apps.hotels.cache.get_client")
def test_empty_table_is_seeded_from_supplier(mock_get_client):
    mock_get_client.return_value.get_cities.return_value = [
        {"city": "Toronto", "country": "Canada"},
        {"city": "Paris", "country": "France"},
    ]

    cities = get_cities()

    assert [c["name"] for c in cities] == ["Paris", "Toronto"]
    assert City.objects.count() == 2


@pytest.mark.django_db
@patch("apps.hotels.cache.get_client")
def test_cities_are_served_from_cache(mock_get_client):
    City.objects.create(name="Tokyo", country="Japan")
    get_cities()
    City.objects.create(name="Osaka", country="Japan")

    assert [c["name"] for c in get_cities()] == ["Tokyo"]

    invalidate_cities()
    assert [c["name"] for c in get_cities()] == ["Osaka", "Tokyo"]
    mock_get_client.assert_not_called()


@pytest.mark.django_db
@patch("apps.hotels.cache.get_client")
def test_city_endpoint_reports_supplier_outage(mock_get_client):
    mock_get_client.return_value = MagicMock(
        get_cities=MagicMock(side_effect=FlightSupplierError("down", status_code=503))
    )

    response = APIClient().get(reverse("city-list"))

    assert response.status_code == 502
