"""Read-through cache for the city list."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.core.cache import cache  # type: ignore
from django.db import transaction  # type: ignore

from apps.flights.client import get_client

from .models import City

logger = logging.getLogger(__name__)

CITY_CACHE_KEY = "hotels:cities"


def _seed_cities_from_supplier() -> None:
    """Import the supplier's city list into an empty City table."""
    supplier_cities = get_client().get_cities()
    with transaction.atomic():
        City.objects.bulk_create(
            [
                City(name=item["city"], country=item["country"])
                for item in supplier_cities
                if item.get("city") and item.get("country")
            ],
            ignore_conflicts=True,
        )
    logger.info("Seeded %s cities from flight supplier", len(supplier_cities))


def get_cities() -> list[dict]:
    """
    All cities as plain dicts, cached for ``CITY_CACHE_TIMEOUT`` seconds.

    An empty table is seeded from the flight supplier on first access.
    """
    cities = cache.get(CITY_CACHE_KEY)
    if cities is not None:
        return cities

    if not City.objects.exists():
        _seed_cities_from_supplier()

    cities = list(City.objects.order_by("name").values("id", "name", "country"))
    cache.set(CITY_CACHE_KEY, cities, getattr(settings, "CITY_CACHE_TIMEOUT", 60 * 60))
    return cities


def invalidate_cities() -> None:
    cache.delete(CITY_CACHE_KEY)
