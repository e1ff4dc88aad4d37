"""FilterSet definitions for hotel search."""

from __future__ import annotations

import django_filters  # type: ignore
from rest_framework.exceptions import ValidationError  # type: ignore

from shared.domain.value_objects import DateRange

from .models import Hotel
from .services import load_room_inventory


class HotelFilterSet(django_filters.FilterSet):
    """
    Hotel search filters.

    When both ``check_in_date`` and ``check_out_date`` are given only hotels
    with at least one room free for every night of the stay are returned.
    """

    city = django_filters.CharFilter(method="filter_city")
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    min_rating = django_filters.NumberFilter(field_name="rating", lookup_expr="gte")
    max_price = django_filters.NumberFilter(method="filter_max_price")
    # CSV of amenity names, requires all of them
    amenities = django_filters.CharFilter(method="filter_amenities")
    check_in_date = django_filters.DateFilter(method="filter_noop")
    check_out_date = django_filters.DateFilter(method="filter_noop")
    guests = django_filters.NumberFilter(method="filter_noop")

    class Meta:
        model = Hotel
        fields = ["city", "name", "min_rating"]

    def filter_city(self, queryset, name, value):  # type: ignore
        if str(value).isdigit():
            return queryset.filter(city_id=int(value))
        return queryset.filter(city__name__icontains=value)

    def filter_max_price(self, queryset, name, value):  # type: ignore
        return queryset.filter(rooms__price__lte=value).distinct()

    def filter_amenities(self, queryset, name, value):  # type: ignore
        wanted = [item.strip().lower() for item in str(value).split(",") if item.strip()]
        if not wanted:
            return queryset
        matching = [
            hotel.pk
            for hotel in queryset
            if set(wanted) <= {str(a).lower() for a in (hotel.amenities or [])}
        ]
        return queryset.filter(pk__in=matching)

    def filter_noop(self, queryset, name, value):  # type: ignore
        # Applied together in filter_queryset.
        return queryset

    def filter_queryset(self, queryset):  # type: ignore
        queryset = super().filter_queryset(queryset)
        check_in = self.form.cleaned_data.get("check_in_date")
        check_out = self.form.cleaned_data.get("check_out_date")
        if not (check_in and check_out):
            return queryset
        if check_out <= check_in:
            raise ValidationError({"check_out_date": "Check-out date must be after check-in date."})

        stay = DateRange(check_in, check_out)
        guests = int(self.form.cleaned_data.get("guests") or 1)
        available = [
            hotel.pk
            for hotel in queryset.prefetch_related("rooms")
            if any(
                load_room_inventory(room).is_available(stay, guests)
                for room in hotel.rooms.all()
            )
        ]
        return queryset.filter(pk__in=available)
