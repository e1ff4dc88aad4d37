"""API exceptions raised by booking workflows."""

from __future__ import annotations

from datetime import date
from typing import Iterable

from rest_framework import status  # type: ignore
from rest_framework.exceptions import APIException  # type: ignore


class BookingConflictError(APIException):
    """Raised when a room is fully booked on some of the requested nights."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Room is not available for the selected dates."
    default_code = "booking_conflict"

    def __init__(self, unavailable_dates: Iterable[date] = (), detail: str | None = None):
        self.unavailable_dates = sorted(unavailable_dates)
        super().__init__(detail=detail or self.default_detail)
        # Serialized by DRF's exception handler as the response body.
        self.detail = {
            "detail": str(detail or self.default_detail),
            "unavailable_dates": [day.isoformat() for day in self.unavailable_dates],
        }


class SupplierUnavailable(APIException):
    """The flight supplier could not complete the request."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Flight supplier is unavailable, please retry later."
    default_code = "supplier_unavailable"
