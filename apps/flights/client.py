"""HTTP client for the external flight supplier API."""

from __future__ import annotations

import logging
from typing import Any

import requests
from django.conf import settings  # type: ignore
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


class FlightSupplierError(Exception):
    """Raised when the supplier is unreachable or answers with an error."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FlightSupplierClient:
    """
    Supplier API client.

    Idempotent reads (search, cities) are retried with backoff. Booking is a
    POST and is sent exactly once: a retried booking could double-ticket.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        *,
        timeout: int | None = None,
        retries: int | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or getattr(settings, "FLIGHT_SUPPLIER_BASE_URL", "")).rstrip("/")
        self.api_key = api_key if api_key is not None else getattr(settings, "FLIGHT_SUPPLIER_API_KEY", "")
        self.timeout = timeout or getattr(settings, "FLIGHT_SUPPLIER_TIMEOUT", 15)
        retries = retries if retries is not None else getattr(settings, "FLIGHT_SUPPLIER_RETRIES", 3)
        self.session = session or self._build_session(retries)

    @staticmethod
    def _build_session(retries: int) -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=retries,
            backoff_factor=0.5,
            status_forcelist=(502, 503, 504),
            allowed_methods=frozenset({"GET"}),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"x-api-key": self.api_key, "Accept": "application/json"}
        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("Flight supplier %s %s failed: %s", method, path, exc)
            raise FlightSupplierError(f"Flight supplier unreachable: {exc}") from exc

        if not response.ok:
            logger.warning(
                "Flight supplier %s %s returned %s: %s",
                method, path, response.status_code, response.text[:500],
            )
            raise FlightSupplierError(
                f"Flight supplier error ({response.status_code})",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise FlightSupplierError("Flight supplier returned invalid JSON") from exc

    # --- Reads ---------------------------------------------------------------
    def get_cities(self) -> list[dict]:
        """Cities served by the supplier: ``[{"city": ..., "country": ...}]``."""
        return self._request("GET", "/api/cities")

    def search_flights(self, origin: str, destination: str, date: str) -> list[dict]:
        """
        One-way search. Returns itineraries, each a dict with a ``flights``
        list (one entry per segment).
        """
        payload = self._request(
            "GET",
            "/api/flights",
            params={"origin": origin, "destination": destination, "date": date},
        )
        if isinstance(payload, list):
            return payload
        return payload.get("results", []) if isinstance(payload, dict) else []

    # --- Writes --------------------------------------------------------------
    def book_flights(self, passenger: dict, flight_ids: list[str]) -> dict:
        """
        Ticket ``flight_ids`` for one passenger.

        Returns ``{"bookingReference": ..., "flights": [...]}``.
        """
        body = {
            "firstName": passenger.get("first_name", ""),
            "lastName": passenger.get("last_name", ""),
            "email": passenger.get("email", ""),
            "passportNumber": passenger.get("passport_number", ""),
            "flightIds": list(flight_ids),
        }
        logger.info("Booking %s flight(s) with supplier", len(flight_ids))
        return self._request("POST", "/api/bookings", json=body)

    def cancel_booking(self, booking_reference: str, flight_ids: list[str]) -> dict:
        return self._request(
            "POST",
            "/api/bookings/cancel",
            json={"bookingReference": booking_reference, "flightIds": list(flight_ids)},
        )


def get_client() -> FlightSupplierClient:
    return FlightSupplierClient()
