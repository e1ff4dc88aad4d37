"""Flight search API."""

from __future__ import annotations

import logging

from rest_framework import permissions  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.exceptions import SupplierUnavailable

from .client import FlightSupplierError, get_client
from .serializers import FlightSearchSerializer

logger = logging.getLogger(__name__)


class FlightSearchView(APIView):
    """One-way or round-trip search proxied to the flight supplier."""

    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        serializer = FlightSearchSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        client = get_client()

        try:
            outbound = client.search_flights(
                params["origin"], params["destination"], params["date"].isoformat()
            )
            inbound = None
            if params.get("return_date"):
                inbound = client.search_flights(
                    params["destination"], params["origin"], params["return_date"].isoformat()
                )
        except FlightSupplierError as exc:
            logger.warning("Flight search failed: %s", exc)
            raise SupplierUnavailable() from exc

        data = {"outbound": outbound}
        if inbound is not None:
            data["return"] = inbound
        return Response(data)
