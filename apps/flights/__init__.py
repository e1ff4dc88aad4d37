"""Flights app package.

Thin integration with the external flight supplier: searching flights,
listing served cities and booking/cancelling itineraries. Flights are
never stored here; booked segments live in ``apps.bookings``.
"""
