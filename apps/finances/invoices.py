"""HTML invoices for confirmed bookings."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from django.utils.html import format_html, format_html_join  # type: ignore

from apps.bookings.models import BookingStatus


def _flight_rows(booking) -> str:
    flights = booking.flight_bookings.exclude(status=BookingStatus.CANCELLED).order_by(
        "departure_time", "segment_index"
    )
    return format_html_join(
        "\n",
        "<tr><td>{} {}</td><td>{} &rarr; {}</td><td>{}</td><td>{} {}</td></tr>",
        (
            (
                flight.airline,
                flight.flight_number,
                flight.origin,
                flight.destination,
                timezone.localtime(flight.departure_time).strftime("%Y-%m-%d %H:%M"),
                flight.price,
                flight.currency,
            )
            for flight in flights
        ),
    )


def _hotel_rows(booking) -> str:
    stays = booking.hotel_bookings.exclude(status=BookingStatus.CANCELLED).select_related(
        "hotel", "room"
    ).order_by("check_in_date", "id")
    return format_html_join(
        "\n",
        "<tr><td>{}</td><td>{}</td><td>{} to {} ({} nights)</td><td>{} {}</td></tr>",
        (
            (
                stay.hotel.name,
                stay.room.type,
                stay.check_in_date.isoformat(),
                stay.check_out_date.isoformat(),
                stay.nights,
                stay.price,
                stay.currency,
            )
            for stay in stays
        ),
    )


def render_invoice(booking) -> str:
    """Render the invoice of ``booking`` as a standalone HTML document."""

    user = booking.user
    payment = getattr(booking, "payment", None)
    payment_line = (
        format_html("<p>Paid with {} ending in {}</p>", payment.card_type, payment.card_last4)
        if payment is not None
        else ""
    )
    return format_html(
        """<html>
<body>
    <h2>FlyNext invoice</h2>
    <p><strong>Booking reference:</strong> {reference}</p>
    <p><strong>Status:</strong> {status}</p>
    <p><strong>Traveller:</strong> {name} ({email})</p>
    <p><strong>Issued:</strong> {issued}</p>

    <h3>Flights</h3>
    <table>
        <tr><th>Flight</th><th>Route</th><th>Departure</th><th>Price</th></tr>
        {flights}
    </table>

    <h3>Hotels</h3>
    <table>
        <tr><th>Hotel</th><th>Room</th><th>Stay</th><th>Price</th></tr>
        {hotels}
    </table>

    <p><strong>Total:</strong> {total} {currency}</p>
    {payment}
</body>
</html>
""",
        reference=booking.booking_reference,
        status=booking.get_status_display(),
        name=user.full_name,
        email=user.email,
        issued=timezone.localdate().isoformat(),
        flights=_flight_rows(booking),
        hotels=_hotel_rows(booking),
        total=booking.total_price,
        currency=booking.currency,
        payment=payment_line,
    )
