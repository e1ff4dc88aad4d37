"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from shared.domain.base import DomainEvent


# ===== Cart Events =====

@dataclass
class ComponentAddedToCart(DomainEvent):
    """
    Event: A flight itinerary or hotel stay was merged into the open cart

    Triggers:
    - In-app notification to the traveller
    """
    booking_id: int
    user_id: int
    booking_reference: str
    component_type: str
    summary: str


# ===== Lifecycle Events =====

@dataclass
class BookingConfirmed(DomainEvent):
    """
    Event: Checkout succeeded (PENDING -> CONFIRMED)

    Triggers:
    - Attach passenger and guest details to the booked components
    - Email the invoice (Celery task)
    - Notify the traveller
    - Notify the owner of every hotel in the booking
    """
    booking_id: int
    user_id: int
    booking_reference: str
    passenger_details: Optional[dict] = None
    hotel_guest_details: Optional[dict] = None


@dataclass
class BookingCancelled(DomainEvent):
    """
    Event: A whole booking was cancelled by the traveller, an admin or a hotel owner

    Triggers:
    - Cancel still-active flight tickets with the supplier
    - Notify the traveller
    """
    booking_id: int
    user_id: int
    booking_reference: str
    cancelled_by_id: Optional[int] = None
    supplier_flights: List[dict] = field(default_factory=list)


@dataclass
class ComponentCancelled(DomainEvent):
    """
    Event: A single flight segment or hotel stay was cancelled

    The parent booking keeps its status.

    Triggers:
    - Cancel the flight with the supplier (flights only)
    - Notify the traveller
    """
    booking_id: int
    user_id: int
    booking_reference: str
    component_type: str
    component_id: int
    supplier_reference: str = ""
    flight_ids: List[str] = field(default_factory=list)
