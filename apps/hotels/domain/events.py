"""
Hotel Domain Events

Published after the capacity transaction commits.
"""

from dataclasses import dataclass, field
from typing import List

from shared.domain.base import DomainEvent


@dataclass
class RoomCapacityReduced(DomainEvent):
    """
    Event: An owner reduced a room's capacity and bookings were cancelled

    Triggers:
    - Notify every affected traveller (CAPACITY_CANCELLATION)
    """
    room_id: int
    hotel_id: int
    hotel_name: str
    room_type: str
    new_available_count: int
    cancelled_hotel_booking_ids: List[int] = field(default_factory=list)
    affected_booking_ids: List[int] = field(default_factory=list)
    affected_user_ids: List[int] = field(default_factory=list)
