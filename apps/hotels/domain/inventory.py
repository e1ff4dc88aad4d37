"""
Room Inventory

Pure availability arithmetic for a single room type. No database access:
the service layer loads the room and its non-cancelled hotel bookings
(after locking the Room row) and asks this object what is free and which
bookings must go when capacity shrinks.

Conventions:
- A stay occupies every night in [check_in, check_out); the checkout date
  is free for the next guest.
- Only CONFIRMED allocations consume capacity.
- "Most recent" means latest created_at, then highest id.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from shared.domain.value_objects import DateRange


@dataclass(frozen=True)
class Allocation:
    """
    A hotel booking holding one unit of the room for a stay.

    ``booking_id`` is the HotelBooking id.
    """
    booking_id: int
    dates: DateRange
    created_at: datetime
    confirmed: bool = True

    @property
    def recency(self):
        return (self.created_at, self.booking_id)


@dataclass
class RoomInventory:
    """
    Per-night capacity view of a room type.

    Usage:
        inventory = load_room_inventory(room)
        if not inventory.is_available(stay, guests):
            raise BookingConflictError(inventory.unavailable_dates(stay, guests))
    """

    room_id: int
    available_count: int
    max_guests: int
    allocations: List[Allocation] = field(default_factory=list)

    @property
    def confirmed(self) -> List[Allocation]:
        return [a for a in self.allocations if a.confirmed]

    def booked_on(self, day: date) -> int:
        """Number of confirmed stays occupying the night of ``day``."""
        return sum(1 for a in self.confirmed if a.dates.contains(day))

    def occupancy(self, dates: DateRange) -> Dict[date, int]:
        return {day: self.booked_on(day) for day in dates.days()}

    def remaining_capacity(self, dates: DateRange) -> Dict[date, int]:
        """
        Remaining units per night.

        Never negative once capacity reconciliation has run for the room.
        """
        return {
            day: self.available_count - booked
            for day, booked in self.occupancy(dates).items()
        }

    def unavailable_dates(self, dates: DateRange, guests: int = 1) -> List[date]:
        """Nights in ``dates`` that cannot take another stay of ``guests`` people."""
        if guests > self.max_guests:
            return list(dates.days())
        return [day for day, left in self.remaining_capacity(dates).items() if left <= 0]

    def is_available(self, dates: DateRange, guests: int = 1) -> bool:
        return not self.unavailable_dates(dates, guests)

    # --- Reconciliation ----------------------------------------------------

    def select_for_global_reduction(self, new_count: int) -> List[int]:
        """
        Pick hotel bookings to cancel when the whole room shrinks to ``new_count``.

        Zero cancels every non-cancelled booking (pending ones included).
        Otherwise the most recently created confirmed bookings beyond
        ``new_count`` are cancelled.
        """
        if new_count < 0:
            raise ValueError("Available count cannot be negative")

        if new_count == 0:
            return [a.booking_id for a in self._most_recent_first(self.allocations)]

        confirmed = self.confirmed
        excess = len(confirmed) - new_count
        if excess <= 0:
            return []
        return [a.booking_id for a in self._most_recent_first(confirmed)[:excess]]

    def select_for_range_reduction(self, new_count: int, dates: DateRange) -> List[int]:
        """
        Pick hotel bookings to cancel when the room shrinks to ``new_count``,
        starting with the nights in ``dates``.

        Works on the most over-committed night first (earliest on ties) and
        cancels the most recent booking covering it. A cancelled booking frees
        every night it covers, so it is never counted twice. The room keeps a
        single unit count, so once the range fits, nights of the surviving
        stays outside it are brought under ``new_count`` the same way.
        """
        if new_count < 0:
            raise ValueError("Available count cannot be negative")

        remaining = self._most_recent_first(self.confirmed)
        selected = self._select_until_fits(remaining, self.occupancy(dates), new_count)

        nights = {day for a in remaining for day in a.dates.days()}
        booked = {day: sum(1 for a in remaining if a.dates.contains(day)) for day in nights}
        selected.extend(self._select_until_fits(remaining, booked, new_count))
        return selected

    def _select_until_fits(
        self, remaining: List[Allocation], booked: Dict[date, int], new_count: int
    ) -> List[int]:
        """Take stays off ``remaining`` until no night in ``booked`` exceeds ``new_count``."""
        selected: List[int] = []
        while True:
            night = self._most_excess_night(booked, new_count)
            if night is None:
                return selected

            victim = next((a for a in remaining if a.dates.contains(night)), None)
            if victim is None:
                # Nothing left to cancel for this night.
                booked[night] = new_count
                continue

            remaining.remove(victim)
            selected.append(victim.booking_id)
            for day in victim.dates.days():
                if day in booked:
                    booked[day] -= 1

    @staticmethod
    def _most_excess_night(booked: Dict[date, int], limit: int) -> Optional[date]:
        worst = None
        worst_excess = 0
        for day in sorted(booked):
            excess = booked[day] - limit
            if excess > worst_excess:
                worst, worst_excess = day, excess
        return worst

    @staticmethod
    def _most_recent_first(allocations: Iterable[Allocation]) -> List[Allocation]:
        return sorted(allocations, key=lambda a: a.recency, reverse=True)

    def __str__(self):
        return (
            f"RoomInventory(room={self.room_id}, units={self.available_count}, "
            f"allocations={len(self.allocations)})"
        )
