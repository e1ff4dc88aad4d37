"""Domain services for room inventory and capacity reconciliation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from apps.bookings.exceptions import BookingConflictError
from apps.bookings.models import Booking, BookingStatus, HotelBooking
from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import DateRange

from .domain.events import RoomCapacityReduced
from .domain.inventory import Allocation, RoomInventory
from .models import Room

logger = logging.getLogger(__name__)


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def lock_room(room_id) -> Room:
    """Fetch a room, holding its row lock for the rest of the transaction."""
    return lock_queryset_if_possible(Room.objects.filter(pk=room_id)).get()


def load_room_inventory(room: Room, *, exclude_booking_id=None) -> RoomInventory:
    """
    Build the inventory view of ``room`` from its non-cancelled hotel bookings.

    ``exclude_booking_id`` drops the rows of one parent Booking, used when a
    booking re-checks its own stays at checkout.
    """
    bookings_qs = HotelBooking.objects.filter(room=room).exclude(status=BookingStatus.CANCELLED)
    if exclude_booking_id is not None:
        bookings_qs = bookings_qs.exclude(booking_id=exclude_booking_id)

    allocations = [
        Allocation(
            booking_id=row.pk,
            dates=DateRange(row.check_in_date, row.check_out_date),
            created_at=row.created_at,
            confirmed=row.status == BookingStatus.CONFIRMED,
        )
        for row in bookings_qs.only("id", "check_in_date", "check_out_date", "created_at", "status")
    ]
    return RoomInventory(
        room_id=room.pk,
        available_count=room.available_count,
        max_guests=room.max_guests,
        allocations=allocations,
    )


def ensure_room_is_available(
    room: Room,
    dates: DateRange,
    guests: int = 1,
    *,
    exclude_booking_id=None,
) -> None:
    """Raise BookingConflictError listing every night the stay cannot fit."""

    inventory = load_room_inventory(room, exclude_booking_id=exclude_booking_id)
    unavailable = inventory.unavailable_dates(dates, guests)
    if unavailable:
        logger.info(
            "Room %s unavailable for %s (%s guests): %s",
            room.pk, dates, guests, [d.isoformat() for d in unavailable],
        )
        raise BookingConflictError(unavailable)


def ensure_booking_stays_available(booking) -> None:
    """
    Re-check every active stay of ``booking`` before it is confirmed.

    Rooms are locked in id order. Stays of the booking itself are counted
    one after another, so two stays of the same booking cannot share the
    last unit of a room.
    """
    stays = list(
        booking.active_hotel_bookings().order_by("room_id", "created_at", "id")
    )
    unavailable: set[date] = set()

    for room_id in sorted({stay.room_id for stay in stays}):
        room = lock_room(room_id)
        inventory = load_room_inventory(room, exclude_booking_id=booking.pk)
        for stay in (s for s in stays if s.room_id == room_id):
            missing = inventory.unavailable_dates(stay.dates, stay.guest_count)
            if missing:
                unavailable.update(missing)
                continue
            inventory.allocations.append(
                Allocation(booking_id=stay.pk, dates=stay.dates, created_at=stay.created_at)
            )

    if unavailable:
        logger.info("Booking %s no longer fits on %s", booking.pk, sorted(unavailable))
        raise BookingConflictError(unavailable)


@dataclass
class CapacityReconciliation:
    room: Room
    cancelled_booking_ids: List[int] = field(default_factory=list)

    @property
    def cancelled_count(self) -> int:
        return len(self.cancelled_booking_ids)

    @property
    def message(self) -> str:
        if not self.cancelled_count:
            return f"Room availability updated to {self.room.available_count}. No bookings were affected."
        noun = "booking" if self.cancelled_count == 1 else "bookings"
        return (
            f"Room availability updated to {self.room.available_count}. "
            f"{self.cancelled_count} {noun} cancelled."
        )


def reconcile_room_capacity(
    room_id,
    new_available_count: int,
    *,
    first_day: Optional[date] = None,
    last_day: Optional[date] = None,
) -> CapacityReconciliation:
    """
    Shrink (or grow) a room's unit count, cancelling bookings that no longer fit.

    Without a range every confirmed booking of the room competes for the new
    count. With an inclusive ``first_day``..``last_day`` range only nights in
    that range are checked. Cancelling a hotel booking cancels its whole
    parent booking. The room row stays locked for the whole operation.
    """
    if new_available_count < 0:
        raise ValueError("Available count cannot be negative")

    with DjangoUnitOfWork() as uow:
        room = lock_room(room_id)
        inventory = load_room_inventory(room)

        if first_day is not None and last_day is not None:
            window = DateRange.inclusive(first_day, last_day)
            selected = inventory.select_for_range_reduction(new_available_count, window)
        else:
            selected = inventory.select_for_global_reduction(new_available_count)

        hotel_bookings = list(
            HotelBooking.objects.filter(pk__in=selected).select_related("booking")
        )
        parents = {hb.booking_id: hb.booking for hb in hotel_bookings}
        for booking in lock_queryset_if_possible(Booking.objects.filter(pk__in=parents)):
            booking.mark_cancelled()

        room.available_count = new_available_count
        room.save(update_fields=["available_count", "updated_at"])

        logger.info(
            "Room %s capacity set to %s, cancelled hotel bookings %s",
            room.pk, new_available_count, selected,
        )

        if selected:
            uow.record(RoomCapacityReduced(
                room_id=room.pk,
                hotel_id=room.hotel_id,
                hotel_name=room.hotel.name,
                room_type=room.type,
                new_available_count=new_available_count,
                cancelled_hotel_booking_ids=list(selected),
                affected_booking_ids=sorted(parents),
                affected_user_ids=sorted({b.user_id for b in parents.values()}),
            ))

    return CapacityReconciliation(room=room, cancelled_booking_ids=list(selected))


def room_occupancy(rooms, dates: DateRange) -> dict:
    """
    Per-day occupancy grouped by room type.

    Returns ``{room_type: {"total_rooms", "days": [{date, booked, available,
    occupancy_rate}]}}`` where counts are summed over rooms of the same type.
    """
    report: dict = {}
    for room in rooms:
        inventory = load_room_inventory(room)
        entry = report.setdefault(room.type, {"total_rooms": 0, "days": {}})
        entry["total_rooms"] += room.available_count
        for day, booked in inventory.occupancy(dates).items():
            entry["days"][day] = entry["days"].get(day, 0) + booked

    for entry in report.values():
        total = entry["total_rooms"]
        entry["days"] = [
            {
                "date": day.isoformat(),
                "booked": booked,
                "available": max(total - booked, 0),
                "occupancy_rate": round(booked / total * 100, 1) if total else 0.0,
            }
            for day, booked in sorted(entry["days"].items())
        ]
    return report
