"""Unit tests for the per-night room inventory arithmetic."""

from datetime import date, datetime, timedelta

import pytest

from apps.hotels.domain.inventory import Allocation, RoomInventory
from shared.domain.value_objects import DateRange

BASE_TIME = datetime(2024, 5, 1, 12, 0)


def stay(booking_id, start, end, *, minutes=0, confirmed=True):
    return Allocation(
        booking_id=booking_id,
        dates=DateRange(start, end),
        created_at=BASE_TIME + timedelta(minutes=minutes),
        confirmed=confirmed,
    )


def test_checkout_night_is_free_for_next_guest():
    inventory = RoomInventory(
        room_id=1,
        available_count=1,
        max_guests=2,
        allocations=[stay(1, date(2024, 6, 1), date(2024, 6, 3))],
    )

    assert inventory.unavailable_dates(DateRange(date(2024, 6, 2), date(2024, 6, 4))) == [date(2024, 6, 2)]
    assert inventory.is_available(DateRange(date(2024, 6, 3), date(2024, 6, 5)))


def test_pending_allocations_do_not_consume_capacity():
    inventory = RoomInventory(
        room_id=1,
        available_count=1,
        max_guests=2,
        allocations=[stay(1, date(2024, 6, 1), date(2024, 6, 3), confirmed=False)],
    )

    assert inventory.is_available(DateRange(date(2024, 6, 1), date(2024, 6, 3)))


def test_too_many_guests_blocks_every_night():
    inventory = RoomInventory(room_id=1, available_count=5, max_guests=2)
    dates = DateRange(date(2024, 6, 1), date(2024, 6, 4))

    assert inventory.unavailable_dates(dates, guests=3) == list(dates.days())


def test_remaining_capacity_per_night():
    inventory = RoomInventory(
        room_id=1,
        available_count=2,
        max_guests=2,
        allocations=[
            stay(1, date(2024, 6, 1), date(2024, 6, 3)),
            stay(2, date(2024, 6, 2), date(2024, 6, 4)),
        ],
    )

    remaining = inventory.remaining_capacity(DateRange(date(2024, 6, 1), date(2024, 6, 4)))

    assert remaining == {date(2024, 6, 1): 1, date(2024, 6, 2): 0, date(2024, 6, 3): 1}


def test_global_reduction_cancels_most_recent_first():
    inventory = RoomInventory(
        room_id=1,
        available_count=3,
        max_guests=2,
        allocations=[
            stay(10, date(2024, 6, 1), date(2024, 6, 3), minutes=0),
            stay(11, date(2024, 7, 1), date(2024, 7, 3), minutes=5),
            stay(12, date(2024, 8, 1), date(2024, 8, 3), minutes=10),
        ],
    )

    assert inventory.select_for_global_reduction(1) == [12, 11]
    assert inventory.select_for_global_reduction(3) == []


def test_global_reduction_ties_break_on_highest_id():
    inventory = RoomInventory(
        room_id=1,
        available_count=2,
        max_guests=2,
        allocations=[
            stay(20, date(2024, 6, 1), date(2024, 6, 3)),
            stay(21, date(2024, 6, 1), date(2024, 6, 3)),
        ],
    )

    assert inventory.select_for_global_reduction(1) == [21]


def test_reduction_to_zero_includes_pending():
    inventory = RoomInventory(
        room_id=1,
        available_count=2,
        max_guests=2,
        allocations=[
            stay(1, date(2024, 6, 1), date(2024, 6, 3), minutes=0),
            stay(2, date(2024, 6, 5), date(2024, 6, 6), minutes=1, confirmed=False),
        ],
    )

    assert inventory.select_for_global_reduction(0) == [2, 1]


def test_range_reduction_only_touches_overbooked_nights():
    inventory = RoomInventory(
        room_id=1,
        available_count=2,
        max_guests=2,
        allocations=[
            stay(1, date(2024, 6, 1), date(2024, 6, 3), minutes=0),
            stay(2, date(2024, 6, 2), date(2024, 6, 4), minutes=1),
            stay(3, date(2024, 6, 10), date(2024, 6, 12), minutes=2),
        ],
    )

    window = DateRange.inclusive(date(2024, 6, 1), date(2024, 6, 5))

    assert inventory.select_for_range_reduction(1, window) == [2]


def test_range_reduction_counts_a_cancelled_stay_once():
    # Booking 3 covers both over-committed nights; cancelling it fixes both.
    inventory = RoomInventory(
        room_id=1,
        available_count=2,
        max_guests=2,
        allocations=[
            stay(1, date(2024, 6, 1), date(2024, 6, 2), minutes=0),
            stay(2, date(2024, 6, 2), date(2024, 6, 3), minutes=1),
            stay(3, date(2024, 6, 1), date(2024, 6, 3), minutes=2),
        ],
    )

    window = DateRange.inclusive(date(2024, 6, 1), date(2024, 6, 2))

    assert inventory.select_for_range_reduction(1, window) == [3]


def test_range_reduction_also_fits_stays_outside_the_range():
    inventory = RoomInventory(
        room_id=1,
        available_count=3,
        max_guests=2,
        allocations=[
            stay(1, date(2024, 6, 1), date(2024, 6, 3), minutes=0),
            stay(2, date(2024, 7, 1), date(2024, 7, 3), minutes=1),
            stay(3, date(2024, 7, 1), date(2024, 7, 3), minutes=2),
        ],
    )

    window = DateRange.inclusive(date(2024, 6, 1), date(2024, 6, 30))
    selected = inventory.select_for_range_reduction(1, window)

    assert selected == [3]
    survivors = RoomInventory(
        room_id=1,
        available_count=1,
        max_guests=2,
        allocations=[a for a in inventory.allocations if a.booking_id not in selected],
    )
    season = DateRange(date(2024, 6, 1), date(2024, 7, 5))
    assert min(survivors.remaining_capacity(season).values()) >= 0


def test_negative_count_is_rejected():
    inventory = RoomInventory(room_id=1, available_count=1, max_guests=2)

    with pytest.raises(ValueError):
        inventory.select_for_global_reduction(-1)


def test_date_range_is_half_open():
    dates = DateRange(date(2024, 6, 1), date(2024, 6, 3))

    assert len(dates) == 2
    assert dates.contains(date(2024, 6, 2))
    assert not dates.contains(date(2024, 6, 3))
    assert not dates.overlaps_with(DateRange(date(2024, 6, 3), date(2024, 6, 5)))
    with pytest.raises(ValueError):
        DateRange(date(2024, 6, 3), date(2024, 6, 3))
