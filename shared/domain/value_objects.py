"""
Common Value Objects

Value objects used across multiple domains:
- DateRange: Represents a range of dates (check-in to check-out)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    A stay occupies every night in the range; the checkout date itself is
    never occupied.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    @classmethod
    def inclusive(cls, first_day: date, last_day: date) -> 'DateRange':
        """Build a range covering ``first_day`` through ``last_day`` (both included)."""
        return cls(first_day, last_day + timedelta(days=1))

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Two ranges overlap if they share any dates.
        Note: end_date is exclusive, so adjacent ranges don't overlap.

        Examples:
            - DateRange(25, 28) overlaps with DateRange(27, 30) -> True
            - DateRange(25, 28) overlaps with DateRange(28, 31) -> False (adjacent)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        # Overlap formula: start1 < end2 AND end1 > start2
        return (self.start_date < other.end_date and
                self.end_date > other.start_date)

    def contains(self, check_date: date) -> bool:
        """
        Check if a date is within this range

        Note: start_date is inclusive, end_date is exclusive
        """
        return self.start_date <= check_date < self.end_date

    def days(self) -> Iterator[date]:
        """Iterate over every occupied date (checkout date excluded)."""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        """
        Return the number of days (nights) in this range

        This is the number of nights for a booking.
        """
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
