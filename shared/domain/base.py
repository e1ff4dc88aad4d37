"""
Base Domain Classes

Building blocks shared by every domain context:
- ValueObject: Immutable objects compared by value
- DomainEvent: Events that represent something that happened
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Domain events represent something that happened in the domain.
    They are recorded inside a unit of work and published only after
    the surrounding transaction commits.
    """
    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=datetime.now, kw_only=True)

    def to_dict(self) -> dict:
        """Convert event to dictionary for serialization"""
        return {
            'event_id': str(self.event_id),
            'event_type': self.__class__.__name__,
            'occurred_at': self.occurred_at.isoformat(),
        }
