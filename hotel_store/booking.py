from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable


def has_day_overlap(new_start: date, new_end: date, exist_start: date, exist_end: date) -> bool:
    """Return True when two date ranges share at least one calendar day.

    Ranges are treated as closed: [start, end]
    so touching boundaries (e.g. 01/10-01/12 and 01/12-01/14) overlap.
    """
    return not (new_end < exist_start or exist_end < new_start)


@dataclass(frozen=True)
class TimeInterval:
    start: date
    end: date

    def overlap(self, other: TimeInterval) -> bool:
        return has_day_overlap(self.start, self.end, other.start, other.end)


def can_reserve(interval: TimeInterval, existing_intervals: Iterable[TimeInterval]) -> bool:
    """Return True if the requested interval does not overlap any existing interval."""
    for existing in existing_intervals:
        if interval.overlap(existing):
            return False
    return True


@dataclass(frozen=True)
class Room:
    room_number: int
    nightly_rate: int = field(compare=False)


class AccountRole(Enum):
    GUEST = "guest"
    MANAGER = "manager"


@dataclass(eq=False)
class Account:
    name: str
    username: str
    password: str = field(repr=False)
    role: AccountRole = AccountRole.GUEST
    index: int | None = None
    _reservations: list[Reservation] = field(default_factory=list, init=False, repr=False)

    @property
    def reservations(self) -> tuple[Reservation, ...]:
        return tuple(self._reservations)

    def add_reservation(self, reservation: Reservation) -> None:
        # Conflicts are not checked here; see ReservationStore.is_room_available.
        self._reservations.append(reservation)

    def is_manager(self) -> bool:
        return self.role is AccountRole.MANAGER


@dataclass(frozen=True)
class Reservation:
    account: Account
    room: Room
    interval: TimeInterval
