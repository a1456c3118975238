from .booking import Account, AccountRole, Reservation, Room, TimeInterval, can_reserve, has_day_overlap
from .legacy_text import format_account_line, format_reservation_line
from .store import (
	ROOM_CATALOG,
	ReservationAttemptResult,
	ReservationStore,
	reserve_with_conflict_avoidance,
)
from .yaml_store import (
	AccountRecord,
	HotelYamlRepository,
	ReservationRecord,
	ReservationStorageError,
)

__all__ = [
	"Account",
	"AccountRole",
	"Reservation",
	"Room",
	"TimeInterval",
	"can_reserve",
	"has_day_overlap",
	"format_account_line",
	"format_reservation_line",
	"ROOM_CATALOG",
	"ReservationAttemptResult",
	"ReservationStore",
	"reserve_with_conflict_avoidance",
	"AccountRecord",
	"HotelYamlRepository",
	"ReservationRecord",
	"ReservationStorageError",
]
