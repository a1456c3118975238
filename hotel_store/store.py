from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from .booking import Account, AccountRole, Reservation, Room, TimeInterval, can_reserve
from .legacy_text import (
    format_account_line,
    format_reservation_line,
    parse_account_line,
    parse_reservation_line,
    read_legacy_rows,
)
from .yaml_store import (
    AccountRecord,
    HotelYamlRepository,
    ReservationRecord,
    ReservationStorageError,
    format_date,
)

ROOM_CATALOG: tuple[tuple[int, int], ...] = tuple(
    [(number, 100) for number in range(100, 200, 10)] + [(number, 300) for number in range(500, 600, 10)]
)
# hundreds digit -> offset of its 10-room band in catalog order
_ROOM_BANDS = {1: 0, 5: 10}
_BAND_SIZE = 10


@dataclass(frozen=True)
class ReservationAttemptResult:
    strategy: str
    reservation: Reservation


class ReservationStore:
    """In-memory accounts and rooms backed by a :class:`HotelYamlRepository`.

    The room catalog is fixed at construction and never persisted. Accounts
    and their reservations are read by :meth:`load` and written by
    :meth:`save`; nothing is written implicitly.
    """

    def __init__(
        self,
        base_dir: str | Path = "data",
        *,
        repository: HotelYamlRepository | None = None,
        autoload: bool = True,
    ) -> None:
        self.repository = repository or HotelYamlRepository(base_dir)
        self._rooms: list[Room] = [Room(number, rate) for number, rate in ROOM_CATALOG]
        self._accounts: list[Account] = []
        self.loaded = self.load() if autoload else False

    def load(self) -> bool:
        self._accounts = []
        try:
            account_rows = self.repository.read_account_rows()
            reservation_rows = self.repository.read_reservation_rows()
        except (OSError, ReservationStorageError) as error:
            self._log_quietly("STORE_LOAD_FAILED", {"reason": str(error)})
            return False

        reservation_count = self._populate(account_rows, reservation_rows)
        self._log_quietly("STORE_LOADED", {"accounts": len(self._accounts), "reservations": reservation_count})
        return True

    def import_legacy_text(self, accounts_path: str | Path, reservations_path: str | Path) -> bool:
        """Replace the in-memory accounts with those from comma-space ``.txt`` files."""
        self._accounts = []
        try:
            account_rows = read_legacy_rows(accounts_path, parse_account_line)
            reservation_rows = read_legacy_rows(reservations_path, parse_reservation_line)
        except (OSError, UnicodeDecodeError) as error:
            self._log_quietly("STORE_LOAD_FAILED", {"reason": str(error)})
            return False

        reservation_count = self._populate(account_rows, reservation_rows)
        self._log_quietly(
            "LEGACY_IMPORTED",
            {
                "accounts_file": str(accounts_path),
                "reservations_file": str(reservations_path),
                "accounts": len(self._accounts),
                "reservations": reservation_count,
            },
        )
        return True

    def export_legacy_text(self, accounts_path: str | Path, reservations_path: str | Path) -> bool:
        """Write the in-memory accounts and reservations as comma-space ``.txt`` files."""
        account_lines: list[str] = []
        reservation_lines: list[str] = []
        for account in self._accounts:
            account_lines.append(format_account_line(account) + "\n")
            for reservation in account.reservations:
                reservation_lines.append(format_reservation_line(reservation) + "\n")

        try:
            Path(accounts_path).write_text("".join(account_lines), encoding="utf-8")
            Path(reservations_path).write_text("".join(reservation_lines), encoding="utf-8")
        except OSError as error:
            self._log_quietly("LEGACY_EXPORT_FAILED", {"reason": str(error)})
            return False
        self._log_quietly(
            "LEGACY_EXPORTED",
            {"accounts": len(account_lines), "reservations": len(reservation_lines)},
        )
        return True

    def save(self) -> bool:
        account_rows: list[dict[str, Any]] = []
        reservation_rows: list[dict[str, Any]] = []
        for account in self._accounts:
            account_rows.append(_account_to_record(account).to_dict())
            for reservation in account.reservations:
                reservation_rows.append(_reservation_to_record(reservation).to_dict())

        try:
            self.repository.write_account_rows(account_rows)
            self.repository.write_reservation_rows(reservation_rows)
        except ReservationStorageError as error:
            self._log_quietly("STORE_SAVE_FAILED", {"reason": str(error)})
            return False
        self._log_quietly("STORE_SAVED", {"accounts": len(account_rows), "reservations": len(reservation_rows)})
        return True

    def find_account_by_username(self, username: str) -> Account | None:
        for account in self._accounts:
            if account.username == username:
                return account
        return None

    def find_room_by_number(self, number: int) -> Room | None:
        offset = _ROOM_BANDS.get(number // 100)
        if offset is None:
            return None
        for room in self._rooms[offset : offset + _BAND_SIZE]:
            if room.room_number == number:
                return room
        return None

    def authenticate(self, username: str, password: str) -> bool:
        return any(account.username == username and account.password == password for account in self._accounts)

    def list_accounts(self) -> tuple[Account, ...]:
        return tuple(self._accounts)

    def list_rooms(self) -> tuple[Room, ...]:
        return tuple(self._rooms)

    def add_account(self, account: Account) -> bool:
        if self.find_account_by_username(account.username) is not None:
            return False
        if account.index is None:
            account.index = len(self._accounts)
        self._accounts.append(account)
        return True

    def iter_reservations(self) -> Iterator[Reservation]:
        for account in self._accounts:
            yield from account.reservations

    def add_reservation(self, username: str, room_number: int, interval: TimeInterval) -> Reservation | None:
        """Attach a new reservation without checking for conflicts.

        Returns None when the account or room does not exist. Callers that
        must not double-book should check :meth:`is_room_available` first or
        use :func:`reserve_with_conflict_avoidance`.
        """
        account = self.find_account_by_username(username)
        room = self.find_room_by_number(room_number)
        if account is None or room is None:
            return None

        reservation = Reservation(account, room, interval)
        account.add_reservation(reservation)
        return reservation

    def is_room_available(self, room_number: int, interval: TimeInterval) -> bool:
        room = self.find_room_by_number(room_number)
        if room is None:
            return False
        same_room = [reservation.interval for reservation in self.iter_reservations() if reservation.room == room]
        return can_reserve(interval, same_room)

    def get_available_rooms(self, duration: TimeInterval) -> list[Room]:
        available = list(self._rooms)
        for reservation in self.iter_reservations():
            if reservation.interval.overlap(duration) and reservation.room in available:
                available.remove(reservation.room)
        return available

    def _populate(self, account_rows: list[dict[str, Any]], reservation_rows: list[dict[str, Any]]) -> int:
        for index, row in enumerate(account_rows):
            try:
                record = AccountRecord.from_dict(row)
            except (KeyError, TypeError, ValueError, OverflowError) as error:
                self._log_quietly(
                    "ACCOUNT_SKIPPED",
                    {"index": index, "reason": f"malformed account row: {error}"},
                )
                continue

            if self.find_account_by_username(record.username) is not None:
                self._log_quietly(
                    "ACCOUNT_SKIPPED",
                    {"index": index, "username": record.username, "reason": "duplicate username"},
                )
                continue

            role = AccountRole.MANAGER if record.is_manager else AccountRole.GUEST
            self._accounts.append(
                Account(record.name, record.username, record.password, role, index=len(self._accounts))
            )

        attached = 0
        for index, row in enumerate(reservation_rows):
            try:
                record = ReservationRecord.from_dict(row)
            except (KeyError, TypeError, ValueError, OverflowError) as error:
                self._log_quietly(
                    "RESERVATION_SKIPPED",
                    {"index": index, "reason": f"malformed reservation row: {error}"},
                )
                continue

            account = self.find_account_by_username(record.username)
            if account is None:
                self._log_quietly(
                    "RESERVATION_SKIPPED",
                    {"index": index, "username": record.username, "reason": "account not found"},
                )
                continue

            room = self.find_room_by_number(record.room_number)
            if room is None:
                self._log_quietly(
                    "RESERVATION_SKIPPED",
                    {"index": index, "room_number": record.room_number, "reason": "room not found"},
                )
                continue

            account.add_reservation(Reservation(account, room, TimeInterval(record.start, record.end)))
            attached += 1
        return attached

    def _log_quietly(self, event_type: str, payload: dict[str, Any]) -> None:
        # Event log failures never change the result of the operation being logged.
        try:
            self.repository.log_event(event_type, payload)
        except ReservationStorageError:
            pass


def reserve_with_conflict_avoidance(
    store: ReservationStore,
    username: str,
    room_number: int,
    interval: TimeInterval,
    allow_other_room: bool = True,
) -> ReservationAttemptResult:
    requested = store.find_room_by_number(room_number)
    if requested is None:
        raise ValueError(f"Unknown room number: {room_number}")
    account = store.find_account_by_username(username)
    if account is None:
        raise ValueError(f"Unknown account: {username}")

    if store.is_room_available(requested.room_number, interval):
        return _book(store, "requested", account, requested, interval)

    if allow_other_room:
        for room in store.get_available_rooms(interval):
            if room != requested and room.nightly_rate == requested.nightly_rate:
                return _book(store, "other_room_same_time", account, room, interval)

    raise ValueError("Could not reserve requested room or find a conflict-avoidance alternative.")


def _account_to_record(account: Account) -> AccountRecord:
    return AccountRecord(
        name=account.name,
        username=account.username,
        password=account.password,
        is_manager=account.is_manager(),
    )


def _reservation_to_record(reservation: Reservation) -> ReservationRecord:
    return ReservationRecord(
        username=reservation.account.username,
        room_number=reservation.room.room_number,
        start=reservation.interval.start,
        end=reservation.interval.end,
    )


def _book(
    store: ReservationStore,
    strategy: str,
    account: Account,
    room: Room,
    interval: TimeInterval,
) -> ReservationAttemptResult:
    reservation = Reservation(account, room, interval)
    account.add_reservation(reservation)
    store._log_quietly(
        "RESERVATION_CREATED",
        {
            "username": account.username,
            "room_number": room.room_number,
            "start": format_date(interval.start),
            "end": format_date(interval.end),
            "strategy": strategy,
        },
    )
    return ReservationAttemptResult(strategy=strategy, reservation=reservation)
