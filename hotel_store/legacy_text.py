"""Reader and writer for the comma-space separated ``.txt`` record files.

Account lines are ``name, username, password, isManager`` and reservation
lines are ``username, roomNumber, MM/dd/yyyy, MM/dd/yyyy``. Fields are not
escaped, so values containing ``", "`` cannot be represented; the YAML
repository is the primary format and this module exists for migration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from .booking import Account, Reservation
from .yaml_store import format_date

FIELD_SEPARATOR = ", "


def parse_account_line(line: str) -> dict[str, Any]:
    fields = line.split(FIELD_SEPARATOR)
    if len(fields) != 4:
        raise ValueError(f"account line must have 4 fields, got {len(fields)}")
    name, username, password, is_manager = fields
    return {"name": name, "username": username, "password": password, "is_manager": is_manager}


def parse_reservation_line(line: str) -> dict[str, Any]:
    fields = line.split(FIELD_SEPARATOR)
    if len(fields) != 4:
        raise ValueError(f"reservation line must have 4 fields, got {len(fields)}")
    username, room_number, start, end = fields
    return {"username": username, "room_number": room_number, "start": start, "end": end}


def read_legacy_rows(path: str | Path, parse: Callable[[str], dict[str, Any]]) -> list[dict[str, Any]]:
    """Parse every non-blank line of ``path``.

    Lines that do not split into the expected field count are returned as
    ``{"_invalid": line}`` so the caller can report them alongside other
    malformed rows. A missing file raises ``FileNotFoundError``.
    """
    rows: list[dict[str, Any]] = []
    with Path(path).open(encoding="utf-8") as handle:
        for raw_line in handle:
            line = raw_line.rstrip("\r\n")
            if not line.strip():
                continue
            try:
                rows.append(parse(line))
            except ValueError:
                rows.append({"_invalid": line})
    return rows


def format_account_line(account: Account) -> str:
    is_manager = "true" if account.is_manager() else "false"
    return FIELD_SEPARATOR.join([account.name, account.username, account.password, is_manager])


def format_reservation_line(reservation: Reservation) -> str:
    return FIELD_SEPARATOR.join(
        [
            reservation.account.username,
            str(reservation.room.room_number),
            format_date(reservation.interval.start),
            format_date(reservation.interval.end),
        ]
    )
