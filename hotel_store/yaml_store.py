from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any
import shutil

import yaml

DATE_FORMAT = "%m/%d/%Y"
ACCOUNTS_FILE_NAME = "accounts.yaml"
RESERVATIONS_FILE_NAME = "reservations.yaml"
EVENTS_FILE_NAME = "reservation_events.yaml"


@dataclass(frozen=True)
class AccountRecord:
    name: str
    username: str
    password: str
    is_manager: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "username": self.username,
            "password": self.password,
            "is_manager": self.is_manager,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "AccountRecord":
        return AccountRecord(
            name=str(data["name"]),
            username=str(data["username"]),
            password=str(data["password"]),
            is_manager=_parse_flag(data["is_manager"]),
        )


@dataclass(frozen=True)
class ReservationRecord:
    username: str
    room_number: int
    start: date
    end: date

    def to_dict(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "room_number": self.room_number,
            "start": format_date(self.start),
            "end": format_date(self.end),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "ReservationRecord":
        return ReservationRecord(
            username=str(data["username"]),
            room_number=parse_room_number(data["room_number"]),
            start=parse_date(data["start"]),
            end=parse_date(data["end"]),
        )


class ReservationStorageError(RuntimeError):
    pass


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip(), DATE_FORMAT).date()


def parse_room_number(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValueError(f"room_number must be a whole number, got {value!r}")


def _parse_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(f"is_manager must be true or false, got {value!r}")


class HotelYamlRepository:
    """Owns the on-disk record streams for accounts and reservations.

    Each stream is a YAML list of mappings. Files are replaced atomically one
    at a time; the pair is not written transactionally.
    """

    def __init__(self, base_dir: str | Path = "data") -> None:
        self.base_dir = Path(base_dir)
        self.accounts_file = self.base_dir / ACCOUNTS_FILE_NAME
        self.reservations_file = self.base_dir / RESERVATIONS_FILE_NAME
        self.log_file = self.base_dir / EVENTS_FILE_NAME

    def read_account_rows(self) -> list[dict[str, Any]]:
        return self._read_yaml_list(self.accounts_file, missing_ok=False)

    def read_reservation_rows(self) -> list[dict[str, Any]]:
        return self._read_yaml_list(self.reservations_file, missing_ok=False)

    def read_events(self) -> list[dict[str, Any]]:
        return self._read_yaml_list(self.log_file)

    def write_account_rows(self, rows: list[dict[str, Any]]) -> None:
        self._write_yaml_list(self.accounts_file, rows)

    def write_reservation_rows(self, rows: list[dict[str, Any]]) -> None:
        self._write_yaml_list(self.reservations_file, rows)

    def log_event(self, event_type: str, payload: dict[str, Any], event_time: datetime | None = None) -> None:
        timestamp = (event_time or datetime.now()).isoformat(timespec="seconds")
        events = self._read_yaml_list(self.log_file)
        events.append({"event_time": timestamp, "event_type": event_type, "payload": payload})
        self._write_yaml_list(self.log_file, events)

    def _read_yaml_list(self, path: Path, missing_ok: bool = True) -> list[dict[str, Any]]:
        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            if missing_ok:
                return []
            raise
        except (UnicodeDecodeError, yaml.YAMLError) as error:
            self._recover_corrupted_yaml(path, error)
            return []

        if payload is None:
            return []
        if not isinstance(payload, list):
            self._recover_corrupted_yaml(path, ValueError("top-level YAML is not a list"))
            return []

        sanitized: list[dict[str, Any]] = []
        for index, row in enumerate(payload):
            if isinstance(row, dict):
                sanitized.append(row)
            elif path != self.log_file:
                self.log_event(
                    "YAML_ROW_SKIPPED",
                    {
                        "file": str(path.name),
                        "index": index,
                        "reason": "row is not a mapping",
                    },
                )
        return sanitized

    def _write_yaml_list(self, path: Path, rows: list[dict[str, Any]]) -> None:
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(yaml.safe_dump(rows, allow_unicode=True, sort_keys=False), encoding="utf-8")
            temp_path.replace(path)
        except OSError as error:
            raise ReservationStorageError(f"Failed to write YAML file: {path}") from error
        finally:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)

    def _recover_corrupted_yaml(self, path: Path, error: Exception) -> None:
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        backup_path = path.with_name(f"{path.stem}.corrupt.{timestamp}{path.suffix}")
        try:
            if path.exists():
                shutil.copy2(path, backup_path)
        except OSError:
            pass

        self._write_yaml_list(path, [])
        if path != self.log_file:
            self.log_event(
                "YAML_RECOVERED",
                {
                    "file": str(path.name),
                    "backup": str(backup_path.name),
                    "reason": str(error),
                },
            )
