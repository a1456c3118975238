import tempfile
import unittest
from datetime import date
from pathlib import Path

from hotel_store import (
    Account,
    AccountRole,
    Reservation,
    ReservationStore,
    Room,
    TimeInterval,
    format_account_line,
    format_reservation_line,
)
from hotel_store.legacy_text import parse_account_line, parse_reservation_line, read_legacy_rows


class TestLegacyLines(unittest.TestCase):
    def test_parse_account_line(self) -> None:
        row = parse_account_line("Alice Smith, alice, correctpw, false")
        self.assertEqual(row, {"name": "Alice Smith", "username": "alice", "password": "correctpw", "is_manager": "false"})

    def test_parse_reservation_line(self) -> None:
        row = parse_reservation_line("alice, 100, 01/10/2024, 01/12/2024")
        self.assertEqual(row, {"username": "alice", "room_number": "100", "start": "01/10/2024", "end": "01/12/2024"})

    def test_parse_rejects_wrong_field_count(self) -> None:
        with self.assertRaises(ValueError):
            parse_account_line("Smith, Alice, alice, pw, true")

    def test_format_lines(self) -> None:
        account = Account("Bob", "bob", "pw", AccountRole.MANAGER)
        reservation = Reservation(account, Room(510, 300), TimeInterval(date(2024, 3, 1), date(2024, 3, 4)))

        self.assertEqual(format_account_line(account), "Bob, bob, pw, true")
        self.assertEqual(format_reservation_line(reservation), "bob, 510, 03/01/2024, 03/04/2024")

    def test_read_legacy_rows_skips_blank_and_marks_invalid(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "accounts.txt"
            path.write_text("Alice, alice, pw, false\n\nbroken line\n", encoding="utf-8")

            rows = read_legacy_rows(path, parse_account_line)

            self.assertEqual(len(rows), 2)
            self.assertEqual(rows[0]["username"], "alice")
            self.assertEqual(rows[1], {"_invalid": "broken line"})


class TestLegacyImport(unittest.TestCase):
    def test_import_then_save_migrates_to_yaml(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            accounts_txt = root / "accounts.txt"
            reservations_txt = root / "reservations.txt"
            accounts_txt.write_text("Alice, alice, correctpw, false\nBob, bob, secret, true\n", encoding="utf-8")
            reservations_txt.write_text(
                "alice, 100, 01/10/2024, 01/12/2024\n"
                "ghost, 100, 01/10/2024, 01/12/2024\n"
                "bob, 999, 01/10/2024, 01/12/2024\n"
                "bob, 590, 02/01/2024, 02/02/2024\n",
                encoding="utf-8",
            )

            store = ReservationStore(root / "data")
            self.assertFalse(store.loaded)

            self.assertTrue(store.import_legacy_text(accounts_txt, reservations_txt))
            self.assertEqual([account.username for account in store.list_accounts()], ["alice", "bob"])
            self.assertTrue(store.find_account_by_username("bob").is_manager())
            self.assertEqual(len(list(store.iter_reservations())), 2)

            self.assertTrue(store.save())
            reloaded = ReservationStore(root / "data")
            self.assertTrue(reloaded.loaded)
            self.assertTrue(reloaded.authenticate("alice", "correctpw"))
            self.assertEqual(
                sorted((r.account.username, r.room.room_number) for r in reloaded.iter_reservations()),
                [("alice", 100), ("bob", 590)],
            )

    def test_import_missing_file_fails(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            store = ReservationStore(root / "data", autoload=False)

            self.assertFalse(store.import_legacy_text(root / "accounts.txt", root / "reservations.txt"))
            self.assertEqual(store.list_accounts(), ())

    def test_export_writes_original_line_format(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            store = ReservationStore(root / "data", autoload=False)
            store.add_account(Account("Alice", "alice", "correctpw"))
            store.add_account(Account("Bob", "bob", "secret", AccountRole.MANAGER))
            store.add_reservation("bob", 520, TimeInterval(date(2024, 3, 1), date(2024, 3, 4)))

            self.assertTrue(store.export_legacy_text(root / "accounts.txt", root / "reservations.txt"))

            self.assertEqual(
                (root / "accounts.txt").read_text(encoding="utf-8"),
                "Alice, alice, correctpw, false\nBob, bob, secret, true\n",
            )
            self.assertEqual((root / "reservations.txt").read_text(encoding="utf-8"), "bob, 520, 03/01/2024, 03/04/2024\n")

            imported = ReservationStore(root / "data", autoload=False)
            self.assertTrue(imported.import_legacy_text(root / "accounts.txt", root / "reservations.txt"))
            self.assertEqual([a.username for a in imported.list_accounts()], ["alice", "bob"])
            self.assertEqual(len(list(imported.iter_reservations())), 1)

    def test_export_to_missing_directory_fails(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            store = ReservationStore(root / "data", autoload=False)

            self.assertFalse(store.export_legacy_text(root / "missing" / "a.txt", root / "missing" / "r.txt"))


if __name__ == "__main__":
    unittest.main()
