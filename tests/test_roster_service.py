import unittest

from gametime.services import (
    MemoryStore, PersistenceService, QueuedNotifier, RosterService, Severity, ValidationError
)
from gametime.utils import ROSTER_STORAGE_KEYS


class RosterServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = MemoryStore()
        self.persistence = PersistenceService(self.store)
        self.notifier = QueuedNotifier()
        self.roster = RosterService(self.persistence, self.notifier)

    def names(self):
        return [p.name for p in self.roster.get_roster()]

    def messages(self):
        return [n.message for n in self.notifier.drain()]

    def test_add_player_keeps_roster_sorted_and_saved(self) -> None:
        self.roster.add_player("zoe", 4)
        self.roster.add_player("  Alice  ", 9)
        self.roster.add_player("bob")

        self.assertEqual(self.names(), ["Alice", "bob", "zoe"])
        self.assertEqual(self.roster.shirt_number_for("ALICE"), 9)
        self.assertIsNone(self.roster.shirt_number_for("bob"))
        self.assertEqual(
            self.persistence.load(ROSTER_STORAGE_KEYS["ROSTER"])[0],
            {"name": "Alice", "shirt_number": 9},
        )
        self.assertEqual(self.messages()[1], "Player Alice (#9) added successfully.")

    def test_add_player_rejects_duplicates_ignoring_case(self) -> None:
        self.roster.add_player("Alice")
        with self.assertRaises(ValidationError) as ctx:
            self.roster.add_player("alice")
        self.assertEqual(ctx.exception.reason, 'Player "alice" already exists!')
        self.assertEqual(self.names(), ["Alice"])

    def test_add_player_rejects_invalid_input(self) -> None:
        for name, number in (("", None), ("   ", None), ("x" * 51, None), ("Alice", 0), ("Alice", 100)):
            with self.assertRaises(ValidationError):
                self.roster.add_player(name, number)
        self.assertEqual(self.names(), [])

    def test_edit_player_renames_and_carries_attendance(self) -> None:
        self.roster.add_player("Alice", 9)
        self.roster.add_player("Bob")
        self.roster.set_attendance("Alice", False)

        player = self.roster.edit_player("alice", "Alicia", 10)

        self.assertEqual(player.name, "Alicia")
        self.assertEqual(self.names(), ["Alicia", "Bob"])
        self.assertEqual(self.roster.shirt_number_for("Alicia"), 10)
        self.assertEqual(self.roster.attendance_summary().absent_players, ["Alicia"])

    def test_edit_player_rejects_unknown_and_clashing_names(self) -> None:
        self.roster.add_player("Alice")
        self.roster.add_player("Bob")
        with self.assertRaises(ValidationError):
            self.roster.edit_player("Carol", "Caroline")
        with self.assertRaises(ValidationError):
            self.roster.edit_player("Alice", "BOB")

        # Changing only the case of a name is allowed
        self.roster.edit_player("Alice", "ALICE")
        self.assertEqual(self.names(), ["ALICE", "Bob"])

    def test_remove_and_clear(self) -> None:
        self.roster.add_player("Alice")
        self.roster.add_player("Bob")

        self.assertEqual(self.roster.remove_player("alice").name, "Alice")
        self.assertEqual(self.names(), ["Bob"])
        with self.assertRaises(ValidationError):
            self.roster.remove_player("Alice")

        self.roster.clear_roster()
        self.assertEqual(self.names(), [])
        self.assertEqual(self.persistence.load(ROSTER_STORAGE_KEYS["ROSTER"]), [])

    def test_bulk_add_reports_failures(self) -> None:
        self.roster.add_player("Alice")
        self.notifier.drain()

        result = self.roster.add_players_bulk("Bob, carol\nalice,\n" + "x" * 51 + ",BOB")

        self.assertEqual([p.name for p in result.added], ["Bob", "carol"])
        self.assertEqual(
            result.failed,
            [
                ("alice", "Player already exists"),
                ("x" * 51, "Name too long (max 50 chars)"),
                ("BOB", "Duplicate in current bulk list"),
            ],
        )
        self.assertEqual(self.names(), ["Alice", "Bob", "carol"])

        severities = [n.severity for n in self.notifier.drain()]
        self.assertEqual(severities, [Severity.SUCCESS, Severity.WARNING])

    def test_bulk_add_needs_names(self) -> None:
        for text in ("", "  ", ",\n,"):
            with self.assertRaises(ValidationError):
                self.roster.add_players_bulk(text)

    def test_loads_legacy_roster_of_plain_names(self) -> None:
        self.persistence.save(
            ROSTER_STORAGE_KEYS["ROSTER"],
            ["zoe", {"name": "Alice", "shirtNumber": 7}, "ALICE", "", 42],
        )
        roster = RosterService(self.persistence, self.notifier)

        self.assertEqual([p.name for p in roster.get_roster()], ["Alice", "zoe"])
        self.assertEqual(roster.shirt_number_for("alice"), 7)

    def test_roster_starts_empty(self) -> None:
        self.assertEqual(self.roster.get_roster(), [])
        self.assertEqual(self.roster.stats()["total_players"], 0)


class AttendanceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.persistence = PersistenceService(MemoryStore())
        self.notifier = QueuedNotifier()
        self.roster = RosterService(self.persistence, self.notifier)
        for name, number in (("Alice", 9), ("Bob", None), ("Carol", 4)):
            self.roster.add_player(name, number)
        self.notifier.drain()

    def test_players_default_to_present(self) -> None:
        records = self.roster.match_attendance()
        self.assertEqual([r.player_name for r in records], ["Alice", "Bob", "Carol"])
        self.assertTrue(all(r.attending for r in records))
        self.assertEqual(records[0].shirt_number, 9)

    def test_set_and_toggle_attendance(self) -> None:
        record = self.roster.set_attendance("bob", False)
        self.assertEqual(record.player_name, "Bob")
        self.assertFalse(record.attending)
        self.assertEqual([n.message for n in self.notifier.drain()], ["Bob marked as absent"])

        self.assertTrue(self.roster.toggle_attendance("Bob").attending)
        self.assertFalse(self.roster.toggle_attendance("Carol").attending)

        stored = self.persistence.load(ROSTER_STORAGE_KEYS["MATCH_ATTENDANCE"])
        self.assertIn({"player_name": "Carol", "attending": False}, stored)

    def test_set_attendance_validates(self) -> None:
        with self.assertRaises(ValidationError):
            self.roster.set_attendance("Dave", True)
        with self.assertRaises(ValidationError):
            self.roster.set_attendance("Alice", "yes")

    def test_summary_counts_and_rate(self) -> None:
        self.roster.set_attendance("Bob", False, silent=True)
        summary = self.roster.attendance_summary()

        self.assertEqual(summary.total, 3)
        self.assertEqual(summary.attending, 2)
        self.assertEqual(summary.absent, 1)
        self.assertEqual(summary.attending_players, ["Alice", "Carol"])
        self.assertEqual(summary.absent_players, ["Bob"])
        self.assertEqual(summary.attendance_rate, 67)
        self.assertEqual(self.notifier.drain(), [])

    def test_mark_all_and_clear(self) -> None:
        self.roster.mark_all(False)
        self.assertEqual(self.roster.attendance_summary().attending, 0)

        self.roster.clear_attendance()
        self.assertEqual(self.roster.attendance_summary().attending, 3)
        self.assertIsNone(self.persistence.load(ROSTER_STORAGE_KEYS["MATCH_ATTENDANCE"]))
        self.assertEqual(
            [n.message for n in self.notifier.drain()],
            ["All players marked as absent", "Attendance reset - all players marked as present"],
        )

    def test_attendance_survives_reload(self) -> None:
        self.roster.set_attendance("Carol", False)
        reloaded = RosterService(self.persistence)
        self.assertEqual(reloaded.attendance_summary().absent_players, ["Carol"])

    def test_attendance_without_persistence(self) -> None:
        roster = RosterService()
        roster.add_player("Alice")
        roster.set_attendance("Alice", False)
        self.assertEqual(roster.attendance_summary().attendance_rate, 0)

    def test_empty_roster_summary(self) -> None:
        summary = RosterService().attendance_summary()
        self.assertEqual(summary.total, 0)
        self.assertEqual(summary.attendance_rate, 0)


if __name__ == "__main__":
    unittest.main()
