"""
Unit tests for MatchLogService.

Covers goal and event recording, score derivation, the merged timeline,
corrections addressed by position, and persistence round trips.
"""
import unittest
from unittest.mock import patch

from gametime.models import MatchState, Side
from gametime.services import (
    EntryKind, EventTypeRegistry, IndexOutOfRange, ManualTicker, MatchLogService,
    MemoryStore, PersistenceService, QueuedNotifier, RosterService, Severity, TeamService,
    TimelineProjector, TimerService, UserCancelled, ValidationError
)
from gametime.utils import STORAGE_KEYS


def build_match_log(state=None, persistence=None, custom_types=None, roster=None):
    state = state if state is not None else MatchState()
    persistence = persistence or PersistenceService(MemoryStore())
    notifier = QueuedNotifier()
    timer = TimerService(state, persistence, notifier, ManualTicker())
    teams = TeamService(state, persistence)
    match_log = MatchLogService(
        state, timer, teams,
        event_types=EventTypeRegistry(custom_types or []),
        persistence=persistence,
        notifier=notifier,
        roster=roster,
    )
    return match_log, notifier


class TestRecordingGoals(unittest.TestCase):
    """Recording, disallowing and scoring goals."""

    def setUp(self) -> None:
        self.match_log, self.notifier = build_match_log()
        self.state = self.match_log.match_state

    def test_record_goal(self) -> None:
        goal = self.match_log.record_goal("Alice", 9, "Bob", 7, at_second=1200)

        self.assertEqual(goal.time_label, "20")
        self.assertIs(goal.side, Side.A)
        self.assertEqual(goal.side_name_at_creation, "Netherton")
        self.assertEqual(goal.scorer_shirt_number, 9)
        self.assertEqual(goal.entry_id, 1)
        self.assertEqual((self.state.score_a, self.state.score_b), (1, 0))

        notes = self.notifier.drain()
        self.assertEqual(notes[-1].message, "Goal scored by Alice!")
        self.assertIs(notes[-1].severity, Severity.SUCCESS)

    def test_record_goal_looks_up_shirt_numbers_on_roster(self) -> None:
        roster = RosterService()
        roster.add_player("Alice", 9)
        roster.add_player("Bob", 7)
        match_log, _ = build_match_log(roster=roster)

        goal = match_log.record_goal("alice", assist_name="Bob", at_second=60)
        self.assertEqual(goal.scorer_shirt_number, 9)
        self.assertEqual(goal.assist_shirt_number, 7)

        stranger = match_log.record_goal("Dave", at_second=90)
        self.assertIsNone(stranger.scorer_shirt_number)

    def test_explicit_shirt_number_beats_roster(self) -> None:
        roster = RosterService()
        roster.add_player("Alice", 9)
        match_log, _ = build_match_log(roster=roster)

        goal = match_log.record_goal("Alice", 10, at_second=60)
        self.assertEqual(goal.scorer_shirt_number, 10)

    def test_record_goal_persists(self) -> None:
        self.match_log.record_goal("Alice", at_second=60)
        persistence = self.match_log.persistence
        self.assertEqual(persistence.load(STORAGE_KEYS["GOALS"])[0]["scorer_name"], "Alice")
        self.assertEqual(persistence.load(STORAGE_KEYS["FIRST_SCORE"]), 1)

    def test_record_goal_uses_live_clock_by_default(self) -> None:
        self.state.elapsed_seconds = 300
        goal = self.match_log.record_goal("Alice")
        self.assertEqual(goal.match_second, 300)
        self.assertEqual(goal.time_label, "5")

    def test_captured_goal_time_is_used_and_cleared(self) -> None:
        with patch("gametime.services.timer_service.now_ms", return_value=0):
            self.match_log.timer.start()
        with patch("gametime.services.timer_service.now_ms", return_value=754_000):
            self.assertEqual(self.match_log.capture_goal_time(), 754)
        with patch("gametime.services.timer_service.now_ms", return_value=790_000):
            goal = self.match_log.record_goal("Alice")

        self.assertEqual(goal.match_second, 754)
        self.assertEqual(goal.time_label, "13")
        self.assertIsNone(self.state.pending_goal_second)

    def test_cancel_goal_discards_captured_time(self) -> None:
        self.state.elapsed_seconds = 100
        self.match_log.capture_goal_time()
        self.match_log.cancel_goal()
        self.state.elapsed_seconds = 200
        self.assertEqual(self.match_log.record_goal("Alice").match_second, 200)

    def test_invalid_goal_input_leaves_state_unchanged(self) -> None:
        cases = [
            dict(scorer_name=""),
            dict(scorer_name=None),
            dict(scorer_name="x" * 101),
            dict(scorer_name="Alice", scorer_shirt_number=0),
            dict(scorer_name="Alice", scorer_shirt_number=100),
            dict(scorer_name="Alice", assist_shirt_number="ten"),
            dict(scorer_name="Alice", at_second=-5),
        ]
        for kwargs in cases:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValidationError):
                    self.match_log.record_goal(**kwargs)
        self.assertEqual(self.state.goals, [])
        self.assertEqual(self.state.next_entry_id, 1)

    def test_opposition_goal(self) -> None:
        self.match_log.rename_side(Side.B, "Rovers")
        goal = self.match_log.record_opposition_goal(at_second=2400)

        self.assertIs(goal.side, Side.B)
        self.assertEqual(goal.scorer_name, "Rovers")
        self.assertEqual(goal.assist_name, "Rovers")
        self.assertEqual(goal.time_label, "35+5")
        self.assertEqual((self.state.score_a, self.state.score_b), (0, 1))

    def test_disallow_requires_reason(self) -> None:
        self.match_log.record_goal("Alice", at_second=60)

        for reason in (None, "", "   "):
            with self.assertRaises(UserCancelled):
                self.match_log.toggle_disallowed(0, reason)
        self.assertFalse(self.state.goals[0].disallowed)
        self.assertEqual(self.state.score_a, 1)

    def test_disallow_and_reinstate(self) -> None:
        self.match_log.record_goal("Alice", at_second=60)

        goal = self.match_log.toggle_disallowed(0, "offside")
        self.assertTrue(goal.disallowed)
        self.assertEqual(goal.disallowed_reason, "offside")
        self.assertEqual(self.state.score_a, 0)

        goal = self.match_log.toggle_disallowed(0)
        self.assertFalse(goal.disallowed)
        self.assertIsNone(goal.disallowed_reason)
        self.assertEqual(self.state.score_a, 1)

        messages = [n.message for n in self.notifier.drain()]
        self.assertIn("Goal disallowed", messages)
        self.assertEqual(messages[-1], "Goal allowed")

    def test_score_matches_allowed_goals_after_mixed_operations(self) -> None:
        log = self.match_log
        log.record_goal("Alice", at_second=60)
        log.record_opposition_goal(at_second=120)
        log.record_goal("Bob", at_second=180)
        log.toggle_disallowed(2, "handball")
        log.record_opposition_goal(at_second=240)
        log.delete_entry(0, "goal")
        log.record_goal("Carol", at_second=300)

        allowed = [g for g in self.state.goals if not g.disallowed]
        self.assertEqual(self.state.score_a + self.state.score_b, len(allowed))
        self.assertEqual((self.state.score_a, self.state.score_b), (1, 2))

        first = log.recalculate_scores()
        self.assertEqual(log.recalculate_scores(), first)

    def test_deleting_only_goal_zeroes_scores(self) -> None:
        self.match_log.record_goal("Alice", at_second=60)
        self.match_log.delete_entry(0, EntryKind.GOAL)

        self.assertEqual(self.state.goals, [])
        self.assertEqual((self.state.score_a, self.state.score_b), (0, 0))
        self.assertEqual(self.notifier.drain()[-1].message, "Entry deleted")

    def test_rename_keeps_goal_attribution(self) -> None:
        self.match_log.rename_side(Side.A, "Reds")
        self.match_log.record_goal("Alice", at_second=60)
        self.match_log.rename_side(Side.A, "Blues")

        self.assertEqual(self.state.score_a, 1)
        self.assertEqual(self.state.goals[0].side_name_at_creation, "Reds")
        self.assertEqual(self.match_log.score_line(), "Blues 1 - 0 Opposition")
        self.assertEqual(self.notifier.drain()[-1].message, "Team name updated to Blues")


class TestRecordingEvents(unittest.TestCase):
    """Recording match events and clock transitions."""

    def setUp(self) -> None:
        self.match_log, self.notifier = build_match_log(custom_types=["Opposition Corner"])
        self.state = self.match_log.match_state

    def test_record_event(self) -> None:
        event = self.match_log.record_event("Foul", "  Late tackle ", at_second=700)

        self.assertEqual(event.time_label, "12")
        self.assertEqual(event.notes, "Late tackle")
        self.assertIsNone(event.side)
        self.assertIsNone(event.score_snapshot)

        note = self.notifier.drain()[-1]
        self.assertEqual(note.message, "Foul recorded at 12")
        self.assertIs(note.severity, Severity.WARNING)

    def test_other_events_notify_success_with_time(self) -> None:
        self.match_log.record_event("Substitution", at_second=3000)

        note = self.notifier.drain()[-1]
        self.assertEqual(note.message, "Substitution recorded at 35+15")
        self.assertIs(note.severity, Severity.SUCCESS)

    def test_game_started_is_not_announced_twice(self) -> None:
        event = self.match_log.record_event("Game Started", at_second=0)

        self.assertEqual(self.state.events, [event])
        self.assertEqual(self.notifier.drain(), [])

    def test_notes_are_sanitized(self) -> None:
        event = self.match_log.record_event("Incident", "<script>alert(1)</script>", at_second=10)
        self.assertEqual(event.notes, "scriptalert(1)/script")

        long_event = self.match_log.record_event("Incident", "x" * 600, at_second=10)
        self.assertEqual(len(long_event.notes), 500)

    def test_invalid_events_are_rejected(self) -> None:
        for kwargs in (dict(event_type="Dance"), dict(event_type=None),
                       dict(event_type="Foul", notes=42), dict(event_type="Foul", at_second="soon")):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValidationError):
                    self.match_log.record_event(**kwargs)
        self.assertEqual(self.state.events, [])

    def test_event_text_tags_side(self) -> None:
        event = self.match_log.record_event("Opposition Corner", at_second=30)
        self.assertIs(event.side, Side.B)
        self.assertEqual(event.side_name_at_creation, "Opposition")

    def test_half_time_snapshots_score_and_moves_clock(self) -> None:
        self.match_log.record_goal("Alice", at_second=600)
        self.state.elapsed_seconds = 2200

        event = self.match_log.record_event("Half Time")

        self.assertEqual(event.match_second, 2200)
        self.assertEqual(event.time_label, "35+2")
        self.assertEqual(event.score_snapshot, "Netherton 1 - 0 Opposition")
        self.assertEqual(event.notes, "Half Time - Netherton vs Opposition")
        self.assertEqual(self.state.elapsed_seconds, 2100)
        self.assertTrue(self.state.is_second_half)
        self.assertFalse(self.state.is_running)

        messages = [n.message for n in self.notifier.drain()]
        self.assertFalse([m for m in messages if "recorded" in m])
        self.assertIn("Half Time - Game Paused", messages)

    def test_full_time_freezes_clock(self) -> None:
        with patch("gametime.services.timer_service.now_ms", return_value=0):
            self.match_log.timer.start()
        with patch("gametime.services.timer_service.now_ms", return_value=4_300_000):
            event = self.match_log.record_event("Full Time")

        self.assertEqual(event.match_second, 4300)
        self.assertEqual(event.score_snapshot, "Netherton 0 - 0 Opposition")
        self.assertEqual(event.notes, "Full Time - Netherton vs Opposition")
        self.assertFalse([n for n in self.notifier.drain() if "recorded" in n.message])
        self.assertFalse(self.state.is_running)
        self.assertEqual(self.state.elapsed_seconds, 4300)


class TestCorrections(unittest.TestCase):
    """Edit, delete and stale-index handling."""

    def setUp(self) -> None:
        self.match_log, self.notifier = build_match_log()
        self.state = self.match_log.match_state
        self.match_log.record_goal("Alice", at_second=60)
        self.match_log.record_goal("Bob", at_second=120)
        self.match_log.record_event("Foul", at_second=90)

    def test_edit_event_time(self) -> None:
        event = self.match_log.edit_time(0, "event", 40)
        self.assertEqual(event.match_second, 2400)
        self.assertEqual(event.time_label, "35+5")
        self.assertEqual(self.notifier.drain()[-1].message, "Event time updated successfully!")

    def test_edit_goal_time_accepts_numeric_text(self) -> None:
        goal = self.match_log.edit_time(1, "goal", "3")
        self.assertEqual(goal.match_second, 180)
        self.assertEqual(goal.time_label, "3")

    def test_edit_rejects_bad_input(self) -> None:
        with self.assertRaises(ValidationError):
            self.match_log.edit_time(0, "goal", -1)
        with self.assertRaises(ValidationError):
            self.match_log.edit_time(0, "goal", "ten")
        with self.assertRaises(ValidationError):
            self.match_log.edit_time(0, "substitution", 5)
        self.assertEqual(self.state.goals[0].match_second, 60)

    def test_out_of_range_indices(self) -> None:
        with self.assertRaises(IndexOutOfRange):
            self.match_log.delete_entry(2, "goal")
        with self.assertRaises(IndexOutOfRange):
            self.match_log.edit_time(-1, "event", 5)
        with self.assertRaises(IndexOutOfRange):
            self.match_log.toggle_disallowed(7, "offside")
        with self.assertRaises(IndexOutOfRange):
            self.match_log.delete_entry(True, "goal")
        self.assertEqual(len(self.state.goals), 2)
        self.assertEqual(len(self.state.events), 1)

    def test_stale_entry_id_is_refused(self) -> None:
        alice_id = self.state.goals[0].entry_id
        bob_id = self.state.goals[1].entry_id
        self.match_log.delete_entry(0, "goal", expected_id=alice_id)

        # Index 0 now holds Bob's goal
        with self.assertRaises(IndexOutOfRange):
            self.match_log.toggle_disallowed(0, "offside", expected_id=alice_id)
        self.assertFalse(self.state.goals[0].disallowed)

        self.match_log.toggle_disallowed(0, "offside", expected_id=bob_id)
        self.assertTrue(self.state.goals[0].disallowed)

    def test_find_index(self) -> None:
        bob_id = self.state.goals[1].entry_id
        self.assertEqual(self.match_log.find_index("goals", bob_id), 1)
        self.match_log.delete_entry(0, "goal")
        self.assertEqual(self.match_log.find_index(EntryKind.GOAL, bob_id), 0)
        with self.assertRaises(IndexOutOfRange):
            self.match_log.find_index("event", 999)

    def test_entry_ids_are_never_reused(self) -> None:
        self.match_log.delete_entry(1, "goal")
        goal = self.match_log.record_goal("Carol", at_second=200)
        self.assertEqual(goal.entry_id, 4)


class TestTimeline(unittest.TestCase):
    """Merged, ordered view over goals and events."""

    def test_match_scenario(self) -> None:
        match_log, _ = build_match_log()
        state = match_log.match_state

        match_log.record_goal("Alice", assist_name="Bob", at_second=1200)
        match_log.record_opposition_goal(at_second=2400)
        half_time = match_log.record_event("Half Time", at_second=2100)

        self.assertEqual(half_time.score_snapshot, "Netherton 1 - 1 Opposition")
        self.assertEqual(state.elapsed_seconds, 2100)
        self.assertTrue(state.is_second_half)

        entries = list(match_log.timeline())
        self.assertEqual(len(match_log.timeline()), 3)
        self.assertEqual(
            [(e.kind, e.index, e.match_second) for e in entries],
            [(EntryKind.GOAL, 0, 1200), (EntryKind.EVENT, 0, 2100), (EntryKind.GOAL, 1, 2400)],
        )
        self.assertEqual([e.record.time_label for e in entries], ["20", "35", "35+5"])

    def test_ties_keep_insertion_order_goals_first(self) -> None:
        match_log, _ = build_match_log()
        match_log.record_event("Foul", at_second=600)
        match_log.record_goal("Alice", at_second=600)
        match_log.record_goal("Bob", at_second=600)
        match_log.record_event("Incident", at_second=600)
        match_log.record_goal("Carol", at_second=30)

        labels = [
            e.record.scorer_name if e.kind is EntryKind.GOAL else e.record.event_type
            for e in match_log.timeline()
        ]
        self.assertEqual(labels, ["Carol", "Alice", "Bob", "Foul", "Incident"])

    def test_timeline_is_restartable_and_live(self) -> None:
        match_log, _ = build_match_log()
        match_log.record_goal("Alice", at_second=60)
        timeline = match_log.timeline()

        self.assertEqual(len(list(timeline)), 1)
        match_log.record_event("Foul", at_second=30)
        self.assertEqual([e.kind for e in timeline], [EntryKind.EVENT, EntryKind.GOAL])

    def test_persistence_round_trip_preserves_timeline(self) -> None:
        persistence = PersistenceService(MemoryStore())
        match_log, _ = build_match_log(persistence=persistence)
        match_log.rename_side(Side.A, "Reds")
        match_log.record_goal("Alice", 10, "Bob", at_second=1200)
        match_log.record_event("Yellow Card", "Dissent", at_second=1500)
        match_log.record_opposition_goal(at_second=1800)
        match_log.toggle_disallowed(1, "Foul on keeper")
        match_log.record_event("Half Time", at_second=2100)
        match_log.record_goal("Carol", at_second=2500)

        def rendered(log):
            projector = TimelineProjector(log.teams, log.event_types)
            return [(row.kind, row.time_label, row.line) for row in projector.project(log.timeline())]

        restored_state = persistence.load_match_state()
        restored, _ = build_match_log(state=restored_state, persistence=persistence)
        restored.recalculate_scores()

        self.assertEqual(rendered(restored), rendered(match_log))
        self.assertEqual(restored_state.side_a_name, "Reds")
        self.assertEqual((restored_state.score_a, restored_state.score_b), (2, 0))
        self.assertTrue(restored_state.is_second_half)


class TestLifecycle(unittest.TestCase):
    """Reset and state replacement."""

    def test_reset_clears_everything(self) -> None:
        match_log, _ = build_match_log()
        state = match_log.match_state
        match_log.rename_side(Side.A, "Reds")
        match_log.record_goal("Alice", at_second=60)
        match_log.record_event("Half Time", at_second=2100)

        match_log.reset()

        self.assertEqual(state.goals, [])
        self.assertEqual(state.events, [])
        self.assertEqual(state.elapsed_seconds, 0)
        self.assertFalse(state.is_second_half)
        self.assertEqual(state.side_a_name, "Netherton")
        self.assertEqual(state.side_a_history, ["Netherton"])
        self.assertEqual((state.score_a, state.score_b), (0, 0))
        self.assertEqual(state.next_entry_id, 1)
        self.assertEqual(match_log.persistence.load(STORAGE_KEYS["GOALS"]), [])

    def test_replace_state_recalculates_scores(self) -> None:
        match_log, _ = build_match_log()
        new_state = MatchState.from_json({
            "goals": [
                {"match_second": 60, "scorer_name": "Alice", "side": "A"},
                {"match_second": 90, "scorer_name": "Opposition", "side": "B"},
                {"match_second": 95, "scorer_name": "Opposition", "side": "B",
                 "disallowed": True, "disallowed_reason": "Offside"},
            ],
            "score_a": 9,
        })

        match_log.replace_state(new_state)

        state = match_log.match_state
        self.assertEqual(len(state.goals), 3)
        self.assertEqual((state.score_a, state.score_b), (1, 1))
        self.assertEqual(match_log.record_goal("Bob", at_second=100).entry_id, 4)


if __name__ == "__main__":
    unittest.main()
