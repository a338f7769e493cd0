"""
Unit tests for the match data classes.

Covers JSON conversion, import of records saved by the browser tracker and
entry id allocation.
"""
import unittest

from gametime.models import GoalEvent, MatchEvent, MatchState, MatchStatistics, Player, Side


class TestSide(unittest.TestCase):
    """Test cases for Side parsing."""

    def test_parse_accepts_letters_and_legacy_numbers(self) -> None:
        self.assertIs(Side.parse("A"), Side.A)
        self.assertIs(Side.parse(2), Side.B)
        self.assertIs(Side.parse("1"), Side.A)
        self.assertIsNone(Side.parse("home"))
        self.assertIsNone(Side.parse(None))
        self.assertIs(Side.A.other, Side.B)


class TestGoalEvent(unittest.TestCase):
    """Test cases for GoalEvent conversion."""

    def test_round_trip(self) -> None:
        goal = GoalEvent(
            match_second=2520, time_label="35+7", scorer_name="Alice",
            scorer_shirt_number=9, assist_name="Bob", side=Side.A,
            side_name_at_creation="Reds", disallowed=True,
            disallowed_reason="Offside", entry_id=4,
        )
        self.assertEqual(GoalEvent.from_json(goal.to_json()), goal)

    def test_legacy_record_import(self) -> None:
        goal = GoalEvent.from_json({
            "rawTime": 754,
            "timestamp": "13",
            "goalScorerName": "Alice",
            "goalScorerShirtNumber": "10",
            "goalAssistName": "",
            "team": 2,
            "teamName": "Rovers",
        })
        self.assertEqual(goal.match_second, 754)
        self.assertEqual(goal.time_label, "13")
        self.assertEqual(goal.scorer_shirt_number, 10)
        self.assertIsNone(goal.assist_name)
        self.assertIs(goal.side, Side.B)
        self.assertEqual(goal.side_name_at_creation, "Rovers")
        self.assertEqual(goal.entry_id, 0)

    def test_legacy_record_without_team_is_unattributed(self) -> None:
        goal = GoalEvent.from_json({"rawTime": 10, "goalScorerName": "Alice"})
        self.assertIsNone(goal.side)

    def test_record_without_time_or_scorer_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            GoalEvent.from_json({"goalScorerName": "Alice"})
        with self.assertRaises(ValueError):
            GoalEvent.from_json({"rawTime": 10})


class TestMatchEvent(unittest.TestCase):
    """Test cases for MatchEvent conversion."""

    def test_legacy_record_import(self) -> None:
        event = MatchEvent.from_json({
            "rawTime": 2100, "timestamp": "35", "type": "Half Time",
            "score": "Reds 1 - 0 Blues", "team1Name": "Reds", "team2Name": "Blues",
        })
        self.assertEqual(event.event_type, "Half Time")
        self.assertEqual(event.score_snapshot, "Reds 1 - 0 Blues")
        self.assertEqual(event.side_a_name_at_snapshot, "Reds")
        self.assertEqual(event.side_b_name_at_snapshot, "Blues")

    def test_round_trip(self) -> None:
        event = MatchEvent(match_second=300, time_label="5", event_type="Foul",
                           notes="Trip", side=Side.B, side_name_at_creation="Blues", entry_id=2)
        self.assertEqual(MatchEvent.from_json(event.to_json()), event)


class TestMatchState(unittest.TestCase):
    """Test cases for MatchState."""

    def test_from_json_assigns_missing_entry_ids(self) -> None:
        state = MatchState.from_json({
            "goals": [
                {"match_second": 10, "scorer_name": "Alice", "entry_id": 5},
                {"match_second": 20, "scorer_name": "Bob"},
            ],
            "events": [{"match_second": 30, "event_type": "Foul"}],
        })
        ids = [state.goals[0].entry_id, state.goals[1].entry_id, state.events[0].entry_id]
        self.assertEqual(ids, [5, 6, 7])
        self.assertEqual(state.allocate_entry_id(), 8)

    def test_from_json_keeps_current_name_in_history(self) -> None:
        state = MatchState.from_json({"side_a_name": "Reds", "side_a_history": ["Netherton"]})
        self.assertEqual(state.side_a_history, ["Netherton", "Reds"])

    def test_from_json_skips_corrupt_records(self) -> None:
        state = MatchState.from_json({"goals": [{"match_second": 10}, "junk", {
            "match_second": 20, "scorer_name": "Alice"}]})
        self.assertEqual([g.scorer_name for g in state.goals], ["Alice"])

    def test_to_json_round_trip(self) -> None:
        state = MatchState(elapsed_seconds=95, is_second_half=True, score_b=1)
        state.goals.append(GoalEvent(match_second=60, time_label="1", scorer_name="Opposition",
                                     side=Side.B, entry_id=state.allocate_entry_id()))
        restored = MatchState.from_json(state.to_json())
        self.assertEqual(restored.to_json(), state.to_json())


class TestMatchStatistics(unittest.TestCase):
    """Result derivation."""

    def test_result(self) -> None:
        self.assertEqual(MatchStatistics("A", "B", 2, 2).result, "DRAW")
        self.assertEqual(MatchStatistics("A", "B", 3, 2).result, "WIN")
        self.assertEqual(MatchStatistics("A", "B", 0, 1).result, "LOSS")


class TestPlayer(unittest.TestCase):
    """Test cases for roster entries."""

    def test_from_json_accepts_legacy_names(self) -> None:
        self.assertEqual(Player.from_json(" Alice "), Player("Alice"))
        self.assertEqual(Player.from_json({"name": "Bob", "shirtNumber": 7}), Player("Bob", 7))
        self.assertEqual(Player.from_json({"name": "Carol", "shirt_number": True}), Player("Carol"))

    def test_from_json_rejects_unusable_entries(self) -> None:
        for data in ("", "   ", 42, None, {"shirt_number": 4}, {"name": ""}):
            self.assertIsNone(Player.from_json(data))


if __name__ == "__main__":
    unittest.main()
