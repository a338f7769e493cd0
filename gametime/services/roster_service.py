"""
Roster service for the GameTime match tracker.

Keeps the squad list that goal scorers and assists are picked from, and the
per-match attendance of that squad. Both are persisted under their own keys
so they survive a match reset.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .errors import ValidationError
from .notification_service import LoggingNotifier, NotificationSink, Severity
from .persistence_service import PersistenceService
from .validation import sanitize_text, validate_shirt_number
from ..models import AttendanceRecord, AttendanceSummary, Player
from ..utils import MAX_ROSTER_NAME_LENGTH, ROSTER_STORAGE_KEYS, get_logger

log = get_logger("services.roster")

_BULK_SEPARATORS = re.compile(r"[,\n]+")


@dataclass
class BulkAddResult:
    """Outcome of :meth:`RosterService.add_players_bulk`."""
    added: List[Player] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)

    def to_json(self) -> Dict[str, Any]:
        return {
            "added": [player.to_json() for player in self.added],
            "failed": [{"name": name, "reason": reason} for name, reason in self.failed],
        }


def _roster_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("name", "Player name cannot be empty")
    name = sanitize_text(value, max_length=len(value))
    if not name:
        raise ValidationError("name", "Player name cannot be empty")
    if len(name) > MAX_ROSTER_NAME_LENGTH:
        raise ValidationError(
            "name", f"Player name is too long. Maximum {MAX_ROSTER_NAME_LENGTH} characters allowed."
        )
    return name


class RosterService:
    """
    Squad roster plus match attendance.

    Player names are unique ignoring case and the roster is kept sorted
    alphabetically. Attendance defaults to present for every player.
    """

    def __init__(
        self,
        persistence: Optional[PersistenceService] = None,
        notifier: Optional[NotificationSink] = None,
    ):
        self.persistence = persistence
        self.notifier = notifier or LoggingNotifier()
        # Attendance answers when running without persistence
        self._attendance_cache: Dict[str, bool] = {}
        self.players: List[Player] = self._load_roster()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_roster(self) -> List[Player]:
        """Copies of the roster entries, in roster order."""
        return [Player(p.name, p.shirt_number) for p in self.players]

    def get_player_by_name(self, name: Optional[str]) -> Optional[Player]:
        """Case-insensitive lookup; None for an unknown or empty name."""
        if not name:
            return None
        wanted = name.strip().casefold()
        for player in self.players:
            if player.name.casefold() == wanted:
                return player
        return None

    def shirt_number_for(self, name: Optional[str]) -> Optional[int]:
        player = self.get_player_by_name(name)
        return player.shirt_number if player is not None else None

    def stats(self) -> Dict[str, Any]:
        numbers = sorted(p.shirt_number for p in self.players if p.shirt_number is not None)
        return {
            "total_players": len(self.players),
            "players_with_shirt_numbers": len(numbers),
            "players_without_shirt_numbers": len(self.players) - len(numbers),
            "shirt_numbers": numbers,
        }

    # ------------------------------------------------------------------
    # Roster commands
    # ------------------------------------------------------------------
    def add_player(self, name: str, shirt_number: Optional[int] = None) -> Player:
        """
        Add a player to the roster.

        Raises:
            ValidationError: If the name is empty, too long or already taken,
                or the shirt number is out of range
        """
        cleaned = _roster_name(name)
        number = validate_shirt_number("shirt_number", shirt_number)
        if self._find_index(cleaned) is not None:
            raise ValidationError("name", f'Player "{cleaned}" already exists!')

        player = Player(cleaned, number)
        self.players.append(player)
        self._sort_and_save()

        shirt_text = f" (#{number})" if number is not None else ""
        self.notifier.notify(f"Player {cleaned}{shirt_text} added successfully.", Severity.SUCCESS)
        return player

    def edit_player(self, old_name: str, new_name: str, shirt_number: Optional[int] = None) -> Player:
        """
        Rename a player and replace their shirt number.

        Raises:
            ValidationError: If the player is unknown, the new name is invalid
                or taken by another player, or the shirt number is out of range
        """
        cleaned = _roster_name(new_name)
        number = validate_shirt_number("shirt_number", shirt_number)
        index = self._find_index(old_name)
        if index is None:
            raise ValidationError("name", f'Player "{old_name}" not found.')
        clash = self._find_index(cleaned)
        if clash is not None and clash != index:
            raise ValidationError("name", f'Player name "{cleaned}" already exists!')

        player = self.players[index]
        previous_name = player.name
        player.name = cleaned
        player.shirt_number = number
        self._sort_and_save()
        self._rename_attendance(previous_name, cleaned)

        shirt_text = f" (#{number})" if number is not None else ""
        self.notifier.notify(f'Player updated to "{cleaned}{shirt_text}" successfully.', Severity.SUCCESS)
        return player

    def remove_player(self, name: str) -> Player:
        """
        Remove a player.

        Raises:
            ValidationError: If the player is unknown
        """
        index = self._find_index(name)
        if index is None:
            raise ValidationError("name", f'Player "{name}" not found.')
        player = self.players.pop(index)
        self._save_roster()
        self.notifier.notify(f"Player {player.name} removed successfully.", Severity.SUCCESS)
        return player

    def add_players_bulk(self, names_text: str) -> BulkAddResult:
        """
        Add players from a comma or newline separated list of names.

        Names that are too long, already on the roster or repeated within the
        list are reported as failures; the rest are added without shirt numbers.

        Raises:
            ValidationError: If the list holds no names at all
        """
        if not isinstance(names_text, str) or not names_text.strip():
            raise ValidationError("names", "No player names provided for bulk add.")
        names = [n.strip() for n in _BULK_SEPARATORS.split(names_text) if n.strip()]
        if not names:
            raise ValidationError("names", "No valid player names found.")

        result = BulkAddResult()
        seen = set()
        for raw in names:
            name = sanitize_text(raw, max_length=len(raw))
            if not name:
                continue
            if len(name) > MAX_ROSTER_NAME_LENGTH:
                result.failed.append((name, f"Name too long (max {MAX_ROSTER_NAME_LENGTH} chars)"))
            elif self._find_index(name) is not None:
                result.failed.append((name, "Player already exists"))
            elif name.casefold() in seen:
                result.failed.append((name, "Duplicate in current bulk list"))
            else:
                seen.add(name.casefold())
                result.added.append(Player(name))

        if result.added:
            self.players.extend(result.added)
            self._sort_and_save()
            added_names = ", ".join(p.name for p in result.added)
            self.notifier.notify(
                f"Successfully added {len(result.added)} player(s): {added_names}. "
                "Shirt numbers can be added via Edit.",
                Severity.SUCCESS,
            )
        if result.failed:
            failed_names = ", ".join(f'"{name}" ({reason})' for name, reason in result.failed)
            self.notifier.notify(
                f"Could not add {len(result.failed)} player(s): {failed_names}", Severity.WARNING
            )
        if not result.added and not result.failed:
            self.notifier.notify("No new players were added from the list.", Severity.INFO)
        return result

    def clear_roster(self) -> None:
        self.players = []
        self._save_roster()
        self.notifier.notify("Roster cleared successfully.", Severity.SUCCESS)

    # ------------------------------------------------------------------
    # Attendance
    # ------------------------------------------------------------------
    def match_attendance(self) -> List[AttendanceRecord]:
        """One record per roster player; players without a saved answer are present."""
        saved = self._load_attendance()
        return [
            AttendanceRecord(
                player_name=player.name,
                shirt_number=player.shirt_number,
                attending=saved.get(player.name.casefold(), True),
            )
            for player in self.players
        ]

    def set_attendance(self, name: str, attending: bool, silent: bool = False) -> AttendanceRecord:
        """
        Mark a roster player present or absent.

        Raises:
            ValidationError: If the player is unknown or ``attending`` is not a bool
        """
        if not isinstance(attending, bool):
            raise ValidationError("attending", "Expected true or false")
        player = self.get_player_by_name(name)
        if player is None:
            raise ValidationError("name", f'Player "{name}" not found.')

        records = self.match_attendance()
        for record in records:
            if record.player_name == player.name:
                record.attending = attending
        self._save_attendance(records)

        if not silent:
            status = "present" if attending else "absent"
            self.notifier.notify(f"{player.name} marked as {status}", Severity.SUCCESS)
        return next(r for r in records if r.player_name == player.name)

    def toggle_attendance(self, name: str) -> AttendanceRecord:
        player = self.get_player_by_name(name)
        if player is None:
            raise ValidationError("name", f'Player "{name}" not found.')
        current = next(r for r in self.match_attendance() if r.player_name == player.name)
        return self.set_attendance(player.name, not current.attending)

    def mark_all(self, attending: bool, silent: bool = False) -> None:
        records = self.match_attendance()
        for record in records:
            record.attending = attending
        self._save_attendance(records)
        if not silent:
            status = "present" if attending else "absent"
            self.notifier.notify(f"All players marked as {status}", Severity.SUCCESS)

    def clear_attendance(self, silent: bool = False) -> None:
        """Forget saved answers, so every player counts as present again."""
        if self.persistence is not None:
            self.persistence.remove(ROSTER_STORAGE_KEYS["MATCH_ATTENDANCE"])
        self._attendance_cache = {}
        if not silent:
            self.notifier.notify("Attendance reset - all players marked as present", Severity.SUCCESS)

    def attendance_summary(self) -> AttendanceSummary:
        records = self.match_attendance()
        present = [r.player_name for r in records if r.attending]
        absent = [r.player_name for r in records if not r.attending]
        rate = round(len(present) / len(records) * 100) if records else 0
        return AttendanceSummary(
            total=len(records),
            attending=len(present),
            absent=len(absent),
            attending_players=present,
            absent_players=absent,
            attendance_rate=rate,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _find_index(self, name: Optional[str]) -> Optional[int]:
        if not isinstance(name, str):
            return None
        wanted = name.strip().casefold()
        for index, player in enumerate(self.players):
            if player.name.casefold() == wanted:
                return index
        return None

    def _load_roster(self) -> List[Player]:
        if self.persistence is None:
            return []
        raw = self.persistence.load(ROSTER_STORAGE_KEYS["ROSTER"], [])
        if not isinstance(raw, list):
            log.warning("Stored roster is not a list; starting with an empty roster")
            return []

        players: List[Player] = []
        seen = set()
        for entry in raw:
            player = Player.from_json(entry)
            if player is None or player.name.casefold() in seen:
                continue
            seen.add(player.name.casefold())
            players.append(player)
        players.sort(key=lambda p: p.name.casefold())
        return players

    def _sort_and_save(self) -> None:
        self.players.sort(key=lambda p: p.name.casefold())
        self._save_roster()

    def _save_roster(self) -> None:
        if self.persistence is not None:
            self.persistence.save(ROSTER_STORAGE_KEYS["ROSTER"], [p.to_json() for p in self.players])

    def _load_attendance(self) -> Dict[str, bool]:
        if self.persistence is None:
            return dict(self._attendance_cache)
        raw = self.persistence.load(ROSTER_STORAGE_KEYS["MATCH_ATTENDANCE"], [])
        saved: Dict[str, bool] = {}
        if not isinstance(raw, list):
            return saved
        for record in raw:
            if not isinstance(record, dict):
                continue
            name = record.get("player_name", record.get("playerName"))
            attending = record.get("attending")
            if isinstance(name, str) and isinstance(attending, bool):
                saved[name.casefold()] = attending
        return saved

    def _save_attendance(self, records: List[AttendanceRecord]) -> None:
        self._attendance_cache = {r.player_name.casefold(): r.attending for r in records}
        if self.persistence is not None:
            self.persistence.save(
                ROSTER_STORAGE_KEYS["MATCH_ATTENDANCE"],
                [{"player_name": r.player_name, "attending": r.attending} for r in records],
            )

    def _rename_attendance(self, old_name: str, new_name: str) -> None:
        saved = self._load_attendance()
        if old_name.casefold() not in saved:
            return
        attending = saved[old_name.casefold()]
        records = self.match_attendance()
        for record in records:
            if record.player_name == new_name:
                record.attending = attending
        self._save_attendance(records)
