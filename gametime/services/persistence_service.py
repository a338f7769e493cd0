"""
Persistence service for the GameTime match tracker.

This module provides the key/value persistence gateway used by the match
services, the storage backends behind it, and whole-match export/import to
JSON files.
"""
import datetime
import json
import os
import threading
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from .errors import PersistenceError
from ..models import MatchState
from ..utils import STORAGE_KEYS, get_logger

log = get_logger("services.persistence")

_MISSING = object()


class KeyValueStore(Protocol):
    """String key/value storage, the equivalent of browser localStorage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        ...


class MemoryStore:
    """In-process store; contents are lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


class JsonFileStore:
    """
    Store backed by a single JSON document on disk.

    Every write rewrites the document through a temporary file so a crash
    mid-write leaves the previous version in place. Access is serialized so
    writers from different threads never share the temporary file.
    """

    def __init__(self, file_path: str):
        self.file_path = file_path
        self._data: Optional[Dict[str, str]] = None
        self._lock = threading.RLock()

    def _ensure_loaded(self) -> Dict[str, str]:
        with self._lock:
            if self._data is not None:
                return self._data

            self._data = {}
            if not os.path.exists(self.file_path):
                return self._data

            try:
                with open(self.file_path, "r", encoding="utf-8") as f:
                    raw = json.load(f)
            except (OSError, ValueError) as e:
                log.warning(f"Storage file {self.file_path} unreadable ({e}); starting empty")
                return self._data

            if isinstance(raw, dict):
                self._data = {str(k): v for k, v in raw.items() if isinstance(v, str)}
            else:
                log.warning(f"Storage file {self.file_path} is not an object; starting empty")
            return self._data

    def _flush(self) -> None:
        directory = os.path.dirname(self.file_path)
        tmp_path = f"{self.file_path}.tmp"
        with self._lock:
            try:
                if directory and not os.path.exists(directory):
                    os.makedirs(directory)
                with open(tmp_path, "w", encoding="utf-8") as f:
                    json.dump(self._data, f, indent=2)
                os.replace(tmp_path, self.file_path)
            except OSError as e:
                raise PersistenceError(None, f"Could not write {self.file_path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._ensure_loaded().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._ensure_loaded()[key] = value
            self._flush()

    def remove_item(self, key: str) -> None:
        with self._lock:
            if self._ensure_loaded().pop(key, None) is not None:
                self._flush()

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._ensure_loaded())


class PersistenceService:
    """
    Key-based save/load of plain JSON-serializable values.

    Writes are best effort: serialization and storage failures are logged and
    swallowed so an in-memory mutation is never rolled back. Reads fall back to
    the caller's default on a missing key or an unparseable value.
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self.store = store if store is not None else MemoryStore()

    # ------------------------------------------------------------------
    # Key/value gateway
    # ------------------------------------------------------------------
    def save(self, key: str, value: Any) -> bool:
        """
        Save a value under ``key``.

        Returns:
            True if the value reached the store, False if the write was dropped
        """
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            log.error(f"Cannot serialize value for key {key}: {e}")
            return False

        try:
            self.store.set_item(key, payload)
        except PersistenceError as e:
            log.error(f"Error saving key {key}: {e.reason}")
            return False
        return True

    def load(self, key: str, default: Any = None) -> Any:
        """Load the value stored under ``key`` or return ``default``."""
        try:
            payload = self.store.get_item(key)
        except PersistenceError as e:
            log.error(f"Error loading key {key}: {e.reason}")
            return default

        if payload is None:
            return default

        try:
            return json.loads(payload)
        except ValueError as e:
            log.warning(f"Corrupt value stored for key {key} ({e}); using default")
            return default

    def load_typed(self, key: str, default: Any, expected: Tuple[type, ...]) -> Any:
        """Like :meth:`load` but also falls back when the value has the wrong type."""
        value = self.load(key, _MISSING)
        if value is _MISSING:
            return default
        if value is None and default is None:
            return None
        if not isinstance(value, expected):
            log.warning(f"Unexpected {type(value).__name__} stored for key {key}; using default")
            return default
        return value

    def remove(self, key: str) -> None:
        try:
            self.store.remove_item(key)
        except PersistenceError as e:
            log.error(f"Error removing key {key}: {e.reason}")

    def clear(self, known_keys: Optional[Iterable[str]] = None) -> None:
        """Remove every known match key from the store."""
        for key in known_keys if known_keys is not None else STORAGE_KEYS.values():
            self.remove(key)

    # ------------------------------------------------------------------
    # Match state helpers
    # ------------------------------------------------------------------
    def save_clock(self, state: MatchState) -> None:
        self.save(STORAGE_KEYS["ELAPSED_TIME"], state.elapsed_seconds)
        self.save(STORAGE_KEYS["IS_RUNNING"], state.is_running)
        self.save(STORAGE_KEYS["START_TIMESTAMP"], state.start_epoch_ms)
        self.save(STORAGE_KEYS["GAME_TIME"], state.game_duration_seconds)
        self.save(STORAGE_KEYS["IS_SECOND_HALF"], state.is_second_half)

    def save_match_data(self, state: MatchState) -> None:
        self.save(STORAGE_KEYS["GOALS"], [goal.to_json() for goal in state.goals])
        self.save(STORAGE_KEYS["MATCH_EVENTS"], [event.to_json() for event in state.events])
        self.save(STORAGE_KEYS["FIRST_SCORE"], state.score_a)
        self.save(STORAGE_KEYS["SECOND_SCORE"], state.score_b)

    def save_team_data(self, state: MatchState) -> None:
        self.save(STORAGE_KEYS["TEAM1_NAME"], state.side_a_name)
        self.save(STORAGE_KEYS["TEAM2_NAME"], state.side_b_name)
        self.save(STORAGE_KEYS["TEAM1_HISTORY"], state.side_a_history)
        self.save(STORAGE_KEYS["TEAM2_HISTORY"], state.side_b_history)

    def save_match_state(self, state: MatchState) -> None:
        """Persist every field of the match under its own key."""
        self.save_clock(state)
        self.save_match_data(state)
        self.save_team_data(state)

    def load_match_state(self, defaults: Optional[MatchState] = None) -> MatchState:
        """
        Rebuild a match from the stored keys.

        Args:
            defaults: State supplying values for missing or corrupt keys
                (team names, game duration ...)

        Returns:
            A new MatchState
        """
        defaults = defaults or MatchState()
        start = self.load_typed(STORAGE_KEYS["START_TIMESTAMP"], None, (int, float))
        data = {
            "elapsed_seconds": self.load_typed(STORAGE_KEYS["ELAPSED_TIME"], 0, (int, float)),
            "is_running": self.load_typed(STORAGE_KEYS["IS_RUNNING"], False, (bool,)),
            "start_epoch_ms": int(start) if start is not None else None,
            "goals": self.load_typed(STORAGE_KEYS["GOALS"], [], (list,)),
            "events": self.load_typed(STORAGE_KEYS["MATCH_EVENTS"], [], (list,)),
            "side_a_name": self.load_typed(STORAGE_KEYS["TEAM1_NAME"], defaults.side_a_name, (str,)),
            "side_b_name": self.load_typed(STORAGE_KEYS["TEAM2_NAME"], defaults.side_b_name, (str,)),
            "side_a_history": self.load_typed(
                STORAGE_KEYS["TEAM1_HISTORY"], list(defaults.side_a_history), (list,)
            ),
            "side_b_history": self.load_typed(
                STORAGE_KEYS["TEAM2_HISTORY"], list(defaults.side_b_history), (list,)
            ),
            "game_duration_seconds": self.load_typed(
                STORAGE_KEYS["GAME_TIME"], defaults.game_duration_seconds, (int,)
            ),
            "is_second_half": self.load_typed(STORAGE_KEYS["IS_SECOND_HALF"], False, (bool,)),
            "score_a": self.load_typed(STORAGE_KEYS["FIRST_SCORE"], 0, (int,)),
            "score_b": self.load_typed(STORAGE_KEYS["SECOND_SCORE"], 0, (int,)),
        }
        return MatchState.from_json(data)

    # ------------------------------------------------------------------
    # Storage diagnostics
    # ------------------------------------------------------------------
    def check_storage_health(self) -> bool:
        """Round-trip a sentinel value through the store."""
        test_key = "nugt_storage_test"
        try:
            self.store.set_item(test_key, "test")
            retrieved = self.store.get_item(test_key)
            self.store.remove_item(test_key)
        except PersistenceError as e:
            log.error(f"Storage health check failed: {e.reason}")
            return False
        return retrieved == "test"

    def storage_info(self) -> Dict[str, Any]:
        """Size of the stored match keys."""
        total_size = 0
        keys = list(STORAGE_KEYS.values())
        for key in keys:
            try:
                item = self.store.get_item(key)
            except PersistenceError:
                continue
            if item:
                total_size += len(item)
        return {
            "total_keys": len(keys),
            "total_size": total_size,
            "formatted_size": f"{total_size / 1024:.2f} KB",
        }

    # ------------------------------------------------------------------
    # Whole-match files
    # ------------------------------------------------------------------
    @staticmethod
    def export_match_to_file(state: MatchState, file_path: str) -> None:
        """
        Save a match to a JSON file.

        Args:
            state: The match to save
            file_path: Path where to save the file

        Raises:
            OSError: If the file cannot be written
        """
        directory = os.path.dirname(file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(state.to_json(), f, indent=2)

    @staticmethod
    def load_match_from_file(file_path: str) -> MatchState:
        """
        Load a match from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file contains invalid JSON
            ValueError: If the JSON document is not an object
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Match file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError("Match file must contain a JSON object")
        return MatchState.from_json(data)

    @staticmethod
    def auto_save(state: MatchState, auto_save_dir: str = "autosave") -> Optional[str]:
        """
        Save the match to a timestamped file.

        Returns:
            Path to saved file, or None if save failed
        """
        timestamp = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        file_path = os.path.join(auto_save_dir, f"match_autosave_{timestamp}.json")
        try:
            PersistenceService.export_match_to_file(state, file_path)
        except OSError as e:
            log.error(f"Auto-save to {file_path} failed: {e}")
            return None
        return file_path
