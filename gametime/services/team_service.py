"""
Team identity tracking for the GameTime match tracker.

Tracks the current and historical names of both sides so that goals recorded
under an old team name are still attributed correctly after a rename.
"""
from typing import List, Optional

from .errors import ValidationError
from .persistence_service import PersistenceService
from ..models import GoalEvent, MatchState, Side
from ..utils import DEFAULT_SIDE_A_NAME, DEFAULT_SIDE_B_NAME, MAX_TEAM_NAME_LENGTH, get_logger

log = get_logger("services.teams")


class TeamService:
    """Current names and name history of side A and side B."""

    def __init__(
        self,
        match_state: MatchState,
        persistence: Optional[PersistenceService] = None,
        default_side_a_name: str = DEFAULT_SIDE_A_NAME,
        default_side_b_name: str = DEFAULT_SIDE_B_NAME,
    ):
        self.match_state = match_state
        self.persistence = persistence
        self.default_side_a_name = default_side_a_name
        self.default_side_b_name = default_side_b_name

    def current_name(self, side: Side) -> str:
        return self.match_state.side_a_name if side is Side.A else self.match_state.side_b_name

    def history(self, side: Side) -> List[str]:
        """Every name ever assigned to ``side``, in first-use order."""
        history = self.match_state.side_a_history if side is Side.A else self.match_state.side_b_history
        return list(history)

    def rename(self, side: Side, new_name: str) -> str:
        """
        Give ``side`` a new display name.

        Existing goals and events keep the name they were recorded under.

        Returns:
            The trimmed name that was applied

        Raises:
            ValidationError: If the name is empty or too long
        """
        if not isinstance(new_name, str) or not new_name.strip():
            raise ValidationError("team_name", "Team name cannot be empty")
        name = new_name.strip()
        if len(name) > MAX_TEAM_NAME_LENGTH:
            raise ValidationError("team_name", f"Team name cannot exceed {MAX_TEAM_NAME_LENGTH} characters")

        state = self.match_state
        history = state.side_a_history if side is Side.A else state.side_b_history
        if name not in history:
            history.append(name)
        if side is Side.A:
            state.side_a_name = name
        else:
            state.side_b_name = name

        log.info(f"Side {side.value} renamed to {name}")
        self._persist()
        return name

    def attributed_side(self, name: Optional[str]) -> Optional[Side]:
        """
        Resolve which side a recorded team name belongs to.

        Returns:
            The side whose history alone contains ``name``; None when the name
            is in both histories or in neither
        """
        if not name:
            return None
        in_a = name in self.match_state.side_a_history
        in_b = name in self.match_state.side_b_history
        if in_a and not in_b:
            return Side.A
        if in_b and not in_a:
            return Side.B
        return None

    def goal_side(self, goal: GoalEvent) -> Side:
        """
        Side a goal counts for.

        Goals carry their side from creation. Records imported without one are
        resolved through the name histories and default to side A.
        """
        if goal.side is not None:
            return goal.side
        return (
            self.attributed_side(goal.side_name_at_creation)
            or self.attributed_side(goal.scorer_name)
            or Side.A
        )

    def tag_text(self, text: str) -> Optional[Side]:
        """Side whose current name appears in ``text``; side A is checked first."""
        if self.match_state.side_a_name and self.match_state.side_a_name in text:
            return Side.A
        if self.match_state.side_b_name and self.match_state.side_b_name in text:
            return Side.B
        return None

    def reset(self) -> None:
        """Reseed both sides with the configured default names."""
        state = self.match_state
        state.side_a_name = self.default_side_a_name
        state.side_b_name = self.default_side_b_name
        state.side_a_history = [self.default_side_a_name]
        state.side_b_history = [self.default_side_b_name]
        self._persist()

    def _persist(self) -> None:
        if self.persistence is not None:
            self.persistence.save_team_data(self.match_state)
