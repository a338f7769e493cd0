"""
Player model for the GameTime match tracker.

This module contains the Player dataclass, one entry of the squad roster that
goal scorers and assists are picked from.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class Player:
    """
    A squad member.

    Attributes:
        name: Display name, unique within the roster ignoring case
        shirt_number: Shirt number, if one has been assigned
    """
    name: str
    shirt_number: Optional[int] = None

    def to_json(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {"name": self.name, "shirt_number": self.shirt_number}

    @staticmethod
    def from_json(data: Any) -> Optional["Player"]:
        """
        Create a Player from a stored roster entry.

        Older rosters stored bare names; those become players without a shirt
        number. Entries without a usable name yield None.
        """
        if isinstance(data, str):
            return Player(name=data.strip()) if data.strip() else None
        if not isinstance(data, dict):
            return None

        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            return None

        number = data.get("shirt_number", data.get("shirtNumber"))
        if isinstance(number, bool) or not isinstance(number, int):
            number = None
        return Player(name=name.strip(), shirt_number=number)
