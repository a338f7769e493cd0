"""Side enumeration for the two teams in a match."""
from enum import Enum
from typing import Any, Optional


class Side(Enum):
    """The tracked team (``A``) and the opposition (``B``)."""
    A = "A"
    B = "B"

    @property
    def other(self) -> "Side":
        return Side.B if self is Side.A else Side.A

    @classmethod
    def parse(cls, value: Any) -> Optional["Side"]:
        """
        Parse a stored side value.

        Accepts ``"A"``/``"B"`` as well as the legacy team numbers ``1``/``2``.
        Returns None for anything else.
        """
        if isinstance(value, Side):
            return value
        if value in (1, "1", "A", "a"):
            return cls.A
        if value in (2, "2", "B", "b"):
            return cls.B
        return None
