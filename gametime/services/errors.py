"""
Error types raised by the match log services.

None of these are fatal: callers catch them and turn them into user feedback
while the match state stays untouched.
"""
from typing import Optional


class MatchLogError(Exception):
    """Base class for recoverable match log failures."""
    pass


class ValidationError(MatchLogError):
    """Command input had the wrong shape or range."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class IndexOutOfRange(MatchLogError):
    """An edit/delete addressed a position that no longer exists."""

    def __init__(self, collection: str, index: int):
        self.collection = collection
        self.index = index
        super().__init__(f"No {collection} entry at index {index}")


class UserCancelled(MatchLogError):
    """An optional confirmation flow was aborted."""

    def __init__(self, reason: str = "Cancelled by user"):
        self.reason = reason
        super().__init__(reason)


class PersistenceError(MatchLogError):
    """A storage backend failed to read or write a key."""

    def __init__(self, key: Optional[str], reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"{key or '<storage>'}: {reason}")


class ConfigurationError(MatchLogError):
    """A configuration value consumed by the core is unusable."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")
