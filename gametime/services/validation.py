"""Input validation and sanitizing for match log commands."""
import re
from typing import Any, Optional

from .errors import ValidationError
from ..utils import MAX_NAME_LENGTH, MAX_NOTES_LENGTH, MAX_SHIRT_NUMBER, MIN_SHIRT_NUMBER

# Markup brackets and control characters other than tab/newline
_UNSAFE_CHARS = re.compile(r"[<>\x00-\x08\x0b-\x1f\x7f]")


def sanitize_text(text: Any, max_length: int = MAX_NOTES_LENGTH) -> str:
    """
    Clean free text for storage.

    Non-strings become empty; markup brackets and control characters are
    removed, surrounding whitespace trimmed and the result truncated.
    """
    if not isinstance(text, str):
        return ""
    return _UNSAFE_CHARS.sub("", text.strip())[:max_length].strip()


def _as_int(field: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(field, "Must be a whole number")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise ValidationError(field, "Must be a whole number")


def validate_player_name(field: str, value: Any, required: bool) -> Optional[str]:
    """
    Validate a scorer/assist name.

    Returns:
        The trimmed name, or None for an absent optional name
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(field, "Name is required")
        return None
    if not isinstance(value, str):
        raise ValidationError(field, "Name must be text")
    name = sanitize_text(value, max_length=len(value))
    if not name:
        raise ValidationError(field, "Name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(field, f"Name cannot exceed {MAX_NAME_LENGTH} characters")
    return name


def validate_shirt_number(field: str, value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    number = _as_int(field, value)
    if not MIN_SHIRT_NUMBER <= number <= MAX_SHIRT_NUMBER:
        raise ValidationError(field, f"Shirt number must be between {MIN_SHIRT_NUMBER} and {MAX_SHIRT_NUMBER}")
    return number


def validate_match_second(value: Any) -> int:
    second = _as_int("match_second", value)
    if second < 0:
        raise ValidationError("match_second", "Time cannot be negative")
    return second


def validate_minutes(value: Any) -> int:
    minutes = _as_int("minutes", value)
    if minutes < 0:
        raise ValidationError("minutes", "Time cannot be negative")
    return minutes
