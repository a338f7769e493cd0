"""
Time helpers for the GameTime match tracker.

This module contains the clock sources and the match-minute formatting used
throughout the application.
"""
import math
import time


def fmt_mmss(seconds: int) -> str:
    """
    Format seconds as MM:SS string.

    Args:
        seconds: Number of seconds to format

    Returns:
        Formatted time string in MM:SS format

    Example:
        >>> fmt_mmss(90)
        '01:30'
        >>> fmt_mmss(3661)
        '61:01'
    """
    m = seconds // 60
    s = seconds % 60
    return f"{m:02d}:{s:02d}"


def now_ts() -> float:
    """
    Get current timestamp in epoch seconds.

    Returns:
        Current time as floating point epoch seconds
    """
    return time.time()


def now_ms() -> int:
    """Get current timestamp in whole epoch milliseconds."""
    return int(time.time() * 1000)


def _fmt_minutes(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_match_time(seconds: int, game_duration_seconds: int, is_second_half: bool) -> str:
    """
    Convert elapsed match seconds into the minute label shown on the log.

    Within regulation the label is the rounded-up minute. Past the active
    boundary (half time while still in the first half, full time otherwise)
    the label becomes ``"<base>+<extra>"``.

    Args:
        seconds: Elapsed match seconds
        game_duration_seconds: Configured regulation length
        is_second_half: Whether the second half has started

    Returns:
        Minute label such as ``"12"`` or ``"35+7"``

    Example:
        >>> format_match_time(2520, 4200, False)
        '35+7'
        >>> format_match_time(2100, 4200, False)
        '35'
    """
    half_time = game_duration_seconds / 2
    is_extra_time = (seconds > half_time and not is_second_half) or seconds > game_duration_seconds

    if not is_extra_time:
        return str(math.ceil(seconds / 60))

    if not is_second_half:
        base = half_time / 60
        extra = math.ceil((seconds - half_time) / 60)
    else:
        base = game_duration_seconds / 60
        extra = math.ceil((seconds - game_duration_seconds) / 60)

    return f"{_fmt_minutes(base)}+{extra}"
