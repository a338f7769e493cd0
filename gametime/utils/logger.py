"""Logger factory shared by every GameTime module."""
import logging
from pathlib import Path
from typing import Dict, Optional

_LOGGERS: Dict[str, logging.Logger] = {}

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str, *, log_dir: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Create or retrieve a named logger.

    Args:
        name: Logger namespace below ``gametime`` (e.g. ``services.persistence``)
        log_dir: Optional directory for an additional ``gametime.log`` file
        level: Logging level applied when the logger is first created

    Returns:
        Configured :class:`logging.Logger`
    """
    cache_key = f"gametime.{name}"
    if cache_key in _LOGGERS:
        return _LOGGERS[cache_key]

    logger = logging.getLogger(cache_key)
    logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_dir:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(directory / "gametime.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    _LOGGERS[cache_key] = logger
    return logger
