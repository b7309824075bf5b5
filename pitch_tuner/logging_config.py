"""Console logging for the pitch_tuner CLI."""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

MODULE_LOG_LEVELS = {
    "pitch_tuner": logging.INFO,
    "pitch_tuner.core": logging.INFO,
    "pitch_tuner.audio": logging.INFO,
    # Logs every frame at DEBUG
    "pitch_tuner.audio.pitch_detector": logging.WARNING,
    "pitch_tuner.cli": logging.INFO,
    "pitch_tuner.logger": logging.WARNING,
    "sounddevice": logging.ERROR,
    "": logging.ERROR,
}

# Loggers that own the handler; everything below them propagates
_HANDLER_OWNERS = ("", "pitch_tuner", "sounddevice")

_console_handler: Optional[logging.Handler] = None


def _resolve_levels(level: Optional[str]) -> dict:
    levels = dict(MODULE_LOG_LEVELS)
    if not level:
        return levels
    override = logging.getLevelName(level.upper())
    if not isinstance(override, int):
        logging.getLogger(__name__).error(f"Invalid log level: {level}")
        return levels
    for name in levels:
        if name.startswith("pitch_tuner"):
            levels[name] = override
    return levels


def setup_logging(level: Optional[str] = None) -> None:
    """Attach one stdout handler and apply per-module levels.

    Args:
        level: Level name such as "DEBUG" applied to all pitch_tuner loggers
    """
    global _console_handler

    if _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stdout)
        _console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    for name, module_level in _resolve_levels(level).items():
        logger = logging.getLogger(name)
        logger.setLevel(module_level)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        owns_handler = name in _HANDLER_OWNERS
        if owns_handler:
            logger.addHandler(_console_handler)
        logger.propagate = not owns_handler

    logging.getLogger("pitch_tuner").debug("Logging configured")
