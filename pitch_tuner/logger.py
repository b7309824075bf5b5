"""Logger lookup shared by every pitch_tuner module."""
import logging
from typing import Dict

_loggers: Dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module name, e.g. 'pitch_tuner.audio.frame_loop'."""
    logger = _loggers.get(name)
    if logger is None:
        logger = _loggers[name] = logging.getLogger(name)
    return logger
