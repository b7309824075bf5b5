"""Command-line interface for pitch_tuner."""

from .main import main

__all__ = ["main"]
