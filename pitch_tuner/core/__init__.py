"""Core components for the pitch_tuner application."""

# Import interfaces for easier access
from .interfaces import (
    IAudioInput,
    IFrameLoop,
    IPitchDetector,
)

__all__ = ["IAudioInput", "IFrameLoop", "IPitchDetector"]
