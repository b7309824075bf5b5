"""Defines the core interfaces for the pitch_tuner application."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Callable

import numpy as np

from ..note_types import DetectedPitch, DetectionResult

FrameCallback = Callable[[np.ndarray, float], None]
PitchSink = Callable[[Optional[DetectedPitch]], None]


class IAudioInput(ABC):
    """Interface for frame sources."""

    @abstractmethod
    def start(self, callback: FrameCallback) -> bool:
        """Start delivering frames to callback(frame, timestamp)."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop delivering frames and release the underlying resource."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if frames are being delivered."""
        pass

    @property
    @abstractmethod
    def sample_rate(self) -> float:
        """Sample rate of delivered frames in Hz."""
        pass

    @property
    @abstractmethod
    def frame_size(self) -> int:
        """Number of samples in each delivered frame."""
        pass


class IPitchDetector(ABC):
    """Interface for single-frame pitch detectors."""

    @abstractmethod
    def detect(self, frame: np.ndarray, sample_rate: float, sensitivity: float) -> DetectionResult:
        """Detect the pitch of one frame."""
        pass


class IFrameLoop(ABC):
    """Interface for the per-frame detection loop."""

    @abstractmethod
    def start(self, sink: PitchSink) -> bool:
        """Start feeding frames through the pipeline into sink."""
        pass

    @abstractmethod
    def stop(self) -> None:
        """Stop the loop."""
        pass

    @abstractmethod
    def is_running(self) -> bool:
        """Check if the loop is running."""
        pass
