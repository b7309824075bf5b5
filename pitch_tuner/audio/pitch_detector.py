"""Pitch detection for a single audio frame.

The detector is an RMS noise gate followed by an autocorrelation period
estimator. The frame edges are trimmed at the first low-amplitude samples
instead of applying an analysis window, and the period is refined with a
parabola through the correlation peak.
"""

from __future__ import annotations
import math
from typing import ClassVar, TypeAlias

import numpy as np

from ..errors import ConfigurationError
from ..logger import get_logger
from ..note_types import DetectionResult
from ..core.interfaces import IPitchDetector

logger = get_logger(__name__)


class PitchDetector(IPitchDetector):
    """Autocorrelation pitch detector with a sensitivity controlled noise gate."""

    # Type aliases
    Amplitude: TypeAlias = float

    # Noise gate bounds, tuned by ear rather than derived
    DEFAULT_MIN_FLOOR: ClassVar[Amplitude] = 0.0001  # Gate at sensitivity 1.0
    DEFAULT_MAX_CEILING: ClassVar[Amplitude] = 0.01  # Gate at sensitivity 0.0
    DEFAULT_TRIM_THRESHOLD: ClassVar[Amplitude] = 0.2  # Edge trimming level
    MIN_TRIMMED_LENGTH: ClassVar[int] = 3  # Needed for parabolic refinement

    def __init__(
        self,
        min_floor: float = DEFAULT_MIN_FLOOR,
        max_ceiling: float = DEFAULT_MAX_CEILING,
        trim_threshold: float = DEFAULT_TRIM_THRESHOLD,
    ) -> None:
        """Initialize the PitchDetector.

        Args:
            min_floor: RMS threshold at the highest sensitivity
            max_ceiling: RMS threshold at the lowest sensitivity
            trim_threshold: Absolute amplitude below which a sample ends edge trimming

        Raises:
            ConfigurationError: If the gate bounds are not 0 < min_floor <= max_ceiling
        """
        if not 0 < min_floor <= max_ceiling:
            raise ConfigurationError(
                f"Noise gate needs 0 < min_floor <= max_ceiling, got {min_floor}, {max_ceiling}"
            )
        if trim_threshold <= 0:
            raise ConfigurationError(f"trim_threshold must be positive, got {trim_threshold}")

        self._min_floor = min_floor
        self._max_ceiling = max_ceiling
        self._trim_threshold = trim_threshold

    def gate_threshold(self, sensitivity: float) -> float:
        """RMS level a frame must reach to be analysed.

        Higher sensitivity lowers the threshold.
        """
        return self._min_floor + (1.0 - sensitivity) * (self._max_ceiling - self._min_floor)

    @staticmethod
    def rms(frame: np.ndarray) -> float:
        if frame.size == 0:
            return 0.0
        return float(np.sqrt(np.mean(np.square(frame))))

    def detect(self, frame: np.ndarray, sample_rate: float, sensitivity: float) -> DetectionResult:
        """Detect the pitch of one frame.

        Args:
            frame: 1D array of samples in roughly [-1, 1]
            sample_rate: Sample rate in Hz
            sensitivity: Noise gate sensitivity in (0, 1]

        Returns:
            DetectionResult with the frequency and clarity, or a no-pitch result
        """
        samples = np.asarray(frame, dtype=np.float64)
        if samples.ndim > 1:
            samples = samples[:, 0]

        volume = self.rms(samples)
        if volume < self.gate_threshold(sensitivity):
            return DetectionResult.no_pitch(volume)

        trimmed = self._trim_edges(samples)
        return self._estimate_period(trimmed, sample_rate, volume)

    def _trim_edges(self, samples: np.ndarray) -> np.ndarray:
        """Crop the frame between the first quiet samples found from each end.

        Only the first half is scanned from the start and only the second
        half from the end. A side without a quiet sample is left untrimmed.
        """
        size = len(samples)
        half = math.ceil(size / 2)
        quiet = np.abs(samples) < self._trim_threshold

        head = np.flatnonzero(quiet[:half])
        start = int(head[0]) if head.size else 0

        tail_offset = size - half + 1
        tail = np.flatnonzero(quiet[tail_offset:])
        end = tail_offset + int(tail[-1]) if tail.size else size - 1

        return samples[start:end]

    def _estimate_period(
        self, buf: np.ndarray, sample_rate: float, volume: float
    ) -> DetectionResult:
        size = len(buf)
        if size < self.MIN_TRIMMED_LENGTH:
            logger.debug(f"Trimmed frame too short ({size} samples)")
            return DetectionResult.no_pitch(volume)

        # Direct autocorrelation, c[lag] = sum(buf[j] * buf[j + lag])
        corr = np.correlate(buf, buf, mode="full")[size - 1 :]

        # Walk down from the zero-lag peak to the first trough
        lag = 0
        while lag + 1 < size and corr[lag] > corr[lag + 1]:
            lag += 1
        if lag >= size - 1:
            logger.debug("No trough found in autocorrelation")
            return DetectionResult.no_pitch(volume)

        period = lag + int(np.argmax(corr[lag:]))
        max_value = float(corr[period])

        # Interpolation needs a neighbour on both sides
        if period < 1 or period >= size - 1:
            logger.debug(f"Correlation peak at boundary lag {period}")
            return DetectionResult.no_pitch(volume)

        x1, x2, x3 = corr[period - 1], corr[period], corr[period + 1]
        a = (x1 + x3 - 2 * x2) / 2
        b = (x3 - x1) / 2
        refined = float(period - b / (2 * a)) if a != 0 else float(period)

        if not math.isfinite(refined) or refined <= 0:
            return DetectionResult.no_pitch(volume)

        energy = float(corr[0])
        clarity = max_value / energy if energy > 0 else 0.0
        clarity = min(max(clarity, 0.0), 1.0)

        frequency = sample_rate / refined
        logger.debug(
            f"period={refined:.3f} samples freq={frequency:.2f}Hz "
            f"clarity={clarity:.3f} rms={volume:.4f}"
        )
        return DetectionResult(frequency=frequency, clarity=clarity, volume=volume)
