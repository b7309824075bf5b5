"""Per-frame pitch detection loop."""

from __future__ import annotations
from typing import Optional

import numpy as np

from ..core.config import TunerSettings
from ..core.interfaces import IAudioInput, IFrameLoop, IPitchDetector, PitchSink
from ..logger import get_logger
from ..note_types import DetectedPitch, NoteDefinition
from ..note_utils import cents_between, get_note_from_frequency
from .pitch_detector import PitchDetector

logger = get_logger(__name__)

IN_TUNE_CENTS = 5.0


def is_in_tune(pitch: Optional[DetectedPitch], tolerance_cents: float = IN_TUNE_CENTS) -> bool:
    """True when a reading is within tolerance_cents of its target."""
    return pitch is not None and abs(pitch.deviation) < tolerance_cents


class FrameLoop(IFrameLoop):
    """Runs detector and note mapping once per frame delivered by an audio input.

    The audio input's callback is the frame clock. Each frame produces exactly
    one sink call, with None when no pitch was found.
    """

    def __init__(
        self,
        audio_input: IAudioInput,
        detector: Optional[IPitchDetector] = None,
        settings: Optional[TunerSettings] = None,
        target: Optional[NoteDefinition] = None,
    ) -> None:
        """Initialize the loop.

        Args:
            audio_input: Source of frames
            detector: Pitch detector, or None for a default PitchDetector
            settings: Sensitivity and A4 reference, or None for defaults
            target: Fixed target note (manual string mode), or None to use
                the nearest note
        """
        self._audio_input = audio_input
        self._detector = detector or PitchDetector()
        self._settings = settings or TunerSettings()
        self._target = target
        self._sink: Optional[PitchSink] = None
        self._running = False
        self._frames_processed = 0

    @property
    def settings(self) -> TunerSettings:
        return self._settings

    @property
    def target(self) -> Optional[NoteDefinition]:
        return self._target

    @property
    def frames_processed(self) -> int:
        return self._frames_processed

    def update_settings(
        self,
        sensitivity: Optional[float] = None,
        a4_reference: Optional[float] = None,
    ) -> TunerSettings:
        """Change settings, effective from the next frame.

        Raises:
            ConfigurationError: If a value is out of range; settings stay unchanged
        """
        self._settings = self._settings.updated(
            sensitivity=sensitivity, a4_reference=a4_reference
        )
        logger.debug(f"Settings updated: {self._settings}")
        return self._settings

    def set_target(self, target: Optional[NoteDefinition]) -> None:
        """Measure deviation against target instead of the nearest note."""
        self._target = target

    def process_frame(self, frame: np.ndarray) -> Optional[DetectedPitch]:
        """Run one frame through the pipeline.

        Returns:
            The reading for this frame, or None if no pitch was found
        """
        settings = self._settings
        result = self._detector.detect(
            frame, self._audio_input.sample_rate, settings.sensitivity
        )
        self._frames_processed += 1
        if not result.has_pitch:
            return None

        note = get_note_from_frequency(result.frequency, settings.a4_reference)
        deviation = note.cents
        if self._target is not None:
            deviation = cents_between(result.frequency, self._target.frequency)

        return DetectedPitch(
            frequency=result.frequency,
            note=note.name,
            octave=note.octave,
            deviation=deviation,
            clarity=result.clarity,
        )

    def _on_frame(self, frame: np.ndarray, timestamp: float) -> None:
        sink = self._sink
        if not self._running or sink is None:
            return

        pitch = self.process_frame(frame)
        if pitch is not None:
            logger.debug(
                f"[{timestamp:.2f}s] {pitch.note}{pitch.octave} "
                f"({pitch.frequency:.2f}Hz, {pitch.deviation:+.1f} cents, "
                f"clarity: {pitch.clarity:.2f})"
            )
        try:
            sink(pitch)
        except Exception as e:
            logger.error(f"Error in pitch sink: {e}", exc_info=True)

    def start(self, sink: PitchSink) -> bool:
        """Start the loop, calling sink once per frame.

        Returns:
            True if the audio input started
        """
        if self._running:
            logger.warning("Frame loop already running")
            return True

        self._sink = sink
        self._running = True
        logger.info(
            f"Frame loop starting: sample_rate={self._audio_input.sample_rate}, "
            f"frame_size={self._audio_input.frame_size}, "
            f"sensitivity={self._settings.sensitivity}, a4={self._settings.a4_reference}"
        )
        try:
            started = self._audio_input.start(self._on_frame)
        except Exception:
            self._running = False
            self._sink = None
            raise
        if not started:
            self._running = False
            self._sink = None
        return started

    def stop(self) -> None:
        """Stop the loop and release the audio input. Safe to call repeatedly."""
        was_running = self._running
        self._running = False
        self._sink = None
        self._audio_input.stop()
        if was_running:
            logger.info(f"Frame loop stopped after {self._frames_processed} frames")

    def is_running(self) -> bool:
        return self._running
