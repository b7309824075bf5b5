"""Type definitions for the pitch_tuner project."""

from dataclasses import dataclass
from typing import List

# Frequency reported when a frame carries no pitch
NO_PITCH_FREQUENCY = -1.0


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of running the detector over one frame."""

    frequency: float  # Hz, or NO_PITCH_FREQUENCY
    clarity: float  # Normalized peak autocorrelation (0-1)
    volume: float  # RMS of the frame

    @property
    def has_pitch(self) -> bool:
        return self.frequency > 0

    @classmethod
    def no_pitch(cls, volume: float = 0.0) -> "DetectionResult":
        return cls(frequency=NO_PITCH_FREQUENCY, clarity=0.0, volume=volume)


@dataclass(frozen=True)
class Note:
    """Nearest equal-tempered note for a frequency."""

    name: str  # Pitch class, e.g. 'A' or 'C♯'
    octave: int  # Scientific pitch notation octave (A4 = 440 Hz)
    cents: float  # Signed deviation, positive is sharp
    note_index: int  # Semitone index, 69 is A4
    target_frequency: float  # Exact frequency of the nearest note in Hz

    def __str__(self):
        return f"{self.name}{self.octave}"


@dataclass(frozen=True)
class DetectedPitch:
    """Per-frame reading handed to the sink."""

    frequency: float  # Hz
    note: str  # Pitch class name
    octave: int
    deviation: float  # Cents
    clarity: float  # 0 to 1 confidence

    def to_dict(self) -> dict:
        return {
            "frequency": self.frequency,
            "note": self.note,
            "octave": self.octave,
            "deviation": self.deviation,
            "clarity": self.clarity,
        }


@dataclass(frozen=True)
class NoteDefinition:
    """A named target note, e.g. one open string of an instrument."""

    name: str  # Name with octave, e.g. 'E2'
    frequency: float  # Hz at A4 = 440
    octave: int


@dataclass(frozen=True)
class TuningDefinition:
    """An instrument tuning, strings ordered low to high."""

    name: str
    notes: List[NoteDefinition]
