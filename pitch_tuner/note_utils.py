"""Utility functions for working with musical notes and frequencies."""

import math
from typing import List

from .errors import InvalidFrequencyError
from .note_types import Note

NOTE_NAMES: List[str] = [
    "C",
    "C♯",
    "D",
    "D♯",
    "E",
    "F",
    "F♯",
    "G",
    "G♯",
    "A",
    "A♯",
    "B",
]

A4_INDEX = 69  # Semitone index of A4 (MIDI numbering)
DEFAULT_A4 = 440.0


def _check_frequency(frequency: float) -> None:
    if not math.isfinite(frequency) or frequency <= 0:
        raise InvalidFrequencyError(
            f"Frequency must be a positive finite number, got {frequency}"
        )


def get_frequency(semitones_from_a4: float, a4: float = DEFAULT_A4) -> float:
    """Equal-tempered frequency a number of semitones away from A4."""
    return a4 * 2.0 ** (semitones_from_a4 / 12.0)


def cents_between(frequency: float, target_frequency: float) -> float:
    """Signed distance in cents from target_frequency to frequency.

    Raises:
        InvalidFrequencyError: If either frequency is not positive
    """
    _check_frequency(frequency)
    _check_frequency(target_frequency)
    return 1200.0 * math.log2(frequency / target_frequency)


def get_note_from_frequency(frequency: float, a4: float = DEFAULT_A4) -> Note:
    """Map a frequency to the nearest equal-tempered note.

    Args:
        frequency: Frequency in Hz, must be positive
        a4: Tuning reference for A4 in Hz

    Returns:
        The nearest Note, with the signed deviation in cents (positive is sharp)

    Raises:
        InvalidFrequencyError: If frequency is not a positive finite number

    Note:
        - Octave numbers change between B and C (e.g., B3 -> C4)
        - Deviation is never clamped
    """
    _check_frequency(frequency)

    note_number = 12.0 * math.log2(frequency / a4)
    # Half-way ties go up, not to even
    note_index = math.floor(note_number + 0.5) + A4_INDEX

    name = NOTE_NAMES[note_index % 12]
    octave = note_index // 12 - 1
    target_frequency = get_frequency(note_index - A4_INDEX, a4)
    cents = 1200.0 * math.log2(frequency / target_frequency)

    return Note(
        name=name,
        octave=octave,
        cents=cents,
        note_index=note_index,
        target_frequency=target_frequency,
    )


def get_note_name(frequency: float, a4: float = DEFAULT_A4) -> str:
    """Convert frequency to a note name with octave, e.g. 'A4' or 'C♯3'."""
    return str(get_note_from_frequency(frequency, a4))
