"""Instrument tuning tables and manual string targets."""

from typing import ClassVar, Dict, List, Optional

from .errors import ConfigurationError
from .note_types import NoteDefinition, TuningDefinition
from .note_utils import DEFAULT_A4


def _notes(*pairs) -> List[NoteDefinition]:
    return [NoteDefinition(name, freq, int(name[-1])) for name, freq in pairs]


class Tunings:
    """Registry of open-string tunings, strings ordered low to high."""

    INSTRUMENTS: ClassVar[Dict[str, List[TuningDefinition]]] = {
        "guitar": [
            TuningDefinition(
                "Standard",
                _notes(
                    ("E2", 82.41),
                    ("A2", 110.00),
                    ("D3", 146.83),
                    ("G3", 196.00),
                    ("B3", 246.94),
                    ("E4", 329.63),
                ),
            ),
            TuningDefinition(
                "Drop D",
                _notes(
                    ("D2", 73.42),
                    ("A2", 110.00),
                    ("D3", 146.83),
                    ("G3", 196.00),
                    ("B3", 246.94),
                    ("E4", 329.63),
                ),
            ),
            TuningDefinition(
                "Open G",
                _notes(
                    ("D2", 73.42),
                    ("G2", 98.00),
                    ("D3", 146.83),
                    ("G3", 196.00),
                    ("B3", 246.94),
                    ("D4", 293.66),
                ),
            ),
        ],
        "bass": [
            TuningDefinition(
                "Standard",
                _notes(("E1", 41.20), ("A1", 55.00), ("D2", 73.42), ("G2", 98.00)),
            ),
        ],
        "ukulele": [
            TuningDefinition(
                "Standard (GCEA)",
                _notes(("G4", 392.00), ("C4", 261.63), ("E4", 329.63), ("A4", 440.00)),
            ),
        ],
    }

    @classmethod
    def instruments(cls) -> List[str]:
        return list(cls.INSTRUMENTS)

    @classmethod
    def get_tuning(cls, instrument: str, name: Optional[str] = None) -> TuningDefinition:
        """Look up a tuning by instrument and name.

        Falls back to the instrument's first tuning when name is None.

        Raises:
            ConfigurationError: If the instrument or tuning is unknown
        """
        if instrument not in cls.INSTRUMENTS:
            raise ConfigurationError(
                f"Unknown instrument: {instrument} (choose from {', '.join(cls.INSTRUMENTS)})"
            )
        tunings = cls.INSTRUMENTS[instrument]
        if name is None:
            return tunings[0]
        for tuning in tunings:
            if tuning.name.lower() == name.lower():
                return tuning
        raise ConfigurationError(f"Unknown tuning for {instrument}: {name}")

    @classmethod
    def get_string(
        cls,
        tuning: TuningDefinition,
        index: int,
        a4: float = DEFAULT_A4,
    ) -> NoteDefinition:
        """Return the target for a string, rescaled to the given A4 reference.

        Raises:
            ConfigurationError: If the string index is out of range
        """
        if not 0 <= index < len(tuning.notes):
            raise ConfigurationError(
                f"String index {index} out of range for {tuning.name} "
                f"({len(tuning.notes)} strings)"
            )
        note = tuning.notes[index]
        if a4 == DEFAULT_A4:
            return note
        return NoteDefinition(note.name, note.frequency * a4 / DEFAULT_A4, note.octave)
