"""Exception types for pitch_tuner."""


class PitchTunerError(Exception):
    """Base class for all pitch_tuner errors."""


class ConfigurationError(PitchTunerError, ValueError):
    """Raised when a setting is outside its valid range."""


class InvalidFrequencyError(PitchTunerError, ValueError):
    """Raised when a non-positive or non-finite frequency is mapped to a note."""


class AudioInputError(PitchTunerError):
    """Raised when an audio source cannot be opened or started."""
