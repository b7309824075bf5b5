"""pitch_tuner - real-time monophonic pitch detection for instrument tuning."""

__version__ = "0.1.0"
