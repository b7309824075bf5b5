"""Audio frame sources and per-frame pitch detection.

The sounddevice backed input lives in ``pitch_tuner.audio.audio_input`` and
is imported on demand, since it needs PortAudio at import time.
"""

from .frame_loop import FrameLoop, is_in_tune
from .pitch_detector import PitchDetector
from .sources import ArrayAudioInput, WavFileInput

__all__ = ["ArrayAudioInput", "FrameLoop", "PitchDetector", "WavFileInput", "is_in_tune"]
