"""Frame sources that do not need an audio device."""

from __future__ import annotations
import threading
import time
from abc import ABC
from typing import Iterable, Iterator, Optional

import numpy as np
import soundfile as sf

from ..errors import AudioInputError, ConfigurationError
from ..logger import get_logger
from ..core.interfaces import FrameCallback, IAudioInput

logger = get_logger(__name__)


class AudioInputHandler(IAudioInput, ABC):
    """Base class for frame sources, tracks the running flag and callback."""

    def __init__(self) -> None:
        self._running = False
        self._callback: Optional[FrameCallback] = None

    def is_running(self) -> bool:
        """Check if audio input is running.

        Returns:
            True if audio input is running, False otherwise
        """
        return self._running


def _fit_frame(data: np.ndarray, frame_size: int) -> np.ndarray:
    """Take the first channel and zero-pad a short final frame."""
    if data.ndim > 1:
        data = data[:, 0]
    data = np.asarray(data, dtype=np.float32)
    if len(data) < frame_size:
        data = np.concatenate((data, np.zeros(frame_size - len(data), dtype=np.float32)))
    return data


class ArrayAudioInput(AudioInputHandler):
    """Delivers pre-computed frames synchronously from start().

    Stops early if stop() is called from inside the callback.
    """

    def __init__(self, frames: Iterable[np.ndarray], sample_rate: float, frame_size: int = 2048):
        super().__init__()
        if sample_rate <= 0:
            raise ConfigurationError(f"Sample rate must be positive, got {sample_rate}")
        self._frames = frames
        self._sample_rate = sample_rate
        self._frame_size = frame_size

    @classmethod
    def from_signal(
        cls, signal: np.ndarray, sample_rate: float, frame_size: int = 2048
    ) -> "ArrayAudioInput":
        """Split a 1D signal into consecutive frames."""
        frames = [
            _fit_frame(signal[i : i + frame_size], frame_size)
            for i in range(0, len(signal), frame_size)
        ]
        return cls(frames, sample_rate, frame_size)

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def frame_size(self) -> int:
        return self._frame_size

    def start(self, callback: FrameCallback) -> bool:
        if self._running:
            logger.warning("Array input already running")
            return True
        self._callback = callback
        self._running = True
        timestamp = 0.0
        for frame in self._frames:
            if not self._running:
                break
            callback(_fit_frame(np.asarray(frame), self._frame_size), timestamp)
            timestamp += self._frame_size / self._sample_rate
        self._running = False
        return True

    def stop(self) -> None:
        self._running = False
        self._callback = None


class WavFileInput(AudioInputHandler):
    """Delivers frames read from a sound file on a background thread."""

    def __init__(
        self,
        file_path: str,
        frame_size: int = 2048,
        realtime: bool = True,
        loop: bool = False,
        gain: float = 1.0,
    ):
        """Open the file to learn its format.

        Args:
            file_path: Path to a file soundfile can read (WAV, FLAC, ...)
            frame_size: Samples per frame
            realtime: Pace frames at the file's sample rate
            loop: Restart from the beginning at end of file
            gain: Linear gain applied to every sample

        Raises:
            AudioInputError: If the file cannot be opened
        """
        super().__init__()
        self._file_path = file_path
        self._frame_size = frame_size
        self._realtime = realtime
        self._loop = loop
        self._gain = gain
        self._thread: Optional[threading.Thread] = None

        try:
            with sf.SoundFile(self._file_path) as f:
                self._sample_rate = f.samplerate
                self._channels = f.channels
        except (sf.SoundFileError, OSError) as e:
            raise AudioInputError(f"Could not open audio file {file_path}: {e}") from e

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def frame_size(self) -> int:
        return self._frame_size

    @property
    def channels(self) -> int:
        return self._channels

    def frames(self) -> Iterator[np.ndarray]:
        """Yield mono frames from the file, honouring loop and gain.

        An empty file yields nothing even when looping.
        """
        with sf.SoundFile(self._file_path) as f:
            yielded_since_seek = False
            while True:
                data = f.read(self._frame_size, dtype="float32", always_2d=True)
                if len(data) == 0:
                    if self._loop and yielded_since_seek:
                        f.seek(0)
                        yielded_since_seek = False
                        continue
                    break
                yielded_since_seek = True
                frame = _fit_frame(data, self._frame_size)
                if self._gain != 1.0:
                    frame *= self._gain
                yield frame

    def start(self, callback: FrameCallback) -> bool:
        if self._running:
            return True

        self._callback = callback
        self._running = True
        self._thread = threading.Thread(target=self._stream_data, daemon=True)
        self._thread.start()
        return True

    def stop(self) -> None:
        self._running = False
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._callback = None

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the file has been fully delivered."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def _stream_data(self) -> None:
        timestamp = 0.0
        frame_period = self._frame_size / self._sample_rate
        try:
            for frame in self.frames():
                callback = self._callback
                if not self._running or callback is None:
                    break
                callback(frame, timestamp)
                timestamp += frame_period
                if self._realtime:
                    time.sleep(frame_period)
        except Exception as e:
            logger.error(f"Error streaming {self._file_path}: {e}", exc_info=True)
        finally:
            self._running = False  # Ensure flag is reset on exit
