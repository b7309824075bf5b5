"""Live audio capture through sounddevice."""

from __future__ import annotations
import time
from typing import Optional, Dict, Any, Tuple, ClassVar, List

import numpy as np
import sounddevice as sd

from ..errors import AudioInputError
from ..logger import get_logger
from ..core.interfaces import FrameCallback
from .sources import AudioInputHandler

logger = get_logger(__name__)


def list_input_devices() -> List[Dict[str, Any]]:
    """Return the devices that can capture audio, with their index."""
    devices = []
    for device_id, device in enumerate(sd.query_devices()):
        if device["max_input_channels"] > 0:
            devices.append(
                {
                    "id": device_id,
                    "name": device["name"],
                    "channels": device["max_input_channels"],
                    "default_samplerate": device["default_samplerate"],
                }
            )
    return devices


def find_input_device(name_hint: str) -> Tuple[Optional[int], Optional[Dict[str, Any]]]:
    """Find the first input device whose name contains name_hint.

    Returns:
        A tuple of (device_id, device_info) if found, (None, None) otherwise
    """
    for device in list_input_devices():
        if name_hint.lower() in device["name"].lower():
            logger.info(f"Found input device: {device['name']}")
            return device["id"], device
    return None, None


class SoundDeviceInput(AudioInputHandler):
    """Delivers fixed-size mono frames from a sounddevice input stream."""

    # Audio configuration
    SAMPLE_RATE: ClassVar[int] = 44100  # Hz
    FRAME_SIZE: ClassVar[int] = 2048  # Samples per delivered frame
    CHANNELS: ClassVar[int] = 1  # Mono audio
    FALLBACK_RATES: ClassVar[List[int]] = [48000, 44100, 22050, 16000]

    def __init__(
        self,
        device_id: Optional[int] = None,
        sample_rate: Optional[int] = None,
        frame_size: Optional[int] = None,
        channels: Optional[int] = None,
    ) -> None:
        """Initialize the audio input handler.

        Args:
            device_id: Audio input device ID, or None for the default input device
            sample_rate: Preferred sample rate in Hz, or None for default (44100)
            frame_size: Samples per frame, or None for default (2048)
            channels: Number of captured channels, or None for default (1)
        """
        super().__init__()
        self._device_id = device_id
        self._sample_rate = sample_rate or self.SAMPLE_RATE
        self._frame_size = frame_size or self.FRAME_SIZE
        self._channels = channels or self.CHANNELS
        self._stream: Optional[sd.InputStream] = None

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def frame_size(self) -> int:
        return self._frame_size

    def _audio_callback(
        self,
        indata: np.ndarray,
        _frames: int,
        _time_info: dict,
        status: sd.CallbackFlags,
    ) -> None:
        """Callback for processing audio data from the input stream.

        Note:
            This is called from the PortAudio thread, so it should be fast
            and avoid any blocking operations to prevent audio glitches.
        """
        if status:
            logger.warning(f"Audio callback status: {status}")

        callback = self._callback
        if self._running and callback:
            # First channel only, copied because PortAudio reuses indata
            frame = indata[:, 0].copy() if indata.ndim > 1 else indata.copy()
            callback(frame, time.time())

    def start(self, callback: FrameCallback) -> bool:
        """Open the input stream and start delivering frames.

        Tries the configured sample rate first, then common fallbacks.

        Raises:
            AudioInputError: If no sample rate could be opened
        """
        if self._running:
            logger.warning("Audio input already running")
            return True

        self._callback = callback

        rates_to_try = [self._sample_rate] + [
            rate for rate in self.FALLBACK_RATES if rate != self._sample_rate
        ]
        errors = []
        for rate in rates_to_try:
            try:
                logger.info(f"Trying to start audio input with sample rate: {rate} Hz")
                stream = sd.InputStream(
                    device=self._device_id,
                    samplerate=rate,
                    blocksize=self._frame_size,
                    channels=self._channels,
                    dtype="float32",
                    callback=self._audio_callback,
                )
            except sd.PortAudioError as e:
                logger.warning(f"Failed to open audio input at {rate} Hz: {e}")
                errors.append(f"{rate} Hz: {e}")
                continue

            self._sample_rate = rate
            self._stream = stream
            self._running = True
            try:
                stream.start()
            except sd.PortAudioError as e:
                self._running = False
                self._stream = None
                stream.close()
                raise AudioInputError(f"Could not start audio input: {e}") from e
            logger.info(f"Audio input started with sample rate {rate} Hz")
            return True

        self._callback = None
        raise AudioInputError(
            "Could not start audio input with any sample rate: " + "; ".join(errors)
        )

    def stop(self) -> None:
        """Stop capturing audio and close the stream."""
        if not self._running and self._stream is None:
            return

        self._running = False
        stream, self._stream = self._stream, None
        self._callback = None
        if stream is not None:
            try:
                stream.stop()
            finally:
                stream.close()
        logger.info("Audio input stopped")
