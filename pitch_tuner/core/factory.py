"""Factory for creating pitch_tuner components."""

from typing import Optional, Dict, Callable

from ..errors import ConfigurationError
from ..logger import get_logger
from ..audio.frame_loop import FrameLoop
from ..audio.pitch_detector import PitchDetector
from ..audio.sources import WavFileInput
from ..note_types import NoteDefinition
from .config import ConfigManager
from .interfaces import IAudioInput

logger = get_logger(__name__)


def _sound_device_input(**kwargs) -> IAudioInput:
    # Imported here so nothing else requires PortAudio
    from ..audio.audio_input import SoundDeviceInput

    return SoundDeviceInput(**kwargs)


class ComponentFactory:
    """Factory for creating pitch_tuner components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

        self.audio_input_builders: Dict[str, Callable[..., IAudioInput]] = {
            "sounddevice": _sound_device_input,
        }

    def create_detector(self, **kwargs) -> PitchDetector:
        """Create a pitch detector from the detector configuration.

        Args:
            **kwargs: Overrides for min_floor, max_ceiling and trim_threshold
        """
        config = self.config_manager.get_config("detector")
        config.update(kwargs)
        return PitchDetector(
            min_floor=config["min_floor"],
            max_ceiling=config["max_ceiling"],
            trim_threshold=config["trim_threshold"],
        )

    def create_audio_input(self, implementation: str = "sounddevice", **kwargs) -> IAudioInput:
        """Create a live audio input.

        Args:
            implementation: Name of the registered implementation
            **kwargs: Overrides for the audio_input configuration

        Raises:
            ConfigurationError: If the implementation is not registered
        """
        if implementation not in self.audio_input_builders:
            raise ConfigurationError(f"Unknown audio input implementation: {implementation}")

        config = self.config_manager.get_config("audio_input")
        config.update({k: v for k, v in kwargs.items() if v is not None})
        _check_frame_size(config["frame_size"])

        instance = self.audio_input_builders[implementation](**config)
        logger.info(f"Created audio input: {implementation}")
        return instance

    def create_file_input(self, file_path: str, realtime: bool = False, **kwargs) -> WavFileInput:
        """Create a file input using the configured frame size."""
        frame_size = kwargs.pop("frame_size", None)
        if frame_size is None:
            frame_size = self.config_manager.get_config("audio_input")["frame_size"]
        _check_frame_size(frame_size)
        return WavFileInput(file_path, frame_size=frame_size, realtime=realtime, **kwargs)

    def create_frame_loop(
        self,
        audio_input: IAudioInput,
        target: Optional[NoteDefinition] = None,
    ) -> FrameLoop:
        """Create a frame loop over audio_input with the configured settings."""
        loop = FrameLoop(
            audio_input=audio_input,
            detector=self.create_detector(),
            settings=self.config_manager.tuner_settings(),
            target=target,
        )
        logger.info("Created frame loop")
        return loop


def _check_frame_size(frame_size: int) -> None:
    if not isinstance(frame_size, int) or frame_size < 3:
        raise ConfigurationError(f"Frame size must be an integer of at least 3, got {frame_size}")
