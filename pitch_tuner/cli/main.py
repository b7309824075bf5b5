"""Main entry point for the pitch_tuner CLI."""

import argparse
import sys
import time
from collections import Counter
from typing import List, Optional

from ..core.config import ConfigManager
from ..core.factory import ComponentFactory
from ..errors import PitchTunerError
from ..logger import get_logger
from ..logging_config import setup_logging
from ..audio.frame_loop import is_in_tune
from ..note_types import DetectedPitch, NoteDefinition
from ..tunings import Tunings

logger = get_logger(__name__)


def format_pitch(pitch: Optional[DetectedPitch]) -> str:
    """One-line rendering of a reading, '--' for no pitch."""
    if pitch is None:
        return "--"
    marker = "  *" if is_in_tune(pitch) else ""
    return (
        f"{pitch.note + str(pitch.octave):<4} {pitch.frequency:8.2f} Hz "
        f"{pitch.deviation:+7.1f} cents  clarity {pitch.clarity:.2f}{marker}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pitch-tuner", description="Monophonic pitch detection for instrument tuning"
    )
    parser.add_argument("--config", type=str, default=None, help="JSON configuration file")
    parser.add_argument(
        "--sensitivity", type=float, default=None, help="Noise gate sensitivity in (0, 1]"
    )
    parser.add_argument("--a4", type=float, default=None, help="A4 reference in Hz (415-466)")
    parser.add_argument(
        "--frame-size", type=int, default=None, help="Samples per analysed frame"
    )
    parser.add_argument(
        "--instrument",
        choices=Tunings.instruments(),
        default=None,
        help="Instrument for manual string mode",
    )
    parser.add_argument("--tuning", type=str, default=None, help="Tuning name, e.g. 'Drop D'")
    parser.add_argument(
        "--string",
        type=int,
        default=None,
        help="String index (0 = lowest) to tune against instead of the nearest note",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    listen_parser = subparsers.add_parser("listen", help="Detect pitch from an input device")
    listen_parser.add_argument(
        "--duration", type=float, default=10.0, help="Listening time in seconds"
    )
    listen_parser.add_argument("--device", type=int, default=None, help="Audio input device ID")
    listen_parser.add_argument(
        "--sample-rate", type=int, default=None, help="Preferred sample rate in Hz"
    )

    file_parser = subparsers.add_parser("file", help="Detect pitch frame by frame in a sound file")
    file_parser.add_argument("path", type=str, help="Path to a WAV/FLAC file")
    file_parser.add_argument(
        "--realtime", action="store_true", help="Pace frames at the file's sample rate"
    )

    subparsers.add_parser("devices", help="List audio input devices")

    return parser


def _config_from_args(args: argparse.Namespace) -> ConfigManager:
    config = ConfigManager(args.config)
    detector_updates = {"sensitivity": args.sensitivity, "a4_reference": args.a4}
    config.update_config(
        "detector", {k: v for k, v in detector_updates.items() if v is not None}
    )
    if args.frame_size is not None:
        config.update_config("audio_input", {"frame_size": args.frame_size})
    # Validates sensitivity and A4 up front
    config.tuner_settings()
    return config


def _target_from_args(args: argparse.Namespace, a4: float) -> Optional[NoteDefinition]:
    if args.string is None:
        return None
    tuning = Tunings.get_tuning(args.instrument or "guitar", args.tuning)
    return Tunings.get_string(tuning, args.string, a4)


def run_listen(args: argparse.Namespace, factory: ComponentFactory) -> int:
    settings = factory.config_manager.tuner_settings()
    target = _target_from_args(args, settings.a4_reference)
    audio_input = factory.create_audio_input(device_id=args.device, sample_rate=args.sample_rate)
    loop = factory.create_frame_loop(audio_input, target=target)

    if target is not None:
        print(f"Tuning against {target.name} ({target.frequency:.2f} Hz)")

    def sink(pitch: Optional[DetectedPitch]) -> None:
        if pitch is not None:
            print(format_pitch(pitch), flush=True)

    logger.info(f"Listening for {args.duration} seconds...")
    loop.start(sink)
    try:
        time.sleep(args.duration)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        loop.stop()
    return 0


def run_file(args: argparse.Namespace, factory: ComponentFactory) -> int:
    settings = factory.config_manager.tuner_settings()
    target = _target_from_args(args, settings.a4_reference)
    audio_input = factory.create_file_input(args.path, realtime=args.realtime)
    loop = factory.create_frame_loop(audio_input, target=target)

    readings: List[Optional[DetectedPitch]] = []
    frame_period = audio_input.frame_size / audio_input.sample_rate

    def sink(pitch: Optional[DetectedPitch]) -> None:
        print(f"{len(readings) * frame_period:7.3f}s  {format_pitch(pitch)}")
        readings.append(pitch)

    loop.start(sink)
    try:
        audio_input.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        loop.stop()

    detected = [p for p in readings if p is not None]
    print(f"{len(detected)}/{len(readings)} frames with pitch")
    note_counts = Counter(f"{p.note}{p.octave}" for p in detected)
    for note_name, count in note_counts.most_common():
        print(f"  {note_name}: {count} frames")
    return 0


def run_devices() -> int:
    from ..audio.audio_input import list_input_devices

    for device in list_input_devices():
        print(
            f"Device {device['id']}: {device['name']} "
            f"({device['channels']} ch, {device['default_samplerate']:.0f} Hz)"
        )
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)
    if parsed_args.string is None and (parsed_args.instrument or parsed_args.tuning):
        parser.error("--instrument and --tuning require --string")

    setup_logging(level="DEBUG" if parsed_args.debug else None)

    if parsed_args.command is None:
        parser.print_help()
        return 1

    try:
        if parsed_args.command == "devices":
            return run_devices()
        factory = ComponentFactory(_config_from_args(parsed_args))
        if parsed_args.command == "listen":
            return run_listen(parsed_args, factory)
        return run_file(parsed_args, factory)
    except PitchTunerError as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
