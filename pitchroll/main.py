"""Main application entry point for PitchRoll."""

import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from pitchroll.config import PitchRollConfig, PitchSettings
from pitchroll.errors import PitchRollError
from pitchroll.pitch.publisher import PitchPublisher
from pitchroll.services.session_manager import SessionManager
from pitchroll.ui.summary import PitchSummaryPrinter

logger = logging.getLogger(__name__)

PITCH_TOPIC = "pitch.events"


class Server:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        # Load configuration
        self.config = PitchRollConfig(config_path)
        # Set up logging (command line overrides config)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.settings = PitchSettings.from_config(self.config)
        self.session_manager: Optional[SessionManager] = None
        self.summary: Optional[PitchSummaryPrinter] = None
        self.cleaned_up = False

    def init(self, live_display: bool = True):
        logger.info("Initializing services...")
        logger.info(f"Audio settings: {self.settings.sample_rate}Hz, "
                    f"{self.settings.chunk_size} samples/chunk")
        logger.info(f"Pitch settings: N={self.settings.frame_length}, H={self.settings.hop_length}, "
                    f"threshold={self.settings.threshold}, band "
                    f"{self.settings.min_frequency}-{self.settings.max_frequency}Hz")
        logger.info(f"Per-frame budget: {self.settings.hop_seconds * 1000:.1f}ms")

        self.pitch_publisher = PitchPublisher(PITCH_TOPIC)
        self.summary = PitchSummaryPrinter(PITCH_TOPIC, live=live_display)
        self.session_manager = SessionManager(self.settings, self.pitch_publisher.get_callback())

    def run_live(self, duration: Optional[float]):
        session = self.session_manager.start_live()
        try:
            if duration:
                session.wait(duration)
            else:
                while not session.wait(1.0):
                    pass
        finally:
            self.cleanup()

    def run_file(self, path: str):
        try:
            session = self.session_manager.analyze(path)
            stats = session.info.stats
            logger.info(f"Analysis complete: {stats.events_accepted} events from "
                        f"{stats.frames_processed} frames")
        finally:
            self.cleanup()

    def cleanup(self):
        if self.cleaned_up:
            return
        self.cleaned_up = True
        if self.session_manager:
            self.session_manager.stop()
        if self.summary:
            self.summary.shutdown()


def setup_logging(config: PitchRollConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/pitchroll.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("PitchRoll starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for PitchRoll."""
    parser = argparse.ArgumentParser(
        description="PitchRoll - Real-time pitch detection and note timeline",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--duration",
        type=float,
        default=10,
        help="Seconds to listen to the microphone (default: 10, capped by session limit)"
    )
    source.add_argument(
        "--file",
        type=str,
        help="Analyse a WAV file instead of the microphone"
    )

    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not print notes as they are detected"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="PitchRoll v0.1.0"
    )

    args = parser.parse_args()

    server = None
    try:
        server = Server(args.config, args.log_level)
        server.init(live_display=not args.quiet and not args.file)
        if args.file:
            server.run_file(args.file)
        else:
            server.run_live(args.duration)
    except KeyboardInterrupt:
        if server:
            server.cleanup()
        print("\nGoodbye!")
    except (PitchRollError, OSError, ValueError) as e:
        print(f"Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
