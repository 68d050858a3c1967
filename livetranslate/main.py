"""Main application entry point for live-translate."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from .auth.token_manager import TokenManager
from .auth.token_source import AbstractTokenSource, AzureIssueTokenSource, EndpointTokenSource
from .config import LiveTranslateConfig
from .languages import format_elapsed
from .providers.base import AbstractTranslationProvider
from .services.session_controller import SessionController

logger = logging.getLogger(__name__)


class TranslatorApp:
    """Wires configuration, credentials and the provider into a SessionController."""

    def __init__(self, config_path: str, log_level: Optional[str] = None):
        self.config = LiveTranslateConfig(config_path)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.console = Console()
        self.controller: Optional[SessionController] = None

    def init(self,
             speech_language: Optional[str] = None,
             target_language: Optional[str] = None,
             provider: Optional[AbstractTranslationProvider] = None) -> SessionController:
        logger.info("Initializing services...")

        session_config = self.config.get_session_config()
        if speech_language:
            session_config.speech_language = speech_language
        if target_language:
            session_config.target_language = target_language

        token_manager = TokenManager(
            self.create_token_source(),
            validity_seconds=self.config.get_token_validity_seconds(),
            refresh_margin_seconds=self.config.get_refresh_margin_seconds(),
        )
        if provider is None:
            from .providers.azure_translation import AzureTranslationProvider
            provider = AzureTranslationProvider()

        self.controller = SessionController(provider, token_manager, config=session_config)
        return self.controller

    def create_token_source(self) -> AbstractTokenSource:
        endpoint = self.config.get_token_endpoint()
        if endpoint:
            logger.info(f"Using token endpoint: {endpoint}")
            return EndpointTokenSource(endpoint)
        region = self.config.get_region()
        logger.info(f"Using issueToken endpoint for region: {region}")
        return AzureIssueTokenSource(self.config.get_subscription_key(), region)

    def run_auto(self, duration: int, settle_timeout: float = 10.0) -> str:
        """Start, translate for ``duration`` seconds, stop, and return the transcript."""
        controller = self.controller
        try:
            controller.start()
            time.sleep(duration)
            logger.info(f"Auto mode finished after {format_elapsed(controller.get_elapsed_seconds())}")
            controller.stop()
            deadline = time.time() + settle_timeout
            while controller.current_session_id is not None and time.time() < deadline:
                time.sleep(0.1)
            return controller.get_rendered_transcript()
        finally:
            self.cleanup()

    def run_interactive(self) -> None:
        from .ui.translation_screen import TranslationScreen
        try:
            TranslationScreen(self.controller, console=self.console).run()
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        if self.controller:
            self.controller.shutdown()


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/live_translate.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("live-translate starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="live-translate - Real-time speech translation",
        epilog="Interactive keys: space=start/stop, l=source language, t=target language, q=quit"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="live_translate.yaml",
        help="Path to configuration YAML file (default: live_translate.yaml)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )
    parser.add_argument(
        "--speech-language",
        type=str,
        help="Speech recognition locale, e.g. en-US (overrides config)"
    )
    parser.add_argument(
        "--target-language",
        type=str,
        help="Translation target locale, e.g. es (overrides config)"
    )
    parser.add_argument(
        "--auto",
        action="store_true",
        help="Run in automatic mode: start translating, run for the given duration, then stop and exit"
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=30,
        help="Duration in seconds for auto mode (default: 30)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="live-translate v0.1.0"
    )
    return parser


def main() -> None:
    """Main entry point for live-translate."""
    args = build_parser().parse_args()

    try:
        app = TranslatorApp(args.config, args.log_level)
        app.init(args.speech_language, args.target_language)
        if args.auto:
            transcript = app.run_auto(args.duration)
            app.console.rule("Transcript")
            app.console.print(transcript or "(no speech recognized)", markup=False)
        else:
            app.run_interactive()
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except Exception as e:
        print(f"Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
