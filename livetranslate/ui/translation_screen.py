"""Terminal screen that drives a SessionController with single-key commands."""

import logging
import threading
from typing import Optional

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..errors import LiveTranslateError
from ..languages import SPEECH_LANGUAGES, TARGET_LANGUAGES, display_name, format_elapsed, next_language
from ..models.session import SessionStatus
from ..services.session_controller import Intent, SessionController
from .keyboard_input import KeyboardInputHandler

logger = logging.getLogger(__name__)

HELP_TEXT = "space/enter = start/stop   l = source language   t = target language   q = quit"

STATUS_STYLES = {
    SessionStatus.IDLE: ("STOPPED", "bold yellow"),
    SessionStatus.STARTING: ("STARTING", "bold cyan"),
    SessionStatus.ACTIVE: ("RECORDING", "bold red"),
    SessionStatus.STOPPING: ("STOPPING", "bold magenta"),
}


class TranslationScreen:
    """Live view of the transcript, elapsed time and language selection."""

    def __init__(self, controller: SessionController, console: Optional[Console] = None):
        self.controller = controller
        self.console = console or Console()
        self.message = ""
        self.quit_event = threading.Event()

    def handle_key(self, key: str) -> bool:
        """Apply one keypress. Returns False when the screen should close."""
        try:
            if key in (" ", "\r", "\n"):
                self.toggle_recording()
            elif key == "l":
                tag = next_language(self.controller.get_config().speech_language, SPEECH_LANGUAGES)
                self.controller.set_speech_language(tag)
                self.message = f"Source language: {display_name(tag)}"
            elif key == "t":
                tag = next_language(self.controller.get_config().target_language, TARGET_LANGUAGES)
                self.controller.set_target_language(tag)
                self.message = f"Target language: {display_name(tag)}"
            elif key in ("q", "\x03"):
                self.quit_event.set()
                return False
        except LiveTranslateError as e:
            logger.error(f"Command failed: {e}")
            self.message = f"Error: {e}"
        return True

    def toggle_recording(self) -> None:
        status = self.controller.get_status()
        if status is SessionStatus.IDLE:
            self.controller.start()
            self.message = "Starting..."
        elif status is SessionStatus.STOPPING and self.controller.pending_intent is not Intent.START:
            self.controller.start()
            self.message = "Start queued"
        else:
            self.controller.stop()
            self.message = "Stopping..."

    def build_view(self) -> Group:
        status = self.controller.get_status()
        config = self.controller.get_config()
        label, style = STATUS_STYLES[status]

        header = Table.grid(expand=True)
        header.add_column()
        header.add_column(justify="right")
        header.add_row(
            Text(label, style=style),
            Text(format_elapsed(self.controller.get_elapsed_seconds()), style="bold"),
        )
        header.add_row(
            f"{display_name(config.speech_language)} ({config.speech_language})",
            f"{display_name(config.target_language)} ({config.target_language})",
        )

        rendered = self.controller.get_rendered_transcript()
        transcript = Text(rendered) if rendered else Text("No speech yet", style="dim")
        footer = Text(HELP_TEXT, style="dim")
        if self.message:
            footer = Text.assemble((self.message + "\n", "italic"), footer)
        if self.controller.last_error:
            footer.append(f"\nLast error: {self.controller.last_error}", style="red")

        return Group(
            Panel(header, title="Live Translate", border_style="blue"),
            Panel(transcript, title="Speech Output", border_style="green"),
            Panel(footer, border_style="dim"),
        )

    def run(self, refresh_interval: float = 0.25) -> None:
        input_handler = KeyboardInputHandler(self.handle_key)
        input_handler.start()
        try:
            with Live(self.build_view(), console=self.console, refresh_per_second=4, screen=True) as live:
                while not self.quit_event.wait(refresh_interval):
                    live.update(self.build_view())
        finally:
            input_handler.stop()
