"""Unit tests for the terminal TranslationScreen."""

import pytest
from rich.console import Console

from livetranslate.models.session import SessionStatus
from livetranslate.ui.translation_screen import TranslationScreen


@pytest.fixture
def screen(controller):
    return TranslationScreen(controller, console=Console(record=True, width=100))


def render_text(screen):
    screen.console.print(screen.build_view())
    return screen.console.export_text()


@pytest.mark.unit
class TestTranslationScreen:

    def test_space_toggles_start_and_stop(self, screen, controller, fake_provider):
        assert screen.handle_key(" ") is True
        assert controller.get_status() is SessionStatus.STARTING

        fake_provider.emit_started(fake_provider.handles[0])
        screen.handle_key(" ")
        assert controller.get_status() is SessionStatus.STOPPING

    def test_toggle_while_stopping_queues_then_cancels_start(self, screen, controller, fake_provider):
        controller.start()
        fake_provider.emit_started(fake_provider.handles[0])
        controller.stop()

        screen.handle_key(" ")
        assert screen.message == "Start queued"

        screen.handle_key(" ")
        fake_provider.ack_stop(fake_provider.handles[0])
        assert controller.get_status() is SessionStatus.IDLE
        assert len(fake_provider.handles) == 1

    def test_language_keys_cycle_catalog(self, screen, controller):
        screen.handle_key("l")
        screen.handle_key("t")

        config = controller.get_config()
        assert config.speech_language == "ar-LB"
        assert config.target_language == "fr"

    def test_quit_key(self, screen):
        assert screen.handle_key("q") is False
        assert screen.quit_event.is_set()

    def test_errors_shown_not_raised(self, screen, token_source):
        token_source.fail = ConnectionError("down")

        assert screen.handle_key(" ") is True
        assert screen.message.startswith("Error:")

    def test_view_shows_status_timer_and_transcript(self, screen, controller, fake_provider, task_factory):
        controller.start()
        handle = fake_provider.handles[0]
        fake_provider.emit_started(handle)
        task_factory.latest("SessionTimer").fire(65)
        fake_provider.emit_final(handle, "hello", "hola")

        text = render_text(screen)

        assert "RECORDING" in text
        assert "01:05" in text
        assert "hello (Translated: hola)" in text
        assert "English (US)" in text
