"""Unit tests for the language catalog helpers."""

import pytest

from livetranslate.languages import (
    SPEECH_LANGUAGES,
    TARGET_LANGUAGES,
    display_name,
    format_elapsed,
    next_language,
    validate_language_tag,
)


@pytest.mark.unit
class TestLanguages:

    @pytest.mark.parametrize("seconds,expected", [
        (0, "00:00"),
        (9, "00:09"),
        (61, "01:01"),
        (600, "10:00"),
        (3599, "59:59"),
    ])
    def test_format_elapsed(self, seconds, expected):
        assert format_elapsed(seconds) == expected

    def test_next_language_cycles(self):
        assert next_language("en-US", SPEECH_LANGUAGES) == "ar-LB"
        assert next_language("de-DE", SPEECH_LANGUAGES) == "en-US"
        assert next_language("zh-Hans", TARGET_LANGUAGES) == "es"

    def test_next_language_unknown_starts_at_first(self):
        assert next_language("xx-XX", TARGET_LANGUAGES) == "es"

    def test_display_name(self):
        assert display_name("de-DE") == "German"
        assert display_name("zh-Hans") == "Chinese (Simplified)"
        assert display_name("pt-BR") == "pt-BR"

    def test_validate_language_tag(self):
        assert validate_language_tag(" fr ") == "fr"
        with pytest.raises(ValueError):
            validate_language_tag("")
        with pytest.raises(ValueError):
            validate_language_tag(None)
