"""Language catalog and display helpers."""

from typing import Dict, List

# Locale tags offered for speech recognition
SPEECH_LANGUAGES: Dict[str, str] = {
    "en-US": "English (US)",
    "ar-LB": "Arabic (Lebanon)",
    "zh-CN": "Chinese (Simplified)",
    "de-DE": "German",
}

# Locale tags offered as translation targets
TARGET_LANGUAGES: Dict[str, str] = {
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "zh-Hans": "Chinese (Simplified)",
}


def validate_language_tag(tag: str) -> str:
    """Return the stripped tag, rejecting empty values."""
    if not isinstance(tag, str) or not tag.strip():
        raise ValueError(f"Invalid language tag: {tag!r}")
    return tag.strip()


def next_language(current: str, catalog: Dict[str, str]) -> str:
    """Cycle to the catalog entry after ``current`` (first entry if unknown)."""
    tags: List[str] = list(catalog)
    if current not in catalog:
        return tags[0]
    return tags[(tags.index(current) + 1) % len(tags)]


def display_name(tag: str) -> str:
    return SPEECH_LANGUAGES.get(tag) or TARGET_LANGUAGES.get(tag) or tag


def format_elapsed(seconds: int) -> str:
    """Render elapsed seconds as MM:SS."""
    minutes, secs = divmod(max(int(seconds), 0), 60)
    return f"{minutes:02d}:{secs:02d}"
