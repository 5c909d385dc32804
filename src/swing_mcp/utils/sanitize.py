"""Text sanitization utilities."""

import re

MAX_CONTEXT_WORDS = 50
TRUNCATION_MARKER = "..."


def sanitize_text(text: str | None, max_length: int = 500) -> str | None:
    """
    Sanitize untrusted text fields.

    Removes control characters and truncates to max_length.
    Apply to: provider explanations, any free-text field.

    Args:
        text: Text to sanitize (may be None)
        max_length: Maximum length before truncation

    Returns:
        Sanitized text or None if input was None
    """
    if text is None:
        return None

    # Newlines and tabs become spaces so word boundaries survive
    text = re.sub(r"[\n\t]", " ", text)

    # Remove remaining control characters (\r, \x00-\x1f, \x7f-\x9f)
    text = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", text)

    # Truncate if needed
    if len(text) > max_length:
        text = text[:max_length] + TRUNCATION_MARKER

    return text.strip()


def truncate_words(text: str, max_words: int = MAX_CONTEXT_WORDS) -> str:
    """
    Cap text at max_words whitespace-separated words.

    Longer text keeps its first max_words words, joined by single spaces,
    followed by the truncation marker. Shorter text is returned unchanged.
    """
    words = text.split()
    if len(words) > max_words:
        return " ".join(words[:max_words]) + TRUNCATION_MARKER
    return text
