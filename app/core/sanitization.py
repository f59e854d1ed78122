"""Input sanitization utilities."""
import re
from typing import Optional

from app.core.constants import MAX_TEXT_FIELD_LENGTH


def sanitize_text(text: str, max_length: Optional[int] = None, strip_html: bool = True) -> str:
    """
    Sanitize text input to prevent XSS attacks.

    Strips HTML tags and normalizes whitespace. Output is not HTML-escaped;
    escaping is left to whatever renders the roster.

    Args:
        text: The input text to sanitize
        max_length: Optional maximum length to enforce
        strip_html: Whether to strip HTML tags (default True)

    Returns:
        Sanitized text with HTML tags removed and whitespace normalized

    Raises:
        ValueError: If text exceeds max_length or contains dangerous patterns
    """
    if not isinstance(text, str):
        raise ValueError("Input must be a string")

    sanitized = text.strip()

    # Enforce maximum length before processing to prevent length-based attacks
    if max_length and len(sanitized) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    if strip_html:
        sanitized = re.sub(r'<[^>]*>', '', sanitized)

    # Reject inputs that still contain HTML-like patterns after stripping
    if '<' in sanitized or '>' in sanitized:
        raise ValueError("Input contains invalid HTML-like patterns")

    sanitized = re.sub(r'\s+', ' ', sanitized)

    return sanitized


def sanitize_name(name: str) -> str:
    """Sanitize a required roster name."""
    sanitized = sanitize_text(name, max_length=MAX_TEXT_FIELD_LENGTH)

    if not sanitized:
        raise ValueError("Name cannot be empty")

    return sanitized


def sanitize_optional_text(value: Optional[str]) -> Optional[str]:
    """Sanitize an optional descriptive field; blank becomes None."""
    if value is None:
        return None
    sanitized = sanitize_text(value, max_length=MAX_TEXT_FIELD_LENGTH)
    return sanitized or None


def sanitize_record_id(record_id: Optional[str]) -> Optional[str]:
    """
    Normalize an identifier decoded from a QR code.

    Identifiers are opaque: uuid4 text for imported rosters, but pre-printed
    badges may carry any token, so content and length are not checked here.
    An identifier that matches no record is reported by the store as not
    found. Scanners often append a newline or pad with spaces, so surrounding
    whitespace is dropped. A missing or blank identifier is returned as-is
    (None or "") so the caller can report it as a missing field.

    Raises:
        ValueError: If the identifier is not a string
    """
    if record_id is None:
        return None

    if not isinstance(record_id, str):
        raise ValueError("Identifier must be a string")

    return record_id.strip()
