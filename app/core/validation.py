"""Input checks shared by the registry, order chain and projector."""

from typing import Any

from app.core.errors import InvalidInput


def require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{field} must be a non-empty string")
    return value


def parse_quality(value: Any) -> int:
    """Accept a non-negative int, or a string of ASCII decimal digits."""
    if isinstance(value, bool):
        raise InvalidInput("quality must be a non-negative integer")
    if isinstance(value, int):
        if value < 0:
            raise InvalidInput("quality must be a non-negative integer")
        return value
    if isinstance(value, str):
        text = value.strip()
        if text and text.isascii() and text.isdigit():
            return int(text)
    raise InvalidInput("quality must be a non-negative integer")
