"""
Utility functions for answers and puzzle coordinates.
"""

import re
from typing import Optional

_INTEGER = re.compile(r"[+-]?\d+")


def parse_int(answer: str) -> Optional[int]:
    """
    Parse an answer as a plain integer.
    Returns None for anything else (floats, words, underscores, empty).
    """
    text = answer.strip()
    if not _INTEGER.fullmatch(text):
        return None
    return int(text)


def validate_part(part: int) -> int:
    """Check that a part number is 1 or 2."""
    if part not in (1, 2):
        raise ValueError(f"Invalid part number: {part}, expected 1 or 2")
    return part


def plural(count: int, word: str) -> str:
    """Format a count with a naively pluralised noun."""
    return f"{count} {word}{'' if count == 1 else 's'}"


def puzzle_url(base_url: str, year: int, day: int) -> str:
    """URL of a day's puzzle page."""
    return f"{base_url.rstrip('/')}/{year}/day/{day}"
