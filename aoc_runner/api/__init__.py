"""
Clients for the puzzle service.

Usage:
    from aoc_runner.api import AocClient

    async with AocClient(token) as client:
        text = await client.fetch_input(2023, 1)
"""

from .base import InputFetcher, AnswerSubmitter
from .client import AocClient, DEFAULT_BASE_URL

__all__ = [
    "AocClient",
    "DEFAULT_BASE_URL",
    "InputFetcher",
    "AnswerSubmitter",
]
