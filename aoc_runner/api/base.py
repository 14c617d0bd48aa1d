from __future__ import annotations
from typing import Protocol


class InputFetcher(Protocol):
    """Anything that can retrieve a day's puzzle input."""

    async def fetch_input(self, year: int, day: int) -> str:
        """
        Fetch the puzzle input for one day.

        Args:
            year: Event year
            day: Day of the event (1-25)

        Returns:
            The raw input text

        Raises:
            TransportError: If the request fails
        """
        ...


class AnswerSubmitter(Protocol):
    """Anything that can submit an answer and return the response page."""

    async def submit_answer(self, year: int, day: int, part: int, answer: str) -> str:
        """
        Submit an answer for one part.

        Args:
            year: Event year
            day: Day of the event
            part: 1 or 2
            answer: Candidate answer, already converted to text

        Returns:
            The raw HTML confirmation page

        Raises:
            TransportError: If the request fails
        """
        ...
