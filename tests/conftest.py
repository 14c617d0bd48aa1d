import asyncio
from pathlib import Path
from typing import Dict, List, Tuple

import pytest


def page(message: str) -> str:
    """Wrap a message the way the puzzle site renders submission responses."""
    return (
        "<!DOCTYPE html><html><head><title>Day 1 - Advent of Code</title></head>"
        "<body><header><h1>Advent of Code</h1></header>"
        f"<main><article><p>{message}</p></article></main>"
        "</body></html>"
    )


ACCEPTED = page(
    "That's the right answer!  You are <span class=\"day-success\">one gold star</span> closer "
    "to restoring snow operations. <a href=\"/2023/day/1#part2\">[Continue to Part Two]</a>"
)
TOO_HIGH = page(
    "That's not the right answer; your answer is too high.  If you're stuck, make sure you're "
    "using the full input data. Please wait one minute before trying again. "
    "<a href=\"/2023/day/1\">[Return to Day 1]</a>"
)
TOO_LOW = page(
    "That's not the right answer; your answer is too low.  Please wait one minute before "
    "trying again. <a href=\"/2023/day/1\">[Return to Day 1]</a>"
)
INCORRECT = page(
    "That's not the right answer.  If you're stuck, make sure you're using the full input data; "
    "there are also some general tips on the <a href=\"/2023/about\">about page</a>. "
    "Please wait one minute before trying again."
)
TOO_SOON = page(
    "You gave an answer too recently; you have to wait after submitting an answer before trying "
    "again.  You have 58s left to wait. <a href=\"/2023/day/1\">[Return to Day 1]</a>"
)
ALREADY_SOLVED = page(
    "You don't seem to be solving the right level.  Did you already complete it? "
    "<a href=\"/2023/day/1\">[Return to Day 1]</a>"
)


class CountingFetcher:
    """Input fetcher stub that counts calls per day."""

    def __init__(self, inputs: Dict[Tuple[int, int], str] | None = None, delay: float = 0.0,
                 fail: Tuple[Tuple[int, int], ...] = ()):
        self.inputs = inputs or {}
        self.delay = delay
        self.fail = set(fail)
        self.calls: List[Tuple[int, int]] = []

    async def fetch_input(self, year: int, day: int) -> str:
        from aoc_runner.errors import TransportError

        self.calls.append((year, day))
        if self.delay:
            await asyncio.sleep(self.delay)
        if (year, day) in self.fail:
            raise TransportError(f"GET {year}/{day} returned 500", status_code=500)
        return self.inputs.get((year, day), f"input {year}-{day}")


class ScriptedSubmitter:
    """Submitter stub returning canned pages in order."""

    def __init__(self, *pages: str):
        self.pages = list(pages)
        self.calls: List[Tuple[int, int, int, str]] = []

    async def submit_answer(self, year: int, day: int, part: int, answer: str) -> str:
        self.calls.append((year, day, part, answer))
        return self.pages.pop(0)


class ExplodingSubmitter:
    """Submitter stub that must never be reached."""

    async def submit_answer(self, year: int, day: int, part: int, answer: str) -> str:
        raise AssertionError(f"submit_answer called with {answer!r}")


@pytest.fixture
def write_module(tmp_path: Path):
    """Write a solution module into the temp dir and return its path."""
    def _write(name: str, source: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source)
        return path
    return _write
