"""
Registry of solution functions.

Solution modules register functions through the ``solution`` decorator:

    @aoc.solution(2023, 1, 1)
    def trebuchet(data):
        ...

Registration only happens while modules are being loaded. After that the
registry is frozen and only queried.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional

from .errors import RegistryFrozenError
from .utils import validate_part


@dataclass(frozen=True)
class SolutionHandle:
    """One registered solution. Several handles may share coordinates."""
    year: int
    day: int
    part: int
    function: Callable[[str], Any]

    @property
    def name(self) -> str:
        return getattr(self.function, "__name__", repr(self.function))

    @property
    def identifier(self) -> str:
        return f"{self.year} day {self.day} part {self.part} ({self.name})"


class SolutionRegistry:
    """Ordered collection of solution handles, filled during loading."""

    def __init__(self):
        self._handles: List[SolutionHandle] = []
        self._frozen = False

    def register(self, year: int, day: int, part: int, function: Callable[[str], Any]) -> SolutionHandle:
        if self._frozen:
            raise RegistryFrozenError("Solutions can only be registered while loading")
        validate_part(part)
        if not callable(function):
            raise TypeError(f"Solution for {year} day {day} part {part} is not callable")
        handle = SolutionHandle(year, day, part, function)
        self._handles.append(handle)
        return handle

    def solution(self, year: int, day: int, part: int):
        """Decorator form of ``register``. Part is checked immediately."""
        validate_part(part)

        def decorator(function):
            self.register(year, day, part, function)
            return function

        return decorator

    def truncate(self, length: int) -> None:
        """Drop handles registered after the first ``length``. Load phase only."""
        if self._frozen:
            raise RegistryFrozenError("Cannot remove solutions after loading")
        del self._handles[length:]

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def select(
        self,
        year: Optional[int] = None,
        day: Optional[int] = None,
        part: Optional[int] = None,
    ) -> List[SolutionHandle]:
        """Handles matching every given filter, in registration order."""
        return [
            h for h in self._handles
            if (year is None or h.year == year)
            and (day is None or h.day == day)
            and (part is None or h.part == part)
        ]

    def __iter__(self) -> Iterator[SolutionHandle]:
        return iter(list(self._handles))

    def __len__(self) -> int:
        return len(self._handles)
