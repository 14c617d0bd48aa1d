"""
Per-part progress tracking and the pre-submission guard.

Each puzzle part is either Active (still guessing, with whatever bounds the
service has told us about) or Solved. The transition function is pure; the
store holds the current state and the submission log for every part.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Tuple, Union

from .classifier import (
    Accepted,
    Classification,
    Direction,
    SubmissionRecord,
    WrongAnswer,
    record_from_dict,
    record_to_dict,
)
from .errors import AlreadySolvedError, StateInvariantViolation
from .utils import parse_int, validate_part

logger = logging.getLogger(__name__)


class PuzzlePart(NamedTuple):
    year: int
    day: int
    part: int

    def __str__(self) -> str:
        return f"{self.year} day {self.day} part {self.part}"


@dataclass(frozen=True)
class Active:
    lower_bound: Optional[int] = None
    upper_bound: Optional[int] = None
    tried_answers: frozenset = frozenset()


@dataclass(frozen=True)
class Solved:
    answer: str
    submitted_at: datetime


ProgressState = Union[Active, Solved]


class StateTransition(NamedTuple):
    state: ProgressState
    error: Optional[StateInvariantViolation] = None


def apply_classification(
    state: ProgressState,
    answer: str,
    classification: Classification,
    now: datetime | None = None,
) -> StateTransition:
    """
    Compute the state after the service classified ``answer``.

    A too high/too low verdict on an answer that is not an integer cannot
    narrow the bounds. The answer is still recorded as tried and the
    violation is returned alongside the new state for the caller to surface.
    """
    if isinstance(state, Solved):
        return StateTransition(state)

    if isinstance(classification, Accepted):
        return StateTransition(Solved(answer, now or datetime.now(timezone.utc)))

    if not isinstance(classification, WrongAnswer):
        # Rate limits, wrong level and unknown pages say nothing about the answer
        return StateTransition(state)

    tried = state.tried_answers | {answer}
    if classification.direction is Direction.UNSPECIFIED:
        return StateTransition(replace(state, tried_answers=tried))

    value = parse_int(answer)
    if value is None:
        error = StateInvariantViolation(
            f"Answer {answer!r} was {classification.direction.value.replace('_', ' ')} "
            f"but is not an integer"
        )
        return StateTransition(replace(state, tried_answers=tried), error)

    if classification.direction is Direction.TOO_HIGH:
        upper = value if state.upper_bound is None else min(state.upper_bound, value)
        return StateTransition(replace(state, upper_bound=upper, tried_answers=tried))

    lower = value if state.lower_bound is None else max(state.lower_bound, value)
    return StateTransition(replace(state, lower_bound=lower, tried_answers=tried))


# Guard

class Verdict(str, Enum):
    ALLOWED = "allowed"
    ALREADY_TRIED = "already_tried"
    BELOW_LOWER_BOUND = "below_lower_bound"
    ABOVE_UPPER_BOUND = "above_upper_bound"
    SOLVED_MATCH = "solved_match"
    SOLVED_MISMATCH = "solved_mismatch"


@dataclass(frozen=True)
class GuardDecision:
    verdict: Verdict
    bound: Optional[int] = None
    expected: Optional[str] = None

    @property
    def allowed(self) -> bool:
        return self.verdict is Verdict.ALLOWED

    @property
    def solved(self) -> bool:
        return self.verdict in (Verdict.SOLVED_MATCH, Verdict.SOLVED_MISMATCH)


def check_answer(state: ProgressState, answer: str, override: bool = False) -> GuardDecision:
    """
    Decide locally whether submitting ``answer`` could possibly be useful.

    Solved parts are only ever compared against the stored answer. For
    active parts, ``override`` disables the tried-answer and bound checks.
    Answers that are not integers skip the bound checks.
    """
    if isinstance(state, Solved):
        if answer == state.answer:
            return GuardDecision(Verdict.SOLVED_MATCH, expected=state.answer)
        return GuardDecision(Verdict.SOLVED_MISMATCH, expected=state.answer)

    if override:
        return GuardDecision(Verdict.ALLOWED)

    if answer in state.tried_answers:
        return GuardDecision(Verdict.ALREADY_TRIED)

    value = parse_int(answer)
    if value is not None:
        if state.lower_bound is not None and value < state.lower_bound:
            return GuardDecision(Verdict.BELOW_LOWER_BOUND, bound=state.lower_bound)
        if state.upper_bound is not None and value > state.upper_bound:
            return GuardDecision(Verdict.ABOVE_UPPER_BOUND, bound=state.upper_bound)

    return GuardDecision(Verdict.ALLOWED)


# Store

@dataclass
class PartProgress:
    state: ProgressState = field(default_factory=Active)
    submissions: List[SubmissionRecord] = field(default_factory=list)


class ProgressStore:
    """
    Holds the progress of every puzzle part seen so far.

    Parts are created lazily on first lookup. The only ways to change a
    part are ``record`` (a real submission) and the manual overrides
    ``set_solution`` / ``reset``.
    """

    def __init__(self, parts: Dict[PuzzlePart, PartProgress] | None = None):
        self._parts: Dict[PuzzlePart, PartProgress] = dict(parts or {})

    def _progress(self, key: PuzzlePart) -> PartProgress:
        validate_part(key.part)
        if key not in self._parts:
            self._parts[key] = PartProgress()
        return self._parts[key]

    def state(self, key: PuzzlePart) -> ProgressState:
        return self._progress(key).state

    def submissions(self, key: PuzzlePart) -> Tuple[SubmissionRecord, ...]:
        return tuple(self._progress(key).submissions)

    def check(self, key: PuzzlePart, answer: str, override: bool = False) -> GuardDecision:
        return check_answer(self.state(key), answer, override)

    def record(self, key: PuzzlePart, record: SubmissionRecord) -> ProgressState:
        """
        Log a submission and apply its classification.

        Raises:
            StateInvariantViolation: If a bound verdict came back for a
                non-integer answer. The record and tried answer are kept.
        """
        progress = self._progress(key)
        progress.submissions.append(record)
        transition = apply_classification(
            progress.state, record.answer, record.classification, record.timestamp
        )
        progress.state = transition.state
        if transition.error is not None:
            raise transition.error
        return progress.state

    def set_solution(self, key: PuzzlePart, answer: str, now: datetime | None = None) -> Solved:
        """Mark a part solved without submitting anything."""
        progress = self._progress(key)
        if isinstance(progress.state, Solved):
            raise AlreadySolvedError(
                f"{key} is already solved with {progress.state.answer!r}; reset it first"
            )
        record = SubmissionRecord(now or datetime.now(timezone.utc), answer, Accepted())
        progress.submissions.append(record)
        progress.state = Solved(answer, record.timestamp)
        logger.info("Marked %s as solved with %r", key, answer)
        return progress.state

    def reset(self, key: PuzzlePart) -> None:
        """Return a part to a fresh Active state. The submission log is kept."""
        progress = self._progress(key)
        progress.state = Active()
        logger.info("Reset %s", key)

    def __iter__(self) -> Iterator[Tuple[PuzzlePart, PartProgress]]:
        return iter(sorted(self._parts.items()))

    def __len__(self) -> int:
        return len(self._parts)


# Serialization used by the config file

def state_to_dict(state: ProgressState) -> Dict[str, Any]:
    if isinstance(state, Solved):
        return {"solved": {"answer": state.answer, "submitted_at": state.submitted_at.isoformat()}}
    return {
        "active": {
            "min": state.lower_bound,
            "max": state.upper_bound,
            "incorrect": sorted(state.tried_answers),
        }
    }


def state_from_dict(data: Dict[str, Any]) -> ProgressState:
    if "solved" in data:
        solved = data["solved"]
        return Solved(solved["answer"], datetime.fromisoformat(solved["submitted_at"]))
    active = data.get("active", {})
    return Active(
        lower_bound=active.get("min"),
        upper_bound=active.get("max"),
        tried_answers=frozenset(active.get("incorrect", [])),
    )


def part_to_dict(progress: PartProgress) -> Dict[str, Any]:
    return {
        "status": state_to_dict(progress.state),
        "submissions": [record_to_dict(r) for r in progress.submissions],
    }


def part_from_dict(data: Dict[str, Any]) -> PartProgress:
    return PartProgress(
        state=state_from_dict(data.get("status", {})),
        submissions=[record_from_dict(r) for r in data.get("submissions", [])],
    )
