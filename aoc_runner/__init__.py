"""
aoc-runner - run, check and submit Advent of Code solutions.
"""

from .classifier import (
    Accepted,
    WrongAnswer,
    RateLimited,
    WrongLevel,
    Unrecognized,
    Direction,
    Vocabulary,
    SubmissionRecord,
    classify_response,
    classify_submission,
)
from .progress import Active, Solved, ProgressStore, PuzzlePart, GuardDecision, Verdict, check_answer
from .registry import SolutionHandle, SolutionRegistry
from .script_host import ScriptHost, LoadReport
from .orchestrator import Orchestrator, InputCache, RunReport, HandleOutcome, OutcomeKind

__version__ = "0.1.0"

__all__ = [
    "Accepted",
    "WrongAnswer",
    "RateLimited",
    "WrongLevel",
    "Unrecognized",
    "Direction",
    "Vocabulary",
    "SubmissionRecord",
    "classify_response",
    "classify_submission",
    "Active",
    "Solved",
    "ProgressStore",
    "PuzzlePart",
    "GuardDecision",
    "Verdict",
    "check_answer",
    "SolutionHandle",
    "SolutionRegistry",
    "ScriptHost",
    "LoadReport",
    "Orchestrator",
    "InputCache",
    "RunReport",
    "HandleOutcome",
    "OutcomeKind",
]
