"""
Console output: status lines, progress bars, prompts and logging setup.
"""

from __future__ import annotations
import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TimeElapsedColumn,
)
from rich.prompt import Confirm
from rich.table import Table
from rich.text import Text

from ..classifier import Accepted, Direction, RateLimited, Unrecognized, WrongAnswer, WrongLevel
from ..orchestrator import HandleOutcome, OutcomeKind, RunReport
from ..progress import Verdict

INDENT = 12

console = Console(stderr=True, highlight=False)


class ActionType(str, Enum):
    SUCCESS = "bold bright_green"
    FAILURE = "bold bright_red"
    ERROR = "bold red"
    WARNING = "bold yellow"
    INFO = "bold blue"
    PROGRESS = "bold green"
    PREPARE = "green"


def setup_logging(verbose: int = 0, quiet: bool = False) -> None:
    """Route library logging through rich. -v for debug, -q for errors only."""
    if quiet:
        level = logging.ERROR
    elif verbose > 0:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose > 1, markup=False)],
        force=True,
    )


def println(action: str, action_type: ActionType, message: str = "") -> None:
    line = Text(action.rjust(INDENT), style=action_type.value)
    line.append(f" {message}")
    console.print(line)


def progress_bar() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


@contextmanager
def paused(progress: Optional[Progress]) -> Iterator[None]:
    if progress is not None:
        progress.stop()
    try:
        yield
    finally:
        if progress is not None:
            progress.start()


class Prompter:
    """Yes/no prompts that pause an active progress bar while asking."""

    def __init__(self, progress: Optional[Progress] = None, assume_yes: bool = False):
        self.progress = progress
        self.assume_yes = assume_yes

    def __call__(self, prompt: str) -> bool:
        if self.assume_yes:
            return True
        with paused(self.progress):
            return Confirm.ask(prompt, console=console)


def render_outcome(outcome: HandleOutcome) -> None:
    """Print the one-line status for a finished solution."""
    identifier = outcome.handle.identifier
    answer = outcome.answer
    kind = outcome.kind

    if kind is OutcomeKind.CORRECT:
        println("Solved", ActionType.SUCCESS, identifier)
    elif kind is OutcomeKind.INCORRECT:
        println("Incorrect", ActionType.FAILURE, f"{identifier}: {answer}, expected {outcome.decision.expected}")
    elif kind is OutcomeKind.REJECTED:
        decision = outcome.decision
        if decision.verdict is Verdict.ALREADY_TRIED:
            reason = "already tried"
        elif decision.verdict is Verdict.BELOW_LOWER_BOUND:
            reason = f"must be greater than {decision.bound}"
        else:
            reason = f"must be less than {decision.bound}"
        println("Incorrect", ActionType.FAILURE, f"{identifier}: {answer}, {reason}")
    elif kind in (OutcomeKind.RAN, OutcomeKind.DECLINED):
        println("Run", ActionType.SUCCESS, f"{identifier}: {answer}")
    elif kind in (OutcomeKind.FAILED, OutcomeKind.FETCH_FAILED):
        println("Skipped", ActionType.WARNING, identifier)
    elif kind is OutcomeKind.SUBMIT_FAILED:
        println("Error", ActionType.ERROR, f"{identifier}: could not submit {answer}: {outcome.error}")
    else:
        _render_submission(outcome)


def _render_submission(outcome: HandleOutcome) -> None:
    identifier = outcome.handle.identifier
    answer = outcome.answer
    result = outcome.classification

    if isinstance(result, Accepted):
        println("Solved", ActionType.SUCCESS, identifier)
    elif isinstance(result, WrongAnswer):
        if result.direction is Direction.TOO_HIGH:
            println("Incorrect", ActionType.FAILURE, f"{identifier}: {answer}, too high")
        elif result.direction is Direction.TOO_LOW:
            println("Incorrect", ActionType.FAILURE, f"{identifier}: {answer}, too low")
        else:
            println("Incorrect", ActionType.FAILURE, f"{identifier}: {answer}")
    elif isinstance(result, RateLimited):
        println(
            "Too Soon", ActionType.ERROR,
            f"{identifier}: You have submitted too recently, please retry in {result.wait}",
        )
    elif isinstance(result, WrongLevel):
        println("Invalid", ActionType.ERROR, f"{identifier}: You don't seem to be solving the right level")
    elif isinstance(result, Unrecognized):
        println("Unknown", ActionType.ERROR, f"{identifier}: {result.raw_text.strip()}")


def render_summary(report: RunReport) -> None:
    """Table of outcome counts, shown after runs with more than one solution."""
    counts = report.counts
    if sum(counts.values()) < 2 and not report.import_failures:
        return
    table = Table("Outcome", "Count", title="Run summary")
    if report.import_failures:
        table.add_row("import failed", str(report.import_failures))
    for kind in OutcomeKind:
        if counts[kind]:
            table.add_row(kind.value.replace("_", " "), str(counts[kind]))
    console.print(table)
