"""
Running registered solutions against puzzle inputs.

Inputs are fetched concurrently, one request per (year, day) no matter how
many solutions need it. Solutions run strictly one after another through the
script host. Each answer then goes through the guard and, if requested, to
the service; the response updates the progress store.
"""

from __future__ import annotations
import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .api.base import AnswerSubmitter, InputFetcher
from .classifier import (
    DEFAULT_VOCABULARY,
    Classification,
    SubmissionRecord,
    Vocabulary,
    classify_submission,
    describe,
)
from .errors import AocError, RunFailedError, ScriptExecutionError, StateInvariantViolation, TransportError
from .progress import GuardDecision, ProgressStore, PuzzlePart, Verdict
from .registry import SolutionHandle, SolutionRegistry
from .script_host import LoadReport, ScriptHost
from .utils import plural

logger = logging.getLogger(__name__)

DayKey = Tuple[int, int]


class InputCache:
    """
    Read-through cache of puzzle inputs.

    Concurrent requests for the same day share one in-flight fetch. A key is
    written at most once. A failed fetch is not retried until the run ends
    with ``close``; the next run fetches that day again.
    """

    def __init__(self, fetcher: InputFetcher, inputs: Mapping[DayKey, str] | None = None):
        self._fetcher = fetcher
        self._inputs: Dict[DayKey, str] = dict(inputs or {})
        self._pending: Dict[DayKey, asyncio.Task] = {}
        self.new_inputs: Dict[DayKey, str] = {}

    async def _fetch(self, key: DayKey) -> str:
        year, day = key
        logger.debug("Fetching input for %d day %d", year, day)
        text = await self._fetcher.fetch_input(year, day)
        if key not in self._inputs:
            self._inputs[key] = text
            self.new_inputs[key] = text
        return self._inputs[key]

    def _task(self, key: DayKey) -> asyncio.Task:
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(key))
            self._pending[key] = task
        return task

    def prefetch(self, keys: Iterable[DayKey]) -> None:
        """Start fetching every uncached key without waiting."""
        for key in keys:
            if key not in self._inputs:
                self._task(key)

    async def get(self, year: int, day: int) -> str:
        key = (year, day)
        if key in self._inputs:
            return self._inputs[key]
        return await self._task(key)

    async def close(self) -> None:
        """Cancel fetches nobody waited for and forget this run's tasks."""
        tasks = list(self._pending.values())
        self._pending.clear()
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


class OutcomeKind(str, Enum):
    RAN = "ran"
    DECLINED = "declined"
    REJECTED = "rejected"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    SUBMITTED = "submitted"
    FAILED = "failed"
    FETCH_FAILED = "fetch_failed"
    SUBMIT_FAILED = "submit_failed"


# Outcomes where the solution produced no answer
FAILURE_KINDS = frozenset({OutcomeKind.FAILED, OutcomeKind.FETCH_FAILED})


@dataclass
class HandleOutcome:
    handle: SolutionHandle
    kind: OutcomeKind
    answer: Optional[str] = None
    decision: Optional[GuardDecision] = None
    record: Optional[SubmissionRecord] = None
    error: Optional[AocError] = None

    @property
    def key(self) -> PuzzlePart:
        return PuzzlePart(self.handle.year, self.handle.day, self.handle.part)

    @property
    def classification(self) -> Optional[Classification]:
        return self.record.classification if self.record else None

    @property
    def failed(self) -> bool:
        return self.kind in FAILURE_KINDS


@dataclass
class RunReport:
    outcomes: List[HandleOutcome] = field(default_factory=list)
    import_failures: int = 0
    new_inputs: Dict[DayKey, str] = field(default_factory=dict)

    @property
    def counts(self) -> Counter:
        return Counter(o.kind for o in self.outcomes)

    @property
    def failures(self) -> int:
        return self.counts[OutcomeKind.FAILED]

    @property
    def fetch_failures(self) -> int:
        return self.counts[OutcomeKind.FETCH_FAILED]

    @property
    def skips(self) -> int:
        """Handles that produced no answer."""
        return self.failures + self.fetch_failures

    @property
    def all_failed(self) -> bool:
        return bool(self.outcomes) and all(o.failed for o in self.outcomes)

    def summary(self) -> List[str]:
        lines = []
        if self.import_failures:
            lines.append(f"{plural(self.import_failures, 'solution file')} failed to import")
        if self.failures:
            lines.append(f"{plural(self.failures, 'solution')} failed")
        if self.fetch_failures:
            lines.append(f"{plural(self.fetch_failures, 'solution')} skipped, input could not be fetched")
        submit_failures = self.counts[OutcomeKind.SUBMIT_FAILED]
        if submit_failures:
            lines.append(f"{plural(submit_failures, 'submission')} failed")
        return lines


class Orchestrator:
    """
    Ties the registry, script host, input cache, guard and progress store
    together for one run.
    """

    def __init__(
        self,
        host: ScriptHost,
        fetcher: InputFetcher,
        store: ProgressStore,
        submitter: AnswerSubmitter | None = None,
        registry: SolutionRegistry | None = None,
        inputs: Mapping[DayKey, str] | None = None,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
        confirm: Callable[[str], bool] | None = None,
        on_outcome: Callable[[HandleOutcome], None] | None = None,
        load_report: LoadReport | None = None,
    ):
        self.host = host
        self.registry = registry if registry is not None else host.registry
        self.cache = InputCache(fetcher, inputs)
        self.store = store
        self.submitter = submitter
        self.vocabulary = vocabulary
        self.confirm = confirm
        self.on_outcome = on_outcome
        self.load_report = load_report

    async def run(
        self,
        year: Optional[int] = None,
        day: Optional[int] = None,
        part: Optional[int] = None,
        submit: bool = False,
        override_safety: bool = False,
    ) -> RunReport:
        """
        Run every matching solution in registration order.

        Returns:
            RunReport with one outcome per selected solution, in order

        Raises:
            ClassificationError: If a submission response could not be parsed
            RunFailedError: If every selected solution failed
        """
        if submit and self.submitter is None:
            raise ValueError("Submitting requires an answer submitter")

        handles = self.registry.select(year, day, part)
        report = RunReport(import_failures=self.load_report.failure_count if self.load_report else 0)
        logger.debug("Selected %s", plural(len(handles), "solution"))

        self.cache.prefetch(dict.fromkeys((h.year, h.day) for h in handles))
        try:
            for handle in handles:
                outcome = await self._run_handle(handle, submit, override_safety)
                report.outcomes.append(outcome)
                if self.on_outcome is not None:
                    self.on_outcome(outcome)
        finally:
            await self.cache.close()
            report.new_inputs = dict(self.cache.new_inputs)

        for line in report.summary():
            logger.warning(line)
        if report.all_failed:
            raise RunFailedError(f"All {plural(len(handles), 'selected solution')} failed", report)
        return report

    async def _run_handle(self, handle: SolutionHandle, submit: bool, override: bool) -> HandleOutcome:
        try:
            text = await self.cache.get(handle.year, handle.day)
        except TransportError as e:
            logger.error("%s: Failed to fetch input: %s", handle.identifier, e)
            return HandleOutcome(handle, OutcomeKind.FETCH_FAILED, error=e)

        try:
            answer = await self.host.invoke_handle(handle, text)
        except ScriptExecutionError as e:
            logger.error("%s\n\n%s", e, e.details)
            return HandleOutcome(handle, OutcomeKind.FAILED, error=e)

        return await self._handle_answer(handle, answer, submit, override)

    async def _handle_answer(self, handle: SolutionHandle, answer: str, submit: bool, override: bool) -> HandleOutcome:
        key = PuzzlePart(handle.year, handle.day, handle.part)
        decision = self.store.check(key, answer, override)

        if decision.verdict is Verdict.SOLVED_MATCH:
            return HandleOutcome(handle, OutcomeKind.CORRECT, answer, decision)
        if decision.verdict is Verdict.SOLVED_MISMATCH:
            return HandleOutcome(handle, OutcomeKind.INCORRECT, answer, decision)
        if not decision.allowed:
            return HandleOutcome(handle, OutcomeKind.REJECTED, answer, decision)
        if not submit:
            return HandleOutcome(handle, OutcomeKind.RAN, answer, decision)

        if self.confirm is not None:
            prompt = f"Submit {answer} for {handle.identifier}?"
            if not await asyncio.to_thread(self.confirm, prompt):
                return HandleOutcome(handle, OutcomeKind.DECLINED, answer, decision)

        try:
            html = await self.submitter.submit_answer(key.year, key.day, key.part, answer)
        except TransportError as e:
            logger.error("%s: Failed to submit %r: %s", handle.identifier, answer, e)
            return HandleOutcome(handle, OutcomeKind.SUBMIT_FAILED, answer, decision, error=e)

        record = classify_submission(html, answer, self.vocabulary)
        logger.debug("%s: %r was %s", handle.identifier, answer, describe(record.classification))
        try:
            self.store.record(key, record)
        except StateInvariantViolation as e:
            logger.error("%s: %s", handle.identifier, e)
            return HandleOutcome(handle, OutcomeKind.SUBMITTED, answer, decision, record, error=e)
        return HandleOutcome(handle, OutcomeKind.SUBMITTED, answer, decision, record)
