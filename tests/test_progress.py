"""
Unit Tests for the progress state machine, guard and store.
"""

from datetime import datetime, timezone

import pytest

from aoc_runner.classifier import (
    Accepted,
    Direction,
    RateLimited,
    SubmissionRecord,
    Unrecognized,
    WrongAnswer,
    WrongLevel,
)
from aoc_runner.errors import AlreadySolvedError, StateInvariantViolation
from aoc_runner.progress import (
    Active,
    ProgressStore,
    PuzzlePart,
    Solved,
    Verdict,
    apply_classification,
    check_answer,
    part_from_dict,
    part_to_dict,
)

NOW = datetime(2023, 12, 1, 5, 0, tzinfo=timezone.utc)
KEY = PuzzlePart(2023, 1, 1)
HIGH = WrongAnswer(Direction.TOO_HIGH)
LOW = WrongAnswer(Direction.TOO_LOW)
WRONG = WrongAnswer(Direction.UNSPECIFIED)


def submit(store: ProgressStore, answer: str, classification) -> None:
    store.record(KEY, SubmissionRecord(NOW, answer, classification))


class TestApplyClassification:
    """Tests for the pure transition function."""

    def test_accepted_when_active_then_solved(self):
        result = apply_classification(Active(), "75", Accepted(), NOW)
        assert result.state == Solved("75", NOW)
        assert result.error is None

    def test_too_high_sequence_then_upper_is_minimum(self):
        state = Active()
        for value in ["300", "120", "250", "150"]:
            state = apply_classification(state, value, HIGH, NOW).state
        assert state.upper_bound == 120
        assert state.lower_bound is None

    def test_too_low_sequence_then_lower_is_maximum(self):
        state = Active()
        for value in ["5", "40", "12", "-3"]:
            state = apply_classification(state, value, LOW, NOW).state
        assert state.lower_bound == 40
        assert state.upper_bound is None

    def test_wrong_answer_any_direction_then_tried(self):
        state = Active()
        state = apply_classification(state, "1", HIGH, NOW).state
        state = apply_classification(state, "2", LOW, NOW).state
        state = apply_classification(state, "abc", WRONG, NOW).state
        assert state.tried_answers == {"1", "2", "abc"}

    @pytest.mark.parametrize("classification", [RateLimited("1m"), WrongLevel(), Unrecognized("?")])
    def test_request_problems_then_state_unchanged(self, classification):
        state = Active(10, 20, frozenset({"15"}))
        assert apply_classification(state, "17", classification, NOW).state is state

    @pytest.mark.parametrize("classification", [Accepted(), HIGH, LOW, WRONG, WrongLevel()])
    def test_any_classification_when_solved_then_unchanged(self, classification):
        state = Solved("75", NOW)
        assert apply_classification(state, "80", classification, NOW).state is state

    def test_bound_when_not_integer_then_error_and_still_tried(self):
        result = apply_classification(Active(), "12.5", HIGH, NOW)
        assert isinstance(result.error, StateInvariantViolation)
        assert result.state.tried_answers == {"12.5"}
        assert result.state.upper_bound is None


class TestCheckAnswer:
    """Tests for the guard."""

    def test_check_when_fresh_then_allowed(self):
        assert check_answer(Active(), "100").allowed

    def test_check_when_tried_then_rejected(self):
        decision = check_answer(Active(tried_answers=frozenset({"abc"})), "abc")
        assert decision.verdict is Verdict.ALREADY_TRIED

    def test_check_when_above_upper_then_rejected_with_bound(self):
        decision = check_answer(Active(50, 100), "120")
        assert decision.verdict is Verdict.ABOVE_UPPER_BOUND
        assert decision.bound == 100

    def test_check_when_below_lower_then_rejected_with_bound(self):
        decision = check_answer(Active(50, 100), "10")
        assert decision.verdict is Verdict.BELOW_LOWER_BOUND
        assert decision.bound == 50

    def test_check_when_inside_bounds_then_allowed(self):
        assert check_answer(Active(50, 100), "75").allowed

    def test_check_when_only_upper_bound_then_lower_unconstrained(self):
        assert check_answer(Active(None, 100), "-5000").allowed

    def test_check_when_not_integer_then_bounds_skipped(self):
        assert check_answer(Active(50, 100), "hello").allowed

    def test_check_when_override_then_tried_and_bounds_ignored(self):
        state = Active(50, 100, frozenset({"120"}))
        assert check_answer(state, "120", override=True).allowed
        assert check_answer(state, "10", override=True).allowed

    def test_check_when_solved_then_compares_strings(self):
        state = Solved("75", NOW)
        assert check_answer(state, "75").verdict is Verdict.SOLVED_MATCH
        mismatch = check_answer(state, "075")
        assert mismatch.verdict is Verdict.SOLVED_MISMATCH
        assert mismatch.expected == "75"

    def test_check_when_solved_and_override_then_still_compares(self):
        assert check_answer(Solved("75", NOW), "80", override=True).verdict is Verdict.SOLVED_MISMATCH


class TestProgressStore:
    """Tests for ProgressStore."""

    def test_state_when_first_lookup_then_default_active(self):
        store = ProgressStore()
        assert store.state(KEY) == Active(None, None, frozenset())
        assert len(store) == 1

    def test_state_when_invalid_part_then_raises(self):
        with pytest.raises(ValueError, match="expected 1 or 2"):
            ProgressStore().state(PuzzlePart(2023, 1, 3))

    def test_scenario_bounds_then_accepted(self):
        """100 high, 50 low, 120 and 10 rejected locally, 75 accepted."""
        store = ProgressStore()
        submit(store, "100", HIGH)
        assert store.state(KEY).upper_bound == 100
        submit(store, "50", LOW)
        assert store.state(KEY).lower_bound == 50

        assert store.check(KEY, "120").verdict is Verdict.ABOVE_UPPER_BOUND
        assert store.check(KEY, "10").verdict is Verdict.BELOW_LOWER_BOUND

        submit(store, "75", Accepted())
        assert store.state(KEY) == Solved("75", NOW)
        assert store.check(KEY, "75").verdict is Verdict.SOLVED_MATCH
        assert store.check(KEY, "76").verdict is Verdict.SOLVED_MISMATCH
        assert [r.answer for r in store.submissions(KEY)] == ["100", "50", "75"]

    def test_record_when_solved_then_answer_is_kept(self):
        store = ProgressStore()
        submit(store, "75", Accepted())
        submit(store, "80", Accepted())
        assert store.state(KEY).answer == "75"

    def test_record_when_bound_on_non_integer_then_raises_after_logging(self):
        store = ProgressStore()
        with pytest.raises(StateInvariantViolation):
            submit(store, "x1", LOW)
        assert store.state(KEY).tried_answers == {"x1"}
        assert len(store.submissions(KEY)) == 1

    def test_set_solution_then_solved_with_accepted_record(self):
        store = ProgressStore()
        state = store.set_solution(KEY, "42", now=NOW)
        assert state == Solved("42", NOW)
        assert store.submissions(KEY)[-1].classification == Accepted()

    def test_set_solution_when_already_solved_then_raises(self):
        store = ProgressStore()
        store.set_solution(KEY, "42")
        with pytest.raises(AlreadySolvedError):
            store.set_solution(KEY, "43")

    def test_reset_then_active_and_log_kept(self):
        store = ProgressStore()
        submit(store, "75", Accepted())
        store.reset(KEY)
        assert store.state(KEY) == Active()
        assert len(store.submissions(KEY)) == 1

    def test_part_dict_preserves_state_and_log(self):
        store = ProgressStore()
        submit(store, "100", HIGH)
        submit(store, "7", WRONG)
        (key, progress), = list(store)
        restored = part_from_dict(part_to_dict(progress))
        assert restored.state == progress.state
        assert restored.submissions == progress.submissions
