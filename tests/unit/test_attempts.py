"""Test attempt strategies."""

from datetime import timedelta

from s3kit.retries.attempts import DEFAULT_ATTEMPTS, AttemptStrategy
from tests.unit.conftest import FakeTimer


def _count_attempts(strategy: AttemptStrategy, timer: FakeTimer, work: float) -> int:
    attempt = strategy.start(clock=timer.clock, sleep=timer.sleep)
    count = 0
    while attempt.next():
        count += 1
        timer.advance(work)
    return count


def test_first_attempt_is_always_made() -> None:
    """Test a strategy without budget still allows one attempt."""
    timer = FakeTimer()
    attempt = AttemptStrategy(total=timedelta()).start(clock=timer.clock, sleep=timer.sleep)

    assert attempt.next()
    assert not attempt.next()
    assert attempt.count == 1


def test_min_overrides_exceeded_budget() -> None:
    """Test min attempts are made even when every attempt exceeds the total budget."""
    timer = FakeTimer()

    count = _count_attempts(DEFAULT_ATTEMPTS, timer, work=10.0)

    assert count == 5


def test_no_sleep_before_first_attempt() -> None:
    """Test the delay only separates attempts."""
    timer = FakeTimer()
    attempt = AttemptStrategy(total=timedelta(seconds=1), delay=timedelta(milliseconds=250)).start(
        clock=timer.clock, sleep=timer.sleep
    )

    assert attempt.next()
    assert timer.sleeps == []
    assert attempt.next()
    assert timer.sleeps == [0.25]


def test_delay_accounts_for_elapsed_time() -> None:
    """Test time spent in an attempt is deducted from the following sleep."""
    timer = FakeTimer()
    attempt = AttemptStrategy(total=timedelta(seconds=1), delay=timedelta(milliseconds=500)).start(
        clock=timer.clock, sleep=timer.sleep
    )

    attempt.next()
    timer.advance(0.25)
    attempt.next()

    assert timer.sleeps == [0.25]


def test_attempts_stop_when_budget_is_spent() -> None:
    """Test attempts stop once the next one would start past the total duration."""
    timer = FakeTimer()
    strategy = AttemptStrategy(total=timedelta(seconds=1), delay=timedelta(milliseconds=250))

    count = _count_attempts(strategy, timer, work=0.0)

    assert count == 4
    assert timer.sleeps == [0.25, 0.25, 0.25]


def test_has_next_binds_next() -> None:
    """Test next succeeds after has_next returned True, even if the budget ran out in between."""
    timer = FakeTimer()
    attempt = AttemptStrategy(total=timedelta(seconds=1)).start(clock=timer.clock, sleep=timer.sleep)
    assert attempt.next()

    timer.advance(0.5)
    assert attempt.has_next()

    timer.advance(10.0)
    assert attempt.next()
    assert attempt.count == 2


def test_has_next_is_false_when_exhausted() -> None:
    """Test has_next and next agree once the budget is spent."""
    timer = FakeTimer()
    attempt = AttemptStrategy(total=timedelta(seconds=1)).start(clock=timer.clock, sleep=timer.sleep)
    attempt.next()

    timer.advance(2.0)

    assert not attempt.has_next()
    assert not attempt.next()


def test_has_next_before_first_attempt() -> None:
    """Test a fresh sequence always has a next attempt."""
    timer = FakeTimer()
    attempt = AttemptStrategy(total=timedelta()).start(clock=timer.clock, sleep=timer.sleep)

    assert attempt.has_next()


def test_has_next_while_min_is_unmet() -> None:
    """Test has_next is True while fewer than min attempts were made."""
    timer = FakeTimer()
    attempt = AttemptStrategy(total=timedelta(), min=2).start(clock=timer.clock, sleep=timer.sleep)
    attempt.next()
    timer.advance(60.0)

    assert attempt.has_next()
    assert attempt.next()
    assert not attempt.has_next()


def test_iteration_yields_attempt_numbers() -> None:
    """Test iterating over an attempt yields 1, 2, ..."""
    timer = FakeTimer()
    attempt = AttemptStrategy(total=timedelta(), min=3).start(clock=timer.clock, sleep=timer.sleep)

    assert list(attempt) == [1, 2, 3]


def test_strategy_is_shared_between_calls() -> None:
    """Test every start begins an independent sequence."""
    timer = FakeTimer()
    strategy = AttemptStrategy(total=timedelta(), min=2)

    first = strategy.start(clock=timer.clock, sleep=timer.sleep)
    list(first)
    second = strategy.start(clock=timer.clock, sleep=timer.sleep)

    assert first.count == 2
    assert second.count == 0
    assert second.strategy is strategy
