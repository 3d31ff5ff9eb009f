"""Covenant lifecycle state machine.

Derives lifecycle states from covenant test results, builds chronological
state histories, and summarizes portfolio-wide transition behavior into the
``TransitionPattern`` records the pattern library is built from.
Pure Python + stdlib — ZERO framework imports.

Lifecycle:
  - healthy -> at_risk (headroom drops to 20% or below)
  - at_risk -> healthy (headroom improves)
  - at_risk -> breach (test fails)
  - breach -> waived | resolved
  - waived -> healthy | breach (waiver expires)
"""

from __future__ import annotations

import statistics
from collections import Counter, defaultdict
from typing import TYPE_CHECKING

from covenant_graph.domain.models import (
    AtRiskBreachRate,
    CovenantLifecycleState,
    CovenantStateHistory,
    CovenantStateStatistics,
    CovenantStateTransition,
    CovenantTestOutcome,
    TransitionPattern,
    TransitionTrigger,
)
from covenant_graph.domain.temporal import days_between, utc_now
from covenant_graph.domain.validation import require_non_empty

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from covenant_graph.domain.models import CovenantTestResult, WaiverPeriod

HEALTHY_HEADROOM_THRESHOLD = 20.0
DAYS_PER_QUARTER = 90


def determine_covenant_state(
    test_result: CovenantTestOutcome,
    headroom_percentage: float,
    is_waived: bool = False,
) -> CovenantLifecycleState:
    """Lifecycle state implied by a single test measurement."""
    if is_waived:
        return CovenantLifecycleState.WAIVED
    if test_result == CovenantTestOutcome.FAIL:
        return CovenantLifecycleState.BREACH
    if headroom_percentage > HEALTHY_HEADROOM_THRESHOLD:
        return CovenantLifecycleState.HEALTHY
    if headroom_percentage >= 0:
        return CovenantLifecycleState.AT_RISK
    # A pass with negative headroom is inconsistent; treat as breach
    return CovenantLifecycleState.BREACH


def determine_transition_trigger(
    from_state: CovenantLifecycleState,
    to_state: CovenantLifecycleState,
    test_result: CovenantTestOutcome,
) -> TransitionTrigger:
    """Classify what moved a covenant from one state to another."""
    if to_state == CovenantLifecycleState.WAIVED:
        return TransitionTrigger.WAIVER_GRANTED
    if from_state == CovenantLifecycleState.WAIVED:
        return TransitionTrigger.WAIVER_EXPIRED

    if test_result == CovenantTestOutcome.FAIL and from_state != CovenantLifecycleState.BREACH:
        return TransitionTrigger.TEST_FAILURE
    if test_result == CovenantTestOutcome.PASS and from_state == CovenantLifecycleState.BREACH:
        return TransitionTrigger.TEST_SUCCESS

    if from_state == CovenantLifecycleState.HEALTHY and to_state == CovenantLifecycleState.AT_RISK:
        return TransitionTrigger.HEADROOM_DETERIORATION
    if from_state == CovenantLifecycleState.AT_RISK and to_state == CovenantLifecycleState.HEALTHY:
        return TransitionTrigger.HEADROOM_IMPROVEMENT

    if test_result == CovenantTestOutcome.PASS:
        return TransitionTrigger.TEST_SUCCESS
    return TransitionTrigger.TEST_FAILURE


def generate_transition_reason(
    from_state: CovenantLifecycleState,
    to_state: CovenantLifecycleState,
    trigger: TransitionTrigger,
    headroom_percentage: float,
    calculated_ratio: float,
    threshold: float,
) -> str:
    """Human-readable explanation of a transition."""
    ratio = f"{calculated_ratio:.2f}x"
    limit = f"{threshold:.2f}x"
    headroom = f"{headroom_percentage:.1f}%"

    match trigger:
        case TransitionTrigger.HEADROOM_DETERIORATION:
            return (
                f"Headroom declined to {headroom}, moving from healthy to at-risk status. "
                f"Ratio: {ratio} vs threshold {limit}."
            )
        case TransitionTrigger.HEADROOM_IMPROVEMENT:
            return (
                f"Headroom improved to {headroom}, moving from at-risk to healthy status. "
                f"Ratio: {ratio} vs threshold {limit}."
            )
        case TransitionTrigger.TEST_FAILURE:
            return (
                f"Test failed with ratio {ratio} below threshold {limit} "
                f"({headroom} headroom). Covenant breached."
            )
        case TransitionTrigger.TEST_SUCCESS:
            return (
                f"Test passed with ratio {ratio} meeting threshold {limit} "
                f"({headroom} headroom). Covenant resolved."
            )
        case TransitionTrigger.WAIVER_GRANTED:
            return f"Waiver granted for breach. Ratio: {ratio} vs threshold {limit}."
        case TransitionTrigger.WAIVER_EXPIRED:
            return (
                f"Waiver period expired. Current ratio: {ratio} vs threshold {limit} "
                f"({headroom} headroom)."
            )
        case TransitionTrigger.MANUAL_OVERRIDE:
            return (
                f"State manually changed from {from_state} to {to_state}. "
                f"Ratio: {ratio} vs threshold {limit}."
            )


def calculate_state_statistics(
    transitions: Sequence[CovenantStateTransition],
    now: datetime | None = None,
) -> CovenantStateStatistics:
    """Summarize how long and how often a covenant sat in each state.

    The latest state is measured up to ``now``. Raises PreconditionError on an
    empty transition list.
    """
    require_non_empty(
        transitions,
        "transitions",
        "Cannot calculate statistics from empty transition history",
    )
    if now is None:
        now = utc_now()

    state_counts = dict.fromkeys(CovenantLifecycleState, 0)
    total_days = dict.fromkeys(CovenantLifecycleState, 0.0)

    for index, transition in enumerate(transitions):
        state_counts[transition.to_state] += 1
        end = transitions[index + 1].timestamp if index < len(transitions) - 1 else now
        total_days[transition.to_state] += days_between(transition.timestamp, end)

    average_days = {
        state: (total_days[state] / count if count > 0 else 0.0)
        for state, count in state_counts.items()
    }

    first, last = transitions[0], transitions[-1]
    return CovenantStateStatistics(
        total_transitions=len(transitions),
        state_counts=state_counts,
        average_duration_by_state=average_days,
        total_days_by_state=total_days,
        breach_count=state_counts[CovenantLifecycleState.BREACH],
        waiver_count=state_counts[CovenantLifecycleState.WAIVED],
        resolution_count=state_counts[CovenantLifecycleState.RESOLVED],
        first_transition_date=first.timestamp,
        last_transition_date=last.timestamp,
        total_monitoring_days=days_between(first.timestamp, last.timestamp),
    )


def build_state_history_from_tests(
    covenant_id: str,
    test_history: Sequence[CovenantTestResult],
    current_threshold: float,
    waiver_periods: Sequence[WaiverPeriod] = (),
    now: datetime | None = None,
) -> CovenantStateHistory:
    """Replay covenant tests into a state history.

    Tests are sorted by date. The first test records the initial state as a
    self-transition; later tests only emit a transition when the state changes.
    Raises PreconditionError on an empty test history.
    """
    require_non_empty(
        test_history,
        "test_history",
        "Cannot build state history from empty test history",
    )
    if now is None:
        now = utc_now()

    transitions: list[CovenantStateTransition] = []
    previous_state: CovenantLifecycleState | None = None

    for index, test in enumerate(sorted(test_history, key=lambda t: t.test_date)):
        is_waived = any(period.contains(test.test_date) for period in waiver_periods)
        state = determine_covenant_state(test.test_result, test.headroom_percentage, is_waived)

        if previous_state is None:
            transitions.append(
                CovenantStateTransition(
                    id=f"{covenant_id}-transition-0",
                    covenant_id=covenant_id,
                    from_state=state,
                    to_state=state,
                    trigger=TransitionTrigger.TEST_SUCCESS,
                    timestamp=test.test_date,
                    test_result=test,
                    headroom_percentage=test.headroom_percentage,
                    calculated_ratio=test.calculated_ratio,
                    threshold_value=current_threshold,
                    reason=(
                        f"Initial state recorded as {state} with "
                        f"{test.headroom_percentage:.1f}% headroom."
                    ),
                )
            )
        elif state != previous_state:
            trigger = determine_transition_trigger(previous_state, state, test.test_result)
            transitions.append(
                CovenantStateTransition(
                    id=f"{covenant_id}-transition-{index}",
                    covenant_id=covenant_id,
                    from_state=previous_state,
                    to_state=state,
                    trigger=trigger,
                    timestamp=test.test_date,
                    test_result=test,
                    headroom_percentage=test.headroom_percentage,
                    calculated_ratio=test.calculated_ratio,
                    threshold_value=current_threshold,
                    reason=generate_transition_reason(
                        previous_state,
                        state,
                        trigger,
                        test.headroom_percentage,
                        test.calculated_ratio,
                        current_threshold,
                    ),
                    previous_transition_id=transitions[-1].id,
                )
            )
        previous_state = state

    current = transitions[-1]
    return CovenantStateHistory(
        covenant_id=covenant_id,
        current_state=current.to_state,
        current_state_since=current.timestamp,
        days_in_current_state=max(0.0, days_between(current.timestamp, now)),
        transitions=transitions,
        statistics=calculate_state_statistics(transitions, now=now),
    )


def calculate_at_risk_breach_rate(
    histories: Sequence[CovenantStateHistory],
    quarters: int,
) -> AtRiskBreachRate:
    """Share of at-risk entries followed by a breach within ``quarters`` quarters."""
    target_days = quarters * DAYS_PER_QUARTER
    total_at_risk = 0
    days_to_breach: list[float] = []

    for history in histories:
        for index, transition in enumerate(history.transitions):
            if transition.to_state != CovenantLifecycleState.AT_RISK:
                continue
            total_at_risk += 1
            breach = next(
                (
                    later
                    for later in history.transitions[index + 1 :]
                    if later.to_state == CovenantLifecycleState.BREACH
                ),
                None,
            )
            if breach is None:
                continue
            elapsed = days_between(transition.timestamp, breach.timestamp)
            if elapsed <= target_days:
                days_to_breach.append(elapsed)

    return AtRiskBreachRate(
        total_at_risk=total_at_risk,
        breached_within_period=len(days_to_breach),
        breach_rate_percentage=(
            len(days_to_breach) / total_at_risk * 100 if total_at_risk > 0 else 0.0
        ),
        average_days_to_breach=statistics.fmean(days_to_breach) if days_to_breach else 0.0,
    )


def _state_label(state: CovenantLifecycleState) -> str:
    return state.value.replace("_", " ")


def summarize_transition_patterns(
    histories: Sequence[CovenantStateHistory],
) -> list[TransitionPattern]:
    """Aggregate observed transitions across a portfolio.

    Each transition with a predecessor contributes the days spent in its
    source state. Probability is the share of all exits from the source state
    that went to the target state. Sorted by descending occurrence count.
    """
    durations: dict[tuple[CovenantLifecycleState, CovenantLifecycleState], list[float]] = (
        defaultdict(list)
    )
    exits: Counter[CovenantLifecycleState] = Counter()

    for history in histories:
        for previous, current in zip(history.transitions, history.transitions[1:], strict=False):
            if current.from_state == current.to_state:
                continue
            durations[(current.from_state, current.to_state)].append(
                max(0.0, days_between(previous.timestamp, current.timestamp))
            )
            exits[current.from_state] += 1

    patterns: list[TransitionPattern] = []
    for (from_state, to_state), days in durations.items():
        average = statistics.fmean(days)
        probability = len(days) / exits[from_state] * 100
        patterns.append(
            TransitionPattern(
                pattern=(
                    f"{probability:.1f}% of {_state_label(from_state)} covenants move to "
                    f"{_state_label(to_state)} within {round(average)} days"
                ),
                from_state=from_state,
                to_state=to_state,
                occurrence_count=len(days),
                average_days=average,
                std_deviation_days=statistics.pstdev(days),
                probability_percentage=min(100.0, probability),
            )
        )
    return sorted(patterns, key=lambda p: p.occurrence_count, reverse=True)
