"""Shared pytest fixtures for the covenant-graph test suite.

This conftest exposes the factory helpers in ``tests.fixtures.transitions``
as fixtures. No external services are required.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from covenant_graph.domain.models import CovenantLifecycleState
from covenant_graph.domain.patterns import PatternLibrary
from tests.fixtures.transitions import (
    BASE_TIME,
    make_facility,
    make_history,
    make_pattern,
    make_transition,
    make_transition_sequence,
)

S = CovenantLifecycleState


@pytest.fixture()
def now():
    """A fixed analysis time, 180 days after the fixture base time."""
    return BASE_TIME + timedelta(days=180)


@pytest.fixture()
def transition_factory():
    """Return the ``make_transition`` factory callable."""
    return make_transition


@pytest.fixture()
def sequence_factory():
    """Return the ``make_transition_sequence`` factory callable."""
    return make_transition_sequence


@pytest.fixture()
def history_factory():
    """Return the ``make_history`` factory callable."""
    return make_history


@pytest.fixture()
def pattern_factory():
    """Return the ``make_pattern`` factory callable."""
    return make_pattern


@pytest.fixture()
def facility():
    """An active facility snapshot."""
    return make_facility()


@pytest.fixture()
def breach_history():
    """healthy -> at_risk -> breach, currently in breach."""
    return make_history(
        make_transition_sequence([S.HEALTHY, S.AT_RISK, S.BREACH], covenant_id="cov-breach"),
        days_in_current_state=10.0,
    )


@pytest.fixture()
def at_risk_history():
    """healthy -> at_risk -> healthy -> at_risk, 30 days into at_risk."""
    return make_history(
        make_transition_sequence(
            [S.HEALTHY, S.AT_RISK, S.HEALTHY, S.AT_RISK], covenant_id="cov-risk"
        ),
        days_in_current_state=30.0,
    )


@pytest.fixture()
def at_risk_library():
    """Library with one negative at_risk -> breach pattern (mean 60, std dev 10)."""
    return PatternLibrary(patterns=(make_pattern(),))
