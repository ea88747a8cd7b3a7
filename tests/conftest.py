"""Shared pytest fixtures."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from dreambreeze.arbitration.blackboard import Blackboard
from dreambreeze.arbitration.models import Hypothesis, SetFanSpeed
from dreambreeze.models import AccelerometerSample, Priority


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def board(clock: FakeClock) -> Blackboard:
    return Blackboard(clock=clock)


@pytest.fixture
def make_hypothesis(clock: FakeClock) -> Callable[..., Hypothesis]:
    def _make(**overrides: Any) -> Hypothesis:
        fields: dict[str, Any] = {
            "agent_id": "posture-agent",
            "timestamp": clock.now,
            "confidence": 0.8,
            "priority": Priority.MEDIUM,
            "action": SetFanSpeed(speed=50),
            "reasoning": "test",
            "expires_at": clock.now + 60_000,
        }
        fields.update(overrides)
        return Hypothesis(**fields)

    return _make


def feed(classifier, vector, start_ms, duration_ms, period_ms=20):
    """Feed a constant gravity *vector* for *duration_ms*; return results and next timestamp."""
    x, y, z = vector
    results = []
    t = start_ms
    while t < start_ms + duration_ms:
        results.append((t, classifier.classify(AccelerometerSample(x=x, y=y, z=z, timestamp=t))))
        t += period_ms
    return results, t
