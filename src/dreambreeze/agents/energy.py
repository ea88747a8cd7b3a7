"""Energy agent — morning wake sequence, sleep-debt insight, energy forecast.

The forecast uses the two-process model of sleep regulation:

* **Process S** — homeostatic sleep pressure; dissipates exponentially while
  asleep (τ ≈ 4.2 h) and builds while awake (τ ≈ 18.2 h).
* **Process C** — circadian alertness; a 24 h oscillation with a secondary
  12 h harmonic.

Alertness is Process C minus a fraction of Process S.
"""

from __future__ import annotations

import math
from datetime import datetime

from pydantic import BaseModel

from dreambreeze.arbitration.blackboard import Blackboard
from dreambreeze.arbitration.models import (
    ENERGY_AGENT,
    Hypothesis,
    LogInsight,
    TriggerWakeSequence,
)
from dreambreeze.models import Priority, TimeOfNight

WAKE_TTL_MS = 300_000
INSIGHT_TTL_MS = 3_600_000
MIN_HOURS_BEFORE_WAKE = 6
WAKE_LEAD_MINUTES = 30
DEBT_INSIGHT_HOURS = 2
DEBT_CRITICAL_HOURS = 5

_TAU_SLEEP = 4.2
_TAU_WAKE = 18.2
_FORECAST_HOURS = 18

_READINESS_LABELS: list[tuple[float, str]] = [
    (80, "Peak Performance"),
    (60, "Good Focus"),
    (40, "Moderate"),
    (20, "Low Energy"),
]


class EnergyForecast(BaseModel):
    """Predicted energy for one hour of the coming day."""
    hour: int
    energy_level: int  # 0-100
    cognitive_readiness: int  # 0-100
    label: str


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def process_s(hours_slept: float, sleep_debt: float) -> float:
    """Residual sleep pressure after *hours_slept*."""
    baseline = min(100.0, 40 + sleep_debt * 5)
    return baseline * math.exp(-hours_slept / _TAU_SLEEP)


def process_c(hour: int) -> float:
    """Circadian alertness (0-100) at local *hour*."""
    primary = 50 + 40 * math.sin((hour - 9) / 24 * 2 * math.pi)
    secondary = 10 * math.sin((hour - 15) / 12 * 2 * math.pi)
    return _clamp(primary + secondary)


def readiness_label(readiness: float) -> str:
    for threshold, label in _READINESS_LABELS:
        if readiness >= threshold:
            return label
    return "Rest Recommended"


def generate_energy_forecast(
    hours_slept: float,
    sleep_debt: float,
    wake_hour: int | None = None,
) -> list[EnergyForecast]:
    """Hourly energy / cognitive-readiness forecast from *wake_hour* onward."""
    if wake_hour is None:
        wake_hour = datetime.now().hour

    if hours_slept >= 7.5:
        quality_bonus = 10
    elif hours_slept >= 6:
        quality_bonus = 0
    else:
        quality_bonus = -15

    residual = process_s(hours_slept, sleep_debt)
    forecast: list[EnergyForecast] = []
    for hours_awake in range(_FORECAST_HOURS):
        hour = (wake_hour + hours_awake) % 24
        pressure = 20 + (80 - residual) * (1 - math.exp(-hours_awake / _TAU_WAKE))
        alertness = _clamp(process_c(hour) - pressure * 0.3 + 30)
        readiness = _clamp(alertness + quality_bonus)
        forecast.append(
            EnergyForecast(
                hour=hour,
                energy_level=round(alertness),
                cognitive_readiness=round(readiness),
                label=readiness_label(readiness),
            )
        )
    return forecast


def run_energy_agent(board: Blackboard) -> None:
    ctx = board.get_context()
    hours_slept = ctx.session_duration_minutes / 60
    now = board.now()

    if ctx.time_of_night is TimeOfNight.PRE_WAKE and hours_slept >= MIN_HOURS_BEFORE_WAKE:
        board.post_hypothesis(
            Hypothesis(
                agent_id=ENERGY_AGENT,
                timestamp=now,
                confidence=0.8,
                priority=Priority.HIGH,
                action=TriggerWakeSequence(minutes_until_alarm=WAKE_LEAD_MINUTES),
                reasoning=f"{hours_slept:.1f}h slept, pre-wake window — starting gradual wake sequence",
                expires_at=now + WAKE_TTL_MS,
            )
        )

    if ctx.sleep_debt > DEBT_INSIGHT_HOURS:
        board.post_hypothesis(
            Hypothesis(
                agent_id=ENERGY_AGENT,
                timestamp=now,
                confidence=0.9,
                priority=Priority.CRITICAL if ctx.sleep_debt > DEBT_CRITICAL_HOURS else Priority.MEDIUM,
                action=LogInsight(
                    message=(
                        f"Sleep debt: {ctx.sleep_debt:.1f}h. "
                        "Consider sleeping 30min earlier tonight."
                    ),
                    category="sleep-debt",
                ),
                reasoning=(
                    f"Accumulated sleep debt of {ctx.sleep_debt:.1f} hours "
                    "impacts cognitive performance"
                ),
                expires_at=now + INSIGHT_TTL_MS,
            )
        )
