"""Sleep-debt calculator over a rolling 14-night window.

Adults need 7–9 h; 8 h is used as the baseline.  Poor-quality sleep does not
count in full towards the total, and at most ~2 h of debt can be recovered
per night.  The ``total_debt_hours`` figure is what the session feeds into
the blackboard context as ``sleep_debt``.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

IDEAL_SLEEP_HOURS = 8.0
MAX_RECOVERY_PER_NIGHT = 2.0
_TREND_MARGIN_HOURS = 2.0
_MIN_PREVIOUS_NIGHTS = 3
_LOW_DEEP_SLEEP_PCT = 15


class NightRecord(BaseModel):
    date: date
    hours_slept: float = Field(ge=0)
    sleep_quality: float = Field(ge=0, le=100)
    deep_sleep_percent: float = 0.0
    rem_sleep_percent: float = 0.0


class SleepDebtResult(BaseModel):
    total_debt_hours: float
    weekly_debt_hours: float
    trend: Literal["improving", "stable", "worsening"] = "stable"
    recovery_nights_needed: int
    impairment_level: Literal["none", "mild", "moderate", "severe"] = "none"
    impairment_equivalent: str
    recommendations: list[str] = Field(default_factory=list)


def _plain_deficit(nights: list[NightRecord]) -> float:
    return sum(max(0.0, IDEAL_SLEEP_HOURS - n.hours_slept) for n in nights)


def _impairment(total: float) -> tuple[str, str]:
    if total > 20:
        return "severe", "Equivalent to ~0.10 BAC — significant cognitive impairment"
    if total > 12:
        return "moderate", "Equivalent to ~0.05 BAC — noticeable reaction time decrease"
    if total > 5:
        return "mild", "Subtle focus and memory effects"
    return "none", "Fully rested"


def calculate_sleep_debt(nights: list[NightRecord]) -> SleepDebtResult:
    """Summarise accumulated sleep debt from recent night records."""
    if not nights:
        return SleepDebtResult(
            total_debt_hours=0.0,
            weekly_debt_hours=0.0,
            recovery_nights_needed=0,
            impairment_equivalent="Fully rested",
            recommendations=["Start tracking your sleep to get personalized insights."],
        )

    ordered = sorted(nights, key=lambda n: n.date, reverse=True)
    last14, last7, prev7 = ordered[:14], ordered[:7], ordered[7:14]

    total = 0.0
    for n in last14:
        deficit = IDEAL_SLEEP_HOURS - n.hours_slept
        quality_penalty = (1 - n.sleep_quality / 100) * n.hours_slept * 0.2
        total += max(0.0, deficit + quality_penalty)

    weekly = _plain_deficit(last7)
    previous = _plain_deficit(prev7)

    trend: Literal["improving", "stable", "worsening"] = "stable"
    if len(prev7) >= _MIN_PREVIOUS_NIGHTS:
        if weekly < previous - _TREND_MARGIN_HOURS:
            trend = "improving"
        elif weekly > previous + _TREND_MARGIN_HOURS:
            trend = "worsening"

    level, equivalent = _impairment(total)

    recommendations: list[str] = []
    if total > 12:
        recommendations.append("Consider going to bed 1 hour earlier for the next week.")
        recommendations.append("Avoid caffeine after 2 PM to maximize sleep quality.")
    if total > 5:
        recommendations.append("A 20-minute nap between 1-3 PM can help reduce sleep debt.")
    if trend == "worsening":
        recommendations.append("Your sleep debt is growing. Prioritize consistent bedtimes.")
    elif trend == "improving":
        recommendations.append("Great progress! Keep up the consistent sleep schedule.")

    avg_deep = sum(n.deep_sleep_percent for n in last7) / len(last7)
    if avg_deep < _LOW_DEEP_SLEEP_PCT:
        recommendations.append(
            "Your deep sleep is low. Cooler room temperature and avoiding alcohol can help."
        )

    return SleepDebtResult(
        total_debt_hours=round(total, 1),
        weekly_debt_hours=round(weekly, 1),
        trend=trend,
        recovery_nights_needed=math.ceil(total / MAX_RECOVERY_PER_NIGHT),
        impairment_level=level,
        impairment_equivalent=equivalent,
        recommendations=recommendations,
    )
