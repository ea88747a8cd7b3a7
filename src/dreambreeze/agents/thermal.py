"""Thermal agent — fan speed from weather and the circadian temperature curve.

Core body temperature drops during the night with a nadir around 04:00–05:00,
so less airflow is needed as the night progresses.  This agent also keeps the
coarse ``time_of_night`` bucket in the context up to date.
"""

from __future__ import annotations

from datetime import datetime

from dreambreeze.arbitration.blackboard import Blackboard
from dreambreeze.arbitration.models import THERMAL_AGENT, Hypothesis, SetFanSpeed
from dreambreeze.models import Priority, TimeOfNight

TTL_MS = 300_000  # weather changes slowly

# Body temperature offset (°C) relative to baseline, by local hour
_CIRCADIAN_OFFSETS: dict[int, float] = {
    20: 0.3, 21: 0.1, 22: -0.1, 23: -0.3,
    0: -0.5, 1: -0.7, 2: -0.9, 3: -1.0, 4: -1.1,
    5: -1.0, 6: -0.7, 7: -0.3, 8: 0.0, 9: 0.2,
}

# (feels-like lower bound °C, fan speed, label), checked in order
_FEELS_LIKE_BANDS: list[tuple[float, int, str]] = [
    (32, 80, "Hot"),
    (28, 60, "Warm"),
    (24, 40, "Comfortable"),
    (20, 20, "Cool"),
]


def circadian_temp_offset(hour: int) -> float:
    return _CIRCADIAN_OFFSETS.get(hour, 0.0)


def time_of_night_for_hour(hour: int) -> TimeOfNight:
    if hour >= 20 or hour < 1:
        return TimeOfNight.EARLY
    if hour < 3:
        return TimeOfNight.MID
    if hour < 5:
        return TimeOfNight.LATE
    return TimeOfNight.PRE_WAKE


def run_thermal_agent(board: Blackboard, hour: int | None = None) -> None:
    """Post a fan-speed hypothesis; *hour* defaults to the local clock."""
    if hour is None:
        hour = datetime.now().hour
    ctx = board.get_context()
    weather = ctx.weather_data

    speed = 40
    confidence = 0.5
    if weather is not None:
        speed, label = 5, "Cold"
        for lower, band_speed, band_label in _FEELS_LIKE_BANDS:
            if weather.feels_like > lower:
                speed, label = band_speed, band_label
                break
        reasoning = f"{label} weather (feels like {weather.feels_like}°C)"

        # Evaporative cooling needs more airflow in humid air
        if weather.humidity > 75:
            speed = min(100, speed + 10)
            reasoning += f", high humidity ({weather.humidity}%)"
        confidence = 0.75
    else:
        reasoning = "No weather data — using circadian estimate only"

    offset = circadian_temp_offset(hour)
    speed = max(0, min(100, speed + round(offset * 10)))
    reasoning += f" | Circadian offset {offset:+.1f}°C"

    board.update_context(time_of_night=time_of_night_for_hour(hour))

    hot = weather is not None and weather.feels_like > 32
    now = board.now()
    board.post_hypothesis(
        Hypothesis(
            agent_id=THERMAL_AGENT,
            timestamp=now,
            confidence=confidence,
            priority=Priority.CRITICAL if hot else Priority.MEDIUM,
            action=SetFanSpeed(speed=speed),
            reasoning=reasoning,
            expires_at=now + TTL_MS,
        )
    )
