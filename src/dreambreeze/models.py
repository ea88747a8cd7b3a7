"""Shared Pydantic models used across the framework."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# ── Enums ─────────────────────────────────────────────────────

class Posture(str, Enum):
    """Body posture labels produced by the posture classifier."""
    SUPINE = "supine"
    PRONE = "prone"
    LEFT_LATERAL = "left-lateral"
    RIGHT_LATERAL = "right-lateral"
    FETAL = "fetal"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        """Human-readable label for display."""
        return POSTURE_LABELS[self]


POSTURE_LABELS: dict[Posture, str] = {
    Posture.SUPINE: "On Back",
    Posture.PRONE: "Face Down",
    Posture.LEFT_LATERAL: "Left Side",
    Posture.RIGHT_LATERAL: "Right Side",
    Posture.FETAL: "Fetal",
    Posture.UNKNOWN: "Detecting...",
}


class SleepStage(str, Enum):
    """Sleep stage supplied by the (external) epoch estimator."""
    AWAKE = "awake"
    LIGHT = "light"
    DEEP = "deep"
    REM = "rem"


class TimeOfNight(str, Enum):
    EARLY = "early"
    MID = "mid"
    LATE = "late"
    PRE_WAKE = "pre-wake"


class NoiseType(str, Enum):
    WHITE = "white"
    PINK = "pink"
    BROWN = "brown"
    RAIN = "rain"
    OCEAN = "ocean"
    FOREST = "forest"


class Priority(str, Enum):
    """Hypothesis priority; :attr:`weight` multiplies its influence."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHTS[self]


_PRIORITY_WEIGHTS: dict[Priority, int] = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.CRITICAL: 4,
}


# ── Sensor data ───────────────────────────────────────────────

class AccelerometerSample(BaseModel):
    """A single calibrated 3-axis accelerometer reading (in g)."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float
    timestamp: int  # epoch milliseconds


class RawAngles(BaseModel):
    """Tilt angles in degrees.  ``yaw`` is approximate (no magnetometer)."""
    pitch: float = 0.0
    roll: float = 0.0
    yaw: float = 0.0


class PostureResult(BaseModel):
    """Output of one :meth:`PostureClassifier.classify` call.

    ``posture`` is the debounced (committed) posture; ``raw_posture`` and
    ``confidence`` describe the instantaneous classification of the window.
    """
    posture: Posture = Posture.UNKNOWN
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    raw_posture: Posture = Posture.UNKNOWN
    raw_angles: RawAngles = Field(default_factory=RawAngles)


# ── Context collaborators ─────────────────────────────────────

class WeatherData(BaseModel):
    """Weather snapshot fetched by the (external) weather service."""
    temperature_celsius: float
    humidity: float
    feels_like: float
    description: str = ""
    fetched_at: int = 0  # epoch milliseconds


class PreSleepContext(BaseModel):
    """Pre-sleep check-in survey answers."""
    caffeine_mg: float = 0
    caffeine_last_intake_hours_ago: float = 0
    alcohol_drinks: int = 0
    exercise_intensity: Literal["none", "light", "moderate", "intense"] = "none"
    exercise_hours_ago: float = 0
    stress_level: int = Field(1, ge=1, le=5)
    screen_time_minutes: float = 0
    meal_hours_ago: float = 0


class SleepContext(BaseModel):
    """Shared context record held on the blackboard.

    Always fully defined: the defaults below are what
    :meth:`Blackboard.reset` restores.
    """
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    current_posture: Posture = Posture.UNKNOWN
    current_sleep_stage: SleepStage = SleepStage.AWAKE
    session_duration_minutes: float = 0.0
    room_temperature_estimate: float | None = None
    weather_data: WeatherData | None = None
    pre_sleep_context: PreSleepContext | None = None
    time_of_night: TimeOfNight = TimeOfNight.EARLY
    sleep_debt: float = 0.0  # hours
