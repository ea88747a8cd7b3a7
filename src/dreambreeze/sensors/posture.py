"""Rule-based posture classifier.

The phone is assumed to lie flat on the mattress near the pillow.  Posture
is derived from accelerometer tilt angles over a rolling window, and a
hysteresis gate holds the committed posture until a new classification has
persisted for ``hysteresis_ms``.

Pipeline per sample
-------------------
1. Append to the rolling window (oldest evicted beyond ``window_size``).
2. Average x/y/z over the window and derive pitch / roll / yaw.
3. Movement variance: mean of the population std-dev of raw x and y.
4. Raw classification by fixed decision order (first match wins).
5. Hysteresis step → committed posture.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass

import structlog

from dreambreeze.models import AccelerometerSample, Posture, PostureResult, RawAngles

logger = structlog.get_logger(__name__)

# ── Constants ─────────────────────────────────────────────────

WINDOW_SIZE = 50
MIN_SAMPLES = 5
HYSTERESIS_MS = 10_000
LATERAL_THRESHOLD_DEG = 20.0
PRONE_Z_THRESHOLD = -0.3  # normalised z below this → face-down
FETAL_CURL_THRESHOLD = 0.15  # movement variance above this → curled


@dataclass(slots=True)
class HysteresisState:
    """Debounce state owned by one classifier."""

    current_posture: Posture = Posture.UNKNOWN
    last_change_time: int = 0
    pending_posture: Posture | None = None
    pending_start_time: int = 0


# ── Geometry helpers ─────────────────────────────────────────


def compute_angles(ax: float, ay: float, az: float) -> tuple[RawAngles, float]:
    """Return tilt angles (degrees) and the normalised z component."""
    magnitude = math.sqrt(ax * ax + ay * ay + az * az) or 1.0
    nx, ny, nz = ax / magnitude, ay / magnitude, az / magnitude

    pitch = math.degrees(math.atan2(ny, math.sqrt(nx * nx + nz * nz)))
    roll = math.degrees(math.atan2(-nx, nz))
    yaw = math.degrees(math.atan2(ny, nx))  # rough, display only
    return RawAngles(pitch=pitch, roll=roll, yaw=yaw), nz


def _mean(values: list[float]) -> float:
    return sum(values) / len(values)


def _pstdev(values: list[float]) -> float:
    """Population standard deviation; NaN and overflow propagate as nan/inf."""
    mean = _mean(values)
    total = 0.0
    for v in values:
        d = v - mean
        total += d * d  # saturates to inf where d ** 2 would raise
    return math.sqrt(total / len(values))


def classify_raw(pitch: float, roll: float, nz: float, variance: float) -> tuple[Posture, float]:
    """Instantaneous posture + confidence for one averaged window."""
    if nz < PRONE_Z_THRESHOLD:
        return Posture.PRONE, min(1.0, abs(nz) * 1.2)

    abs_roll = abs(roll)
    abs_pitch = abs(pitch)

    if abs_roll > LATERAL_THRESHOLD_DEG and variance > FETAL_CURL_THRESHOLD:
        return Posture.FETAL, min(1.0, 0.5 + variance * 2)

    if roll > LATERAL_THRESHOLD_DEG:
        return Posture.LEFT_LATERAL, min(1.0, (abs_roll - LATERAL_THRESHOLD_DEG) / 40 + 0.5)

    if roll < -LATERAL_THRESHOLD_DEG:
        return Posture.RIGHT_LATERAL, min(1.0, (abs_roll - LATERAL_THRESHOLD_DEG) / 40 + 0.5)

    if abs_roll <= LATERAL_THRESHOLD_DEG and abs_pitch <= LATERAL_THRESHOLD_DEG:
        flatness = 1 - (abs_roll + abs_pitch) / (2 * LATERAL_THRESHOLD_DEG)
        return Posture.SUPINE, min(1.0, 0.6 + flatness * 0.4)

    # Tilted but ambiguous
    return Posture.UNKNOWN, 0.3


# ── Classifier ────────────────────────────────────────────────


class PostureClassifier:
    """Sliding-window posture classifier with a dwell-time hysteresis gate.

    Single-owner and non-reentrant: feed samples in arrival order from one
    logical thread of control.
    """

    def __init__(
        self,
        window_size: int = WINDOW_SIZE,
        min_samples: int = MIN_SAMPLES,
        hysteresis_ms: int = HYSTERESIS_MS,
    ) -> None:
        self._window: deque[AccelerometerSample] = deque(maxlen=window_size)
        self._min_samples = min_samples
        self._hysteresis_ms = hysteresis_ms
        self._state = HysteresisState()

    @property
    def window_length(self) -> int:
        return len(self._window)

    @property
    def current_posture(self) -> Posture:
        return self._state.current_posture

    def classify(self, sample: AccelerometerSample) -> PostureResult:
        """Add *sample* to the window and return the committed posture."""
        self._window.append(sample)

        if len(self._window) < self._min_samples:
            return PostureResult()

        xs = [s.x for s in self._window]
        ys = [s.y for s in self._window]
        zs = [s.z for s in self._window]

        angles, nz = compute_angles(_mean(xs), _mean(ys), _mean(zs))
        variance = (_pstdev(xs) + _pstdev(ys)) / 2

        raw_posture, confidence = classify_raw(angles.pitch, angles.roll, nz, variance)

        posture = self._apply_hysteresis(raw_posture, sample.timestamp)
        return PostureResult(
            posture=posture,
            confidence=confidence,
            raw_posture=raw_posture,
            raw_angles=angles,
        )

    def reset(self) -> None:
        """Clear the window and hysteresis state (session restart)."""
        self._window.clear()
        self._state = HysteresisState()

    # ── Internals ─────────────────────────────────────────────

    def _apply_hysteresis(self, raw: Posture, timestamp: int) -> Posture:
        state = self._state

        # No baseline yet: accept immediately
        if state.current_posture is Posture.UNKNOWN:
            state.current_posture = raw
            state.last_change_time = timestamp
            return raw

        if raw is state.current_posture:
            state.pending_posture = None
            state.pending_start_time = 0
            return state.current_posture

        if state.pending_posture is not raw:
            state.pending_posture = raw
            state.pending_start_time = timestamp

        if timestamp - state.pending_start_time >= self._hysteresis_ms:
            logger.info(
                "posture.committed",
                previous=state.current_posture.value,
                posture=raw.value,
                dwell_ms=timestamp - state.pending_start_time,
            )
            state.current_posture = raw
            state.last_change_time = timestamp
            state.pending_posture = None
            state.pending_start_time = 0
            return raw

        return state.current_posture
