"""Posture agent — fan speed from body position and sleep stage.

Different postures expose different body surface to airflow: supine gets
the most, prone the least (avoid a draft on the face).
"""

from __future__ import annotations

from dreambreeze.arbitration.blackboard import Blackboard
from dreambreeze.arbitration.models import POSTURE_AGENT, Hypothesis, SetFanSpeed
from dreambreeze.models import Posture, Priority, SleepStage

TTL_MS = 60_000

POSTURE_FAN_MAP: dict[Posture, int] = {
    Posture.SUPINE: 55,
    Posture.LEFT_LATERAL: 40,
    Posture.RIGHT_LATERAL: 40,
    Posture.PRONE: 25,
    Posture.FETAL: 30,  # curled up, likely cold
    Posture.UNKNOWN: 35,
}

SLEEP_STAGE_MODIFIER: dict[SleepStage, int] = {
    SleepStage.AWAKE: 0,
    SleepStage.LIGHT: -5,
    SleepStage.DEEP: -10,  # lower core temperature
    SleepStage.REM: 10,  # thermoregulation suspended
}


def run_posture_agent(board: Blackboard) -> None:
    ctx = board.get_context()
    base_speed = POSTURE_FAN_MAP.get(ctx.current_posture, 35)
    stage_mod = SLEEP_STAGE_MODIFIER.get(ctx.current_sleep_stage, 0)
    speed = max(0, min(100, base_speed + stage_mod))

    now = board.now()
    board.post_hypothesis(
        Hypothesis(
            agent_id=POSTURE_AGENT,
            timestamp=now,
            confidence=0.3 if ctx.current_posture is Posture.UNKNOWN else 0.85,
            priority=Priority.HIGH,
            action=SetFanSpeed(speed=speed),
            reasoning=(
                f'Posture "{ctx.current_posture.value}" + stage "{ctx.current_sleep_stage.value}"'
                f" → base {base_speed} + mod {stage_mod} = {speed}%"
            ),
            expires_at=now + TTL_MS,
        )
    )
