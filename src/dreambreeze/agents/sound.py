"""Sound agent — soundscape selection by sleep stage and pre-sleep context.

White noise for sleep onset, pink noise to support slow-wave sleep, brown
noise to mask low-frequency disturbances without disrupting REM.
"""

from __future__ import annotations

from dataclasses import dataclass

from dreambreeze.arbitration.blackboard import Blackboard
from dreambreeze.arbitration.models import SOUND_AGENT, Hypothesis, SetSoundType
from dreambreeze.models import NoiseType, Priority, SleepStage, TimeOfNight

TTL_MS = 60_000
CAFFEINE_THRESHOLD_MG = 100


@dataclass(slots=True)
class SoundRecommendation:
    noise_type: NoiseType
    volume: float
    reasoning: str


def sound_for_stage(stage: SleepStage, stress_level: int | None = None) -> SoundRecommendation:
    if stage is SleepStage.AWAKE:
        stressed = stress_level is not None and stress_level > 3
        return SoundRecommendation(
            NoiseType.BROWN if stressed else NoiseType.WHITE,
            0.4,
            "Sleep onset — white noise for consistent masking, brown if stressed",
        )
    if stage is SleepStage.LIGHT:
        return SoundRecommendation(
            NoiseType.PINK, 0.35, "Light sleep — pink noise to encourage transition to deep",
        )
    if stage is SleepStage.DEEP:
        return SoundRecommendation(
            NoiseType.PINK, 0.25, "Deep sleep — low-volume pink noise for slow-wave enhancement",
        )
    if stage is SleepStage.REM:
        return SoundRecommendation(
            NoiseType.BROWN, 0.3, "REM sleep — brown noise masks external sounds without disruption",
        )
    return SoundRecommendation(NoiseType.WHITE, 0.3, "Default")


def run_sound_agent(board: Blackboard) -> None:
    ctx = board.get_context()
    pre_sleep = ctx.pre_sleep_context
    rec = sound_for_stage(
        ctx.current_sleep_stage,
        stress_level=pre_sleep.stress_level if pre_sleep else None,
    )

    # Quieter before the alarm so the sleeper can surface naturally
    if ctx.time_of_night is TimeOfNight.PRE_WAKE:
        rec.volume = max(0.1, rec.volume - 0.15)
        rec.reasoning += " | Pre-wake: reducing volume for natural arousal"

    if (
        pre_sleep is not None
        and pre_sleep.caffeine_mg > CAFFEINE_THRESHOLD_MG
        and ctx.current_sleep_stage is SleepStage.AWAKE
    ):
        rec.volume = min(0.6, rec.volume + 0.1)
        rec.reasoning += f" | Caffeine ({pre_sleep.caffeine_mg:g}mg) — increased masking"

    now = board.now()
    board.post_hypothesis(
        Hypothesis(
            agent_id=SOUND_AGENT,
            timestamp=now,
            confidence=0.7,
            priority=Priority.MEDIUM,
            action=SetSoundType(noise_type=rec.noise_type, volume=round(rec.volume, 2)),
            reasoning=rec.reasoning,
            expires_at=now + TTL_MS,
        )
    )
