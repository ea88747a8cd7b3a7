"""Pydantic models for the blackboard arbitration subsystem.

These models represent:
- The closed set of actuator actions agents may propose
- Hypotheses (scored, expiring proposals) posted by agents
- Resolved actions produced by one controller cycle
- A read-only snapshot of the blackboard for UI / debugging
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from dreambreeze.models import NoiseType, Priority, SleepContext

# ── Agent identifiers ────────────────────────────────────────

POSTURE_AGENT = "posture-agent"
THERMAL_AGENT = "thermal-agent"
SOUND_AGENT = "sound-agent"
ENERGY_AGENT = "energy-agent"


# ── Actions ───────────────────────────────────────────────────


class ActionType(str, Enum):
    """Discriminator for :data:`Action`."""

    SET_FAN_SPEED = "SET_FAN_SPEED"
    SET_SOUND_TYPE = "SET_SOUND_TYPE"
    LOG_INSIGHT = "LOG_INSIGHT"
    TRIGGER_WAKE_SEQUENCE = "TRIGGER_WAKE_SEQUENCE"


class SetFanSpeed(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["SET_FAN_SPEED"] = "SET_FAN_SPEED"
    speed: float = Field(ge=0, le=100)


class SetSoundType(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["SET_SOUND_TYPE"] = "SET_SOUND_TYPE"
    noise_type: NoiseType
    volume: float = Field(ge=0.0, le=1.0)


class LogInsight(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["LOG_INSIGHT"] = "LOG_INSIGHT"
    message: str
    category: str


class TriggerWakeSequence(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["TRIGGER_WAKE_SEQUENCE"] = "TRIGGER_WAKE_SEQUENCE"
    minutes_until_alarm: float = Field(ge=0)


Action = Annotated[
    Union[SetFanSpeed, SetSoundType, LogInsight, TriggerWakeSequence],
    Field(discriminator="type"),
]


# ── Hypotheses ────────────────────────────────────────────────


class Hypothesis(BaseModel):
    """A timestamped, scored proposal of one action by one agent.

    Keyed on the blackboard by ``(agent_id, action.type)``; a later post
    with the same key replaces this one.  Excluded from reads once the
    blackboard clock passes ``expires_at``.
    """

    model_config = ConfigDict(frozen=True)

    agent_id: str = Field(min_length=1)
    timestamp: int  # epoch milliseconds
    confidence: float = Field(ge=0.0, le=1.0)
    priority: Priority = Priority.MEDIUM
    action: Action
    reasoning: str = ""
    expires_at: int  # epoch milliseconds

    @property
    def key(self) -> tuple[str, ActionType]:
        return self.agent_id, ActionType(self.action.type)

    @property
    def score(self) -> float:
        """Confidence scaled by priority weight."""
        return self.confidence * self.priority.weight


class ResolvedAction(BaseModel):
    """Output of one arbitration cycle for one action kind."""

    model_config = ConfigDict(frozen=True)

    action: Action
    source_agents: list[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    timestamp: int


class BlackboardSnapshot(BaseModel):
    """Read-only view of the blackboard."""

    model_config = ConfigDict(frozen=True)

    hypotheses: list[Hypothesis]
    context: SleepContext
    resolved_actions: list[ResolvedAction]
