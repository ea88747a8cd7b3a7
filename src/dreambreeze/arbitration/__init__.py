"""Blackboard arbitration — shared hypothesis store and conflict resolution.

Architecture
------------
1. **Models** (`models.py`) — closed Action union, Hypothesis,
   ResolvedAction, BlackboardSnapshot.
2. **Blackboard** (`blackboard.py`) — per-session context / hypothesis
   store with lazy expiry and synchronous change notification.
3. **Registry** (`registry.py`) — ordered, id-unique agent collection.
4. **Controller** (`controller.py`) — periodic decision cycle: weighted
   fan-speed vote with rate limiting, best-score soundscape, insight
   pass-through and wake-sequence triggering.
"""

from dreambreeze.arbitration.blackboard import Blackboard, now_ms
from dreambreeze.arbitration.controller import (
    BlackboardController,
    ControllerConfig,
    create_controller,
)
from dreambreeze.arbitration.models import (
    Action,
    ActionType,
    BlackboardSnapshot,
    Hypothesis,
    LogInsight,
    ResolvedAction,
    SetFanSpeed,
    SetSoundType,
    TriggerWakeSequence,
)
from dreambreeze.arbitration.registry import AgentRegistry, RegisteredAgent

__all__ = [
    "Action",
    "ActionType",
    "AgentRegistry",
    "Blackboard",
    "BlackboardController",
    "BlackboardSnapshot",
    "ControllerConfig",
    "Hypothesis",
    "LogInsight",
    "RegisteredAgent",
    "ResolvedAction",
    "SetFanSpeed",
    "SetSoundType",
    "TriggerWakeSequence",
    "create_controller",
    "now_ms",
]
