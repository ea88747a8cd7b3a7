"""Rule-based sleep agents and the default registry wiring."""

from __future__ import annotations

from functools import partial

from dreambreeze.agents.energy import generate_energy_forecast, run_energy_agent
from dreambreeze.agents.posture import run_posture_agent
from dreambreeze.agents.sound import run_sound_agent
from dreambreeze.agents.thermal import run_thermal_agent
from dreambreeze.arbitration.blackboard import Blackboard
from dreambreeze.arbitration.models import ENERGY_AGENT, POSTURE_AGENT, SOUND_AGENT, THERMAL_AGENT
from dreambreeze.arbitration.registry import AgentRegistry, RegisteredAgent


def create_default_registry(board: Blackboard) -> AgentRegistry:
    """Registry with the posture, thermal, sound and energy agents bound to *board*."""
    return AgentRegistry(
        agents=[
            RegisteredAgent(POSTURE_AGENT, partial(run_posture_agent, board)),
            RegisteredAgent(THERMAL_AGENT, partial(run_thermal_agent, board)),
            RegisteredAgent(SOUND_AGENT, partial(run_sound_agent, board)),
            RegisteredAgent(ENERGY_AGENT, partial(run_energy_agent, board)),
        ]
    )


__all__ = [
    "create_default_registry",
    "generate_energy_forecast",
    "run_energy_agent",
    "run_posture_agent",
    "run_sound_agent",
    "run_thermal_agent",
]
