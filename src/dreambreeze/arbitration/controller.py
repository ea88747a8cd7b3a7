"""Blackboard controller — resolves conflicting agent hypotheses into actions.

One decision cycle
~~~~~~~~~~~~~~~~~~
1. Run every registered agent (they post hypotheses to the blackboard).
2. Read the live (non-expired) hypotheses.
3. ``SET_FAN_SPEED`` — confidence × priority-weighted average of proposed
   speeds, then rate-limited to ``max_fan_step`` per cycle.
4. ``SET_SOUND_TYPE`` — single winner by confidence × priority weight,
   ties broken by raw confidence.
5. ``LOG_INSIGHT`` — every insight passes through.
6. ``TRIGGER_WAKE_SEQUENCE`` — the last one posted wins.
7. Invoke the configured callbacks, then write the resolved actions back
   to the blackboard.

Integration::

    controller = create_controller(ControllerConfig(cycle_interval_ms=30_000,
                                                    on_fan_speed=fan.set_speed),
                                   blackboard)
    await controller.start()
    ...
    await controller.stop()
"""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from typing import Callable

import structlog

from dreambreeze.arbitration.blackboard import Blackboard
from dreambreeze.arbitration.models import (
    ActionType,
    Hypothesis,
    LogInsight,
    ResolvedAction,
    SetFanSpeed,
    SetSoundType,
    TriggerWakeSequence,
)
from dreambreeze.arbitration.registry import AgentRegistry
from dreambreeze.config import Settings

logger = structlog.get_logger(__name__)

MAX_FAN_STEP = 5
FAN_MIN = 0
FAN_MAX = 100


@dataclass
class ControllerConfig:
    """Cycle interval plus optional per-action-kind callbacks.

    Omitted callbacks are simply not invoked for their action kind.
    """

    cycle_interval_ms: int
    on_fan_speed: Callable[[int], None] | None = None
    on_sound_change: Callable[[str, float], None] | None = None
    on_insight: Callable[[str, str], None] | None = None
    on_wake_sequence: Callable[[float], None] | None = None
    max_fan_step: int = MAX_FAN_STEP

    @classmethod
    def from_settings(cls, settings: Settings, **callbacks: Callable[..., None]) -> ControllerConfig:
        """Interval and fan step from *settings*; callbacks passed through."""
        return cls(
            cycle_interval_ms=int(settings.controller_cycle_interval_seconds * 1000),
            max_fan_step=settings.fan_max_step,
            **callbacks,
        )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def weighted_fan_target(hypotheses: list[Hypothesis]) -> int | None:
    """Σ(speed·confidence·weight) / Σ(confidence·weight), rounded.

    Returns ``None`` when there is nothing to average.
    """
    total_weight = 0.0
    weighted_speed = 0.0
    for h in hypotheses:
        weight = h.score
        weighted_speed += h.action.speed * weight
        total_weight += weight
    if total_weight <= 0:
        return None
    return _round_half_up(weighted_speed / total_weight)


def smooth_fan_speed(target: int, last: float, max_step: int = MAX_FAN_STEP) -> int:
    """Clamp the change from *last* to *target* to ``±max_step``."""
    delta = target - last
    if abs(delta) > max_step:
        target = last + math.copysign(max_step, delta)
    return int(max(FAN_MIN, min(FAN_MAX, target)))


def select_sound(hypotheses: list[Hypothesis]) -> Hypothesis | None:
    """Highest confidence × priority weight; ties go to higher confidence."""
    if not hypotheses:
        return None
    return max(hypotheses, key=lambda h: (h.score, h.confidence))


class BlackboardController:
    """Periodic arbitration loop over one :class:`Blackboard`."""

    def __init__(
        self,
        config: ControllerConfig,
        blackboard: Blackboard,
        registry: AgentRegistry | None = None,
    ) -> None:
        self._config = config
        self._blackboard = blackboard
        self._registry = registry or AgentRegistry()
        self._last_fan_speed: float = 0.0
        self._cycle_count = 0
        self._running = False
        self._task: asyncio.Task | None = None

    # ── Lifecycle ─────────────────────────────────────────────

    async def start(self) -> None:
        """Run one cycle immediately, then one every ``cycle_interval_ms``.

        No-op when already running.  A cycle that raises is logged as
        ``controller.cycle_error`` and the schedule carries on.
        """
        if self._running:
            return
        self._running = True
        self._guarded_cycle()
        self._task = asyncio.create_task(self._run_loop())
        logger.info(
            "controller.started",
            interval_ms=self._config.cycle_interval_ms,
            agents=len(self._registry),
        )

    async def stop(self) -> None:
        """Cancel the schedule and reset runtime state.  Idempotent."""
        was_running = self._running
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._cycle_count = 0
        self._last_fan_speed = 0.0
        if was_running:
            logger.info("controller.stopped")

    @property
    def config(self) -> ControllerConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_fan_speed(self) -> float:
        return self._last_fan_speed

    def get_cycle_count(self) -> int:
        return self._cycle_count

    # ── Decision cycle ────────────────────────────────────────

    def run_cycle(self) -> list[ResolvedAction]:
        """Execute one full decision cycle and return what was resolved."""
        self._cycle_count += 1

        for agent in self._registry.get_all():
            try:
                agent.run()
            except Exception as exc:
                logger.error("controller.agent_error", agent=agent.id, error=str(exc))

        hypotheses = self._blackboard.get_hypotheses()
        resolved = self._resolve(hypotheses)
        self._execute(resolved)
        self._blackboard.resolve(resolved)

        logger.debug(
            "controller.cycle",
            cycle=self._cycle_count,
            hypotheses=len(hypotheses),
            resolved=[r.action.type for r in resolved],
            fan_speed=self._last_fan_speed,
        )
        return resolved

    # ── Internals ─────────────────────────────────────────────

    async def _run_loop(self) -> None:
        interval = self._config.cycle_interval_ms / 1000
        while self._running:
            await asyncio.sleep(interval)
            if not self._running:
                break
            self._guarded_cycle()

    def _guarded_cycle(self) -> None:
        try:
            self.run_cycle()
        except Exception:
            logger.exception("controller.cycle_error", cycle=self._cycle_count)

    def _resolve(self, hypotheses: list[Hypothesis]) -> list[ResolvedAction]:
        by_type: dict[ActionType, list[Hypothesis]] = {t: [] for t in ActionType}
        for h in hypotheses:
            by_type[ActionType(h.action.type)].append(h)

        now = self._blackboard.now()
        resolved: list[ResolvedAction] = []

        fan = by_type[ActionType.SET_FAN_SPEED]
        target = weighted_fan_target(fan)
        if target is not None:
            speed = smooth_fan_speed(target, self._last_fan_speed, self._config.max_fan_step)
            self._last_fan_speed = speed
            resolved.append(
                ResolvedAction(
                    action=SetFanSpeed(speed=speed),
                    source_agents=list(dict.fromkeys(h.agent_id for h in fan)),
                    confidence=max(h.confidence for h in fan),
                    timestamp=now,
                )
            )

        best_sound = select_sound(by_type[ActionType.SET_SOUND_TYPE])
        if best_sound is not None:
            resolved.append(self._pass_through(best_sound, now))

        for h in by_type[ActionType.LOG_INSIGHT]:
            resolved.append(self._pass_through(h, now))

        wake = by_type[ActionType.TRIGGER_WAKE_SEQUENCE]
        if wake:
            resolved.append(self._pass_through(wake[-1], now))

        return resolved

    @staticmethod
    def _pass_through(h: Hypothesis, now: int) -> ResolvedAction:
        return ResolvedAction(
            action=h.action,
            source_agents=[h.agent_id],
            confidence=h.confidence,
            timestamp=now,
        )

    def _execute(self, resolved: list[ResolvedAction]) -> None:
        cfg = self._config
        for item in resolved:
            action = item.action
            if isinstance(action, SetFanSpeed):
                self._invoke(cfg.on_fan_speed, int(action.speed))
            elif isinstance(action, SetSoundType):
                self._invoke(cfg.on_sound_change, action.noise_type.value, action.volume)
            elif isinstance(action, LogInsight):
                self._invoke(cfg.on_insight, action.message, action.category)
            elif isinstance(action, TriggerWakeSequence):
                self._invoke(cfg.on_wake_sequence, action.minutes_until_alarm)

    @staticmethod
    def _invoke(callback: Callable[..., None] | None, *args: object) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as exc:
            logger.error(
                "controller.callback_error",
                callback=getattr(callback, "__qualname__", repr(callback)),
                error=str(exc),
            )


def create_controller(
    config: ControllerConfig,
    blackboard: Blackboard,
    registry: AgentRegistry | None = None,
) -> BlackboardController:
    """Factory mirroring the session wiring."""
    return BlackboardController(config, blackboard, registry)
