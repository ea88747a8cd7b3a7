"""Sleep session — owns the classifier, blackboard and controller for one night.

Data flow::

    AccelerometerSample ─► PostureClassifier ─► Blackboard.context
                                                    │ (every cycle)
                               agents ─► hypotheses ─► BlackboardController
                                                    │
                                         fan / sound / insight / wake callbacks

A session is created at bedtime and discarded in the morning; nothing is
shared between sessions.
"""

from __future__ import annotations

import uuid

import structlog

from dreambreeze.agents import create_default_registry
from dreambreeze.arbitration.blackboard import Blackboard, Clock
from dreambreeze.arbitration.controller import BlackboardController, ControllerConfig
from dreambreeze.arbitration.registry import AgentRegistry
from dreambreeze.config import Settings, get_settings
from dreambreeze.logger import bind_session, unbind_session
from dreambreeze.models import AccelerometerSample, PostureResult
from dreambreeze.sensors.posture import PostureClassifier
from dreambreeze.sleep_debt import NightRecord, calculate_sleep_debt

logger = structlog.get_logger(__name__)


class SleepSession:
    """Wire one classifier, one blackboard and one controller together.

    Integration::

        session = SleepSession(ControllerConfig.from_settings(get_settings(),
                                                              on_fan_speed=fan.set_speed))
        await session.start()
        pipeline.add_consumer(session.consume)
        ...
        await session.stop()
    """

    def __init__(
        self,
        controller_config: ControllerConfig | None = None,
        *,
        settings: Settings | None = None,
        blackboard: Blackboard | None = None,
        registry: AgentRegistry | None = None,
        clock: Clock | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.session_id = str(uuid.uuid4())
        self.blackboard = blackboard or Blackboard(clock=clock)
        self.classifier = PostureClassifier(
            window_size=settings.posture_window_size,
            min_samples=settings.posture_min_samples,
            hysteresis_ms=settings.posture_hysteresis_ms,
        )
        if controller_config is None:
            controller_config = ControllerConfig.from_settings(settings)
        self.registry = registry if registry is not None else create_default_registry(self.blackboard)
        self.controller = BlackboardController(controller_config, self.blackboard, self.registry)
        self._started_at: int | None = None

    # ── Lifecycle ─────────────────────────────────────────────

    async def start(self, nights: list[NightRecord] | None = None) -> None:
        """Reset all state, seed sleep debt from *nights*, start the controller."""
        bind_session(self.session_id)
        self.classifier.reset()
        self.blackboard.reset()
        self._started_at = None
        if nights:
            debt = calculate_sleep_debt(nights)
            self.blackboard.update_context(sleep_debt=debt.total_debt_hours)
        logger.info("session.started")
        await self.controller.start()

    async def stop(self) -> None:
        await self.controller.stop()
        self.classifier.reset()
        logger.info("session.stopped", posture=self.blackboard.get_context().current_posture.value)
        unbind_session()

    # ── Sensor input ──────────────────────────────────────────

    def ingest(self, sample: AccelerometerSample) -> PostureResult:
        """Classify *sample* and publish posture / elapsed time to the context."""
        result = self.classifier.classify(sample)
        if self._started_at is None:
            self._started_at = sample.timestamp

        ctx = self.blackboard.get_context()
        patch: dict[str, object] = {}
        if result.posture is not ctx.current_posture:
            patch["current_posture"] = result.posture
        elapsed_minutes = (sample.timestamp - self._started_at) / 60_000
        if int(elapsed_minutes) != int(ctx.session_duration_minutes):
            patch["session_duration_minutes"] = elapsed_minutes
        if patch:
            self.blackboard.update_context(**patch)
        return result

    async def consume(self, sample: AccelerometerSample) -> None:
        """:class:`MotionPipeline` consumer adapter for :meth:`ingest`."""
        self.ingest(sample)
