"""Tests for session wiring: sensor → classifier → blackboard → controller."""

import asyncio
from datetime import date, timedelta

import pytest

from dreambreeze.arbitration.blackboard import Blackboard
from dreambreeze.arbitration.controller import ControllerConfig
from dreambreeze.arbitration.registry import AgentRegistry
from dreambreeze.config import Settings
from dreambreeze.models import AccelerometerSample, Posture
from dreambreeze.session import SleepSession
from dreambreeze.sleep_debt import NightRecord
from dreambreeze.streaming.pipeline import MotionPipeline


@pytest.fixture
def settings() -> Settings:
    return Settings(posture_hysteresis_ms=10_000, posture_window_size=50, posture_min_samples=5)


def _supine(t: int) -> AccelerometerSample:
    return AccelerometerSample(x=0.0, y=0.0, z=1.0, timestamp=t)


class TestIngest:
    def test_posture_reaches_context(self, settings, clock):
        session = SleepSession(ControllerConfig(cycle_interval_ms=30_000), settings=settings, clock=clock)
        for i in range(5):
            result = session.ingest(_supine(i * 20))

        assert result.posture == Posture.SUPINE
        assert session.blackboard.get_context().current_posture == Posture.SUPINE

    def test_session_duration_tracks_sample_time(self, settings, clock):
        session = SleepSession(ControllerConfig(cycle_interval_ms=30_000), settings=settings, clock=clock)
        session.ingest(_supine(0))
        session.ingest(_supine(90_000))
        assert session.blackboard.get_context().session_duration_minutes == pytest.approx(1.5)

    def test_duration_updates_are_coalesced_per_minute(self, settings, clock):
        session = SleepSession(ControllerConfig(cycle_interval_ms=30_000), settings=settings, clock=clock)
        notifications = []
        session.blackboard.subscribe(lambda: notifications.append(1))

        for t in range(0, 30_000, 20):
            session.ingest(_supine(t))
        assert len(notifications) == 1  # posture committed once

    def test_injected_blackboard_and_registry_are_used(self, settings, clock):
        board = Blackboard(clock=clock)
        session = SleepSession(
            ControllerConfig(cycle_interval_ms=30_000),
            settings=settings,
            blackboard=board,
            registry=AgentRegistry(),
        )
        assert session.blackboard is board
        assert len(session.registry) == 0

    def test_controller_config_defaults_come_from_settings(self, clock):
        settings = Settings(controller_cycle_interval_seconds=12.5, fan_max_step=3)
        session = SleepSession(settings=settings, clock=clock, registry=AgentRegistry())
        assert session.controller.config.cycle_interval_ms == 12_500
        assert session.controller.config.max_fan_step == 3

    def test_settings_fan_step_limits_first_cycle(self, clock, make_hypothesis):
        settings = Settings(fan_max_step=3)
        session = SleepSession(settings=settings, clock=clock, registry=AgentRegistry())
        session.blackboard.post_hypothesis(make_hypothesis())
        session.controller.run_cycle()
        assert session.controller.last_fan_speed == 3


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_seeds_sleep_debt_and_runs_first_cycle(self, settings):
        fan: list[int] = []
        session = SleepSession(
            ControllerConfig(cycle_interval_ms=30_000, on_fan_speed=fan.append), settings=settings,
        )
        nights = [
            NightRecord(date=date(2026, 3, 1) - timedelta(days=i), hours_slept=6, sleep_quality=100)
            for i in range(3)
        ]

        await session.start(nights)
        try:
            assert session.blackboard.get_context().sleep_debt == pytest.approx(6.0)
            assert session.controller.get_cycle_count() == 1
            assert fan == [5]
            resolved_types = {r.action.type for r in session.blackboard.get_resolved_actions()}
            assert {"SET_FAN_SPEED", "SET_SOUND_TYPE", "LOG_INSIGHT"} <= resolved_types
        finally:
            await session.stop()

        assert session.controller.get_cycle_count() == 0

    @pytest.mark.asyncio
    async def test_pipeline_feeds_session(self, settings):
        session = SleepSession(
            ControllerConfig(cycle_interval_ms=30_000), settings=settings, registry=AgentRegistry(),
        )
        pipeline = MotionPipeline()
        pipeline.add_consumer(session.consume)
        asyncio.create_task(pipeline.start())

        pipeline.publish_batch([_supine(i * 20) for i in range(10)])
        await pipeline.join()
        await pipeline.stop()

        assert session.classifier.window_length == 10
        assert session.blackboard.get_context().current_posture == Posture.SUPINE
