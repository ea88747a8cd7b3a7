"""Tests for the blackboard store."""

import pytest
from pydantic import ValidationError

from dreambreeze.arbitration.models import (
    LogInsight,
    ResolvedAction,
    SetFanSpeed,
    SetSoundType,
)
from dreambreeze.models import (
    NoiseType,
    Posture,
    PreSleepContext,
    SleepStage,
    TimeOfNight,
    WeatherData,
)


class TestHypotheses:
    def test_same_agent_same_kind_replaces(self, board, make_hypothesis):
        board.post_hypothesis(make_hypothesis(action=SetFanSpeed(speed=30)))
        board.post_hypothesis(make_hypothesis(action=SetFanSpeed(speed=70)))

        hyps = board.get_hypotheses()
        assert len(hyps) == 1
        assert hyps[0].action.speed == 70

    def test_different_agents_are_both_kept(self, board, make_hypothesis):
        board.post_hypothesis(make_hypothesis(agent_id="posture-agent"))
        board.post_hypothesis(make_hypothesis(agent_id="thermal-agent"))
        assert len(board.get_hypotheses()) == 2

    def test_same_agent_different_kind_are_both_kept(self, board, make_hypothesis):
        board.post_hypothesis(make_hypothesis())
        board.post_hypothesis(
            make_hypothesis(action=SetSoundType(noise_type=NoiseType.PINK, volume=0.3))
        )
        kinds = {h.action.type for h in board.get_hypotheses()}
        assert kinds == {"SET_FAN_SPEED", "SET_SOUND_TYPE"}

    def test_replacement_keeps_position(self, board, make_hypothesis):
        board.post_hypothesis(make_hypothesis(agent_id="a", confidence=0.1))
        board.post_hypothesis(make_hypothesis(agent_id="b"))
        board.post_hypothesis(make_hypothesis(agent_id="a", confidence=0.9))

        hyps = board.get_hypotheses()
        assert [h.agent_id for h in hyps] == ["a", "b"]
        assert hyps[0].confidence == 0.9

    def test_expired_hypotheses_are_filtered_on_read(self, board, clock, make_hypothesis):
        board.post_hypothesis(make_hypothesis(agent_id="short", expires_at=clock.now + 1_000))
        board.post_hypothesis(make_hypothesis(agent_id="long", expires_at=clock.now + 60_000))

        clock.advance(1_000)
        assert [h.agent_id for h in board.get_hypotheses()] == ["long"]

        clock.advance(60_000)
        assert board.get_hypotheses() == []

    def test_dict_input_is_validated(self, board, clock):
        stored = board.post_hypothesis({
            "agent_id": "sound-agent",
            "timestamp": clock.now,
            "confidence": 0.7,
            "priority": "medium",
            "action": {"type": "SET_SOUND_TYPE", "noise_type": "brown", "volume": 0.3},
            "expires_at": clock.now + 60_000,
        })
        assert isinstance(stored.action, SetSoundType)
        assert stored.action.noise_type == NoiseType.BROWN

    def test_unknown_action_kind_is_rejected(self, board, clock):
        with pytest.raises(ValidationError):
            board.post_hypothesis({
                "agent_id": "energy-agent",
                "timestamp": clock.now,
                "confidence": 0.7,
                "action": {"type": "ADJUST_FAN_DELTA", "delta": 15},
                "expires_at": clock.now + 60_000,
            })
        assert board.get_hypotheses() == []

    def test_out_of_range_confidence_is_rejected(self, board, make_hypothesis):
        with pytest.raises(ValidationError):
            board.post_hypothesis(make_hypothesis(confidence=1.5))


class TestContext:
    def test_defaults(self, board):
        ctx = board.get_context()
        assert ctx.current_posture == Posture.UNKNOWN
        assert ctx.current_sleep_stage == SleepStage.AWAKE
        assert ctx.session_duration_minutes == 0
        assert ctx.weather_data is None
        assert ctx.pre_sleep_context is None
        assert ctx.time_of_night == TimeOfNight.EARLY
        assert ctx.sleep_debt == 0

    def test_update_merges_shallowly(self, board):
        board.update_context(current_posture=Posture.PRONE)
        board.update_context(current_sleep_stage="deep", sleep_debt=3.5)

        ctx = board.get_context()
        assert ctx.current_posture == Posture.PRONE
        assert ctx.current_sleep_stage == SleepStage.DEEP
        assert ctx.sleep_debt == 3.5

    def test_nested_models_survive_merge(self, board):
        weather = WeatherData(temperature_celsius=25, humidity=60, feels_like=26)
        board.update_context(weather_data=weather)
        board.update_context(current_posture=Posture.SUPINE)
        assert board.get_context().weather_data == weather

    def test_unknown_field_is_rejected(self, board):
        with pytest.raises(ValidationError):
            board.update_context(heart_rate=60)

    def test_returned_context_is_a_copy(self, board):
        ctx = board.get_context()
        ctx.current_posture = Posture.FETAL
        assert board.get_context().current_posture == Posture.UNKNOWN

    def test_nested_context_models_are_copied(self, board):
        board.update_context(
            weather_data=WeatherData(temperature_celsius=25, humidity=60, feels_like=26),
            pre_sleep_context=PreSleepContext(stress_level=2),
        )
        ctx = board.get_context()
        ctx.weather_data.humidity = 95
        ctx.pre_sleep_context.stress_level = 5

        fresh = board.get_context()
        assert fresh.weather_data.humidity == 60
        assert fresh.pre_sleep_context.stress_level == 2


class TestSubscriptions:
    def test_every_mutation_notifies(self, board, make_hypothesis):
        calls = []
        board.subscribe(lambda: calls.append("x"))

        board.post_hypothesis(make_hypothesis())
        board.update_context(current_posture=Posture.SUPINE)
        board.resolve([])
        board.reset()
        assert len(calls) == 4

    def test_listeners_fire_in_subscription_order(self, board):
        order = []
        board.subscribe(lambda: order.append(1))
        board.subscribe(lambda: order.append(2))
        board.update_context(sleep_debt=1.0)
        assert order == [1, 2]

    def test_unsubscribe_is_idempotent_and_isolated(self, board):
        a, b = [], []
        unsub_a = board.subscribe(lambda: a.append(1))
        board.subscribe(lambda: b.append(1))

        unsub_a()
        unsub_a()
        board.update_context(sleep_debt=1.0)

        assert a == []
        assert b == [1]


class TestResetAndSnapshot:
    def test_snapshot_combines_views(self, board, make_hypothesis, clock):
        board.post_hypothesis(make_hypothesis())
        resolved = ResolvedAction(
            action=LogInsight(message="hi", category="test"),
            source_agents=["energy-agent"],
            confidence=0.9,
            timestamp=clock.now,
        )
        board.resolve([resolved])

        snap = board.get_snapshot()
        assert len(snap.hypotheses) == 1
        assert snap.resolved_actions == [resolved]
        assert snap.context == board.get_context()

    def test_reset_clears_everything(self, board, make_hypothesis, clock):
        board.post_hypothesis(make_hypothesis())
        board.update_context(current_posture=Posture.PRONE, sleep_debt=4.0)
        board.resolve([
            ResolvedAction(action=SetFanSpeed(speed=5), confidence=0.8, timestamp=clock.now),
        ])

        board.reset()

        assert board.get_hypotheses() == []
        assert board.get_resolved_actions() == []
        ctx = board.get_context()
        assert ctx.current_posture == Posture.UNKNOWN
        assert ctx.sleep_debt == 0
