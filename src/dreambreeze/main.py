"""Application entrypoint — run a simulated sleep session from the command line."""

from __future__ import annotations

import argparse
import asyncio
import random
import sys

import structlog

from dreambreeze.arbitration.controller import ControllerConfig
from dreambreeze.config import get_settings
from dreambreeze.logger import setup_logging
from dreambreeze.models import AccelerometerSample, Posture, SleepStage, WeatherData
from dreambreeze.session import SleepSession
from dreambreeze.streaming.pipeline import MotionPipeline

logger = structlog.get_logger(__name__)

# Gravity vector (g) of a phone lying next to a sleeper in each posture
_POSTURE_VECTORS: dict[Posture, tuple[float, float, float]] = {
    Posture.SUPINE: (0.0, 0.0, 1.0),
    Posture.PRONE: (0.0, 0.0, -1.0),
    Posture.LEFT_LATERAL: (-0.7, 0.0, 0.7),
    Posture.RIGHT_LATERAL: (0.7, 0.0, 0.7),
}


def parse_script(script: str) -> list[tuple[Posture, float]]:
    """Parse ``"supine:2,left-lateral:1.5"`` into (posture, minutes) steps."""
    steps: list[tuple[Posture, float]] = []
    for part in script.split(","):
        name, _, minutes = part.strip().partition(":")
        posture = Posture(name)
        if posture not in _POSTURE_VECTORS:
            raise ValueError(f"cannot simulate posture {name!r}")
        steps.append((posture, float(minutes or 1)))
    return steps


def synthesize(
    steps: list[tuple[Posture, float]], hz: int, start_ms: int = 0, noise: float = 0.02,
) -> list[AccelerometerSample]:
    rng = random.Random(42)
    period_ms = 1000 // hz
    samples: list[AccelerometerSample] = []
    t = start_ms
    for posture, minutes in steps:
        x, y, z = _POSTURE_VECTORS[posture]
        for _ in range(int(minutes * 60 * hz)):
            samples.append(
                AccelerometerSample(
                    x=x + rng.gauss(0, noise),
                    y=y + rng.gauss(0, noise),
                    z=z + rng.gauss(0, noise),
                    timestamp=t,
                )
            )
            t += period_ms
    return samples


async def simulate(args: argparse.Namespace) -> None:
    """Replay synthetic samples through a session, one decision cycle per interval."""
    settings = get_settings()
    cycle_ms = int(args.cycle_seconds * 1000)
    sim_clock = [0]

    config = ControllerConfig.from_settings(
        settings,
        on_fan_speed=lambda speed: logger.info("actuator.fan", speed=speed),
        on_sound_change=lambda noise, volume: logger.info("actuator.sound", noise=noise, volume=volume),
        on_insight=lambda message, category: logger.info("actuator.insight", message=message, category=category),
        on_wake_sequence=lambda minutes: logger.info("actuator.wake", minutes_until_alarm=minutes),
    )
    config.cycle_interval_ms = cycle_ms
    session = SleepSession(config, settings=settings, clock=lambda: sim_clock[0])
    session.blackboard.reset()
    session.blackboard.update_context(current_sleep_stage=SleepStage(args.stage))
    if args.feels_like is not None:
        session.blackboard.update_context(
            weather_data=WeatherData(
                temperature_celsius=args.feels_like,
                humidity=args.humidity,
                feels_like=args.feels_like,
            )
        )

    pipeline = MotionPipeline(maxsize=settings.pipeline_max_queue)
    pipeline.add_consumer(session.consume)
    asyncio.create_task(pipeline.start())

    samples = synthesize(parse_script(args.script), args.hz)
    next_cycle = 0
    for sample in samples:
        sim_clock[0] = sample.timestamp
        pipeline.publish(sample)
        if sample.timestamp >= next_cycle:
            await pipeline.join()
            session.controller.run_cycle()
            next_cycle += cycle_ms

    await pipeline.join()
    await pipeline.stop()

    ctx = session.blackboard.get_context()
    print(
        f"Final posture: {ctx.current_posture.label} | "
        f"fan {session.controller.last_fan_speed:.0f}% after "
        f"{session.controller.get_cycle_count()} cycles"
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="dreambreeze",
        description="Sleep posture classification and fan/soundscape arbitration.",
    )
    sub = parser.add_subparsers(dest="command")

    # ── simulate ──────────────────────────────────────────────
    sim = sub.add_parser("simulate", help="Run a synthetic sleep session.")
    sim.add_argument("--script", default="supine:2,left-lateral:1,prone:1")
    sim.add_argument("--hz", type=int, default=50)
    sim.add_argument("--cycle-seconds", type=float, default=None)
    sim.add_argument("--stage", default=SleepStage.LIGHT.value, choices=[s.value for s in SleepStage])
    sim.add_argument("--feels-like", type=float, default=None)
    sim.add_argument("--humidity", type=float, default=50.0)

    args = parser.parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    if args.command == "simulate":
        if args.cycle_seconds is None:
            args.cycle_seconds = settings.controller_cycle_interval_seconds
        try:
            asyncio.run(simulate(args))
        except ValueError as exc:
            parser.error(str(exc))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
