#!/usr/bin/env python3
"""
Track Replay - Main Application

Replays a synthetic vessel fleet either headless (frames simulated at a
fixed interval, final state logged) or behind the HTTP control API.
"""

import argparse
import logging
import signal
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import uvicorn

from track_replay.config import LoggingConfig, ReplayConfig, load_config
from track_replay.domain.track_gen import generate_umbrella_fan
from track_replay.domain.vessels import vessel_layer
from track_replay.layers.registry import LayerRegistry
from track_replay.replay.clock import AsyncioFrameScheduler, FrameScheduler, ManualFrameScheduler
from track_replay.replay.session import ReplaySession
from track_replay.replay.source import TrackReplaySource

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_config: LoggingConfig, debug: bool = False):
    """Configure logging based on config."""
    level = logging.DEBUG if debug else getattr(logging, log_config.level.upper())

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )

    if log_config.file:
        log_path = Path(log_config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        handler = RotatingFileHandler(
            log_config.file,
            maxBytes=log_config.max_size_mb * 1024 * 1024,
            backupCount=log_config.backup_count,
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def build_session(config: ReplayConfig, scheduler: FrameScheduler) -> ReplaySession:
    """Generate the fleet and wire source, layers, clock and driver."""
    fleet = config.fleet
    tracks = generate_umbrella_fan(
        origin_lat=fleet.origin_lat,
        origin_lng=fleet.origin_lng,
        base_heading_deg=fleet.base_heading_deg,
        speed_kn=fleet.speed_kn,
        minutes=fleet.minutes,
        hz=fleet.hz,
        lateral_spacing_m=fleet.lateral_spacing_m,
    )
    logger.info(f"Generated {len(tracks)} tracks for layer {fleet.layer_id}")

    registry = LayerRegistry()
    registry.register_layer(vessel_layer(fleet.layer_id, title=fleet.title))

    return ReplaySession(
        scheduler=scheduler,
        source=TrackReplaySource(fleet.layer_id, tracks),
        registry=registry,
        speed=config.clock.speed,
    )


def run_headless(config: ReplayConfig, duration_s: Optional[float] = None) -> ReplaySession:
    """
    Replay without a real frame source.

    Frames are simulated every frame_interval_ms of wall time until the
    virtual clock reaches duration_s (or the end of the tracks).
    """
    frame_ms = config.clock.frame_interval_ms
    if frame_ms <= 0:
        raise ValueError(f"frame_interval_ms must be positive, got {frame_ms}")

    scheduler = ManualFrameScheduler()
    session = build_session(config, scheduler)

    end_ms = session.end_time_ms or 0.0
    if duration_s is not None:
        end_ms = min(end_ms, duration_s * 1000.0)

    session.start()
    session.clock.play()

    frames = 0
    while session.clock.get_time() < end_ms:
        scheduler.advance(frame_ms)
        frames += 1

    session.stop()

    logger.info(f"Replayed {session.clock.get_time() / 1000.0:.1f}s in {frames} frames")
    for layer in session.registry.list_layers():
        logger.info(f"Layer {layer.layer_id}: {layer.to_dict().get('entity_count', 0)} entities")

    return session


def serve(config: ReplayConfig):
    """Run the HTTP control API."""
    from track_replay.api.server import create_app

    scheduler = AsyncioFrameScheduler(frame_interval_ms=config.clock.frame_interval_ms)
    session = build_session(config, scheduler)
    app = create_app(session)

    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="info",
    )


def main():
    parser = argparse.ArgumentParser(description="Track Replay")
    parser.add_argument(
        "-c", "--config",
        default="config/replay.yaml",
        help="Path to configuration file",
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP control API instead of a headless replay",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Seconds of virtual time to replay headless (default: whole track)",
    )

    args = parser.parse_args()

    config = load_config(args.config)
    setup_logging(config.logging, debug=args.debug)

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}")
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    if args.serve:
        serve(config)
    else:
        run_headless(config, args.duration)


if __name__ == "__main__":
    main()
