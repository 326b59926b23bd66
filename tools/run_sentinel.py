from __future__ import annotations

import argparse
import contextlib
import logging
from dataclasses import replace
from typing import Optional

from alerts.audio import BellAlert, NullAudio
from analysis.motion.dispatcher import AlertDispatcher, DispatcherConfig
from analysis.motion.events import AlertStatus
from analysis.motion.log import MotionLog
from analysis.motion.pipeline import SamplingLoop, TickReport
from capture.nonblocking_adapter import wrap_nonblocking
from capture.reader import ReaderConfig, ReaderFactory
from capture.sampler import DEFAULT_MAX_STALE_S, FrameSampler
from common.config import load_config_module, motion_config_from_cfg
from describe.client import DescriptionClient, description_config_from_cfg

_LOG = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Run frame-differencing motion detection with alerting.",
    )
    ap.add_argument(
        "--prefer",
        type=str,
        choices=["camera", "null"],
        default="camera",
        help='Capture backend ("camera" for a local device, "null" for synthetic frames).',
    )
    ap.add_argument("--camera-index", type=int, default=0, help="cv2.VideoCapture index.")
    ap.add_argument("--mirror", action="store_true", help="Flip frames horizontally.")
    ap.add_argument(
        "--config-module",
        type=str,
        default=None,
        help="Importable Python module with SENSITIVITY, TRIGGER_THRESHOLD, ... overrides.",
    )

    # Detection tuning; unset flags fall back to the config module, then defaults.
    ap.add_argument(
        "--sensitivity",
        type=float,
        default=None,
        help="Per-pixel |dR|+|dG|+|dB| threshold (lower = more sensitive).",
    )
    ap.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Changed-pixel count that must be exceeded to declare motion.",
    )
    ap.add_argument(
        "--cooldown",
        type=float,
        default=None,
        help="Seconds between logged alerts.",
    )
    ap.add_argument("--no-audio", action="store_true", help="Disable the audio alert.")
    ap.add_argument("--no-ai", action="store_true", help="Disable snapshot descriptions.")

    ap.add_argument("--tick-ms", type=int, default=100, help="Sampling period in ms.")
    ap.add_argument("--max-logs", type=int, default=20, help="Motion log capacity.")
    ap.add_argument(
        "--max-stale",
        type=float,
        default=DEFAULT_MAX_STALE_S,
        help="Seconds without a new frame before ticks are skipped (0 disables).",
    )
    ap.add_argument(
        "--max-seconds",
        type=int,
        default=0,
        help="If > 0, stop after this many seconds; otherwise run until Ctrl+C.",
    )
    ap.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return ap


class _StatusReporter:
    """Log status flips instead of every tick."""

    def __init__(self) -> None:
        self._last: Optional[AlertStatus] = None

    def __call__(self, report: TickReport) -> None:
        if report.status is not self._last:
            _LOG.info(
                "Status %s (score %d / %d, hull=%d vertices)",
                report.status.value,
                report.changed_count,
                report.threshold,
                len(report.hull),
            )
            self._last = report.status


def main(argv: Optional[list[str]] = None) -> None:
    ap = build_arg_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # ------------------------------------------------------------------ config

    cfg_module = load_config_module(args.config_module)
    motion_cfg = motion_config_from_cfg(cfg_module)
    overrides = {}
    if args.sensitivity is not None:
        overrides["sensitivity"] = args.sensitivity
    if args.threshold is not None:
        overrides["threshold"] = args.threshold
    if args.cooldown is not None:
        overrides["cooldown_s"] = args.cooldown
    if args.no_audio:
        overrides["enable_audio"] = False
    if args.no_ai:
        overrides["enable_ai"] = False
    motion_cfg = replace(motion_cfg, **overrides)

    _LOG.info(
        "Config: sensitivity=%s threshold=%d cooldown=%.1fs audio=%s ai=%s",
        motion_cfg.sensitivity,
        motion_cfg.threshold,
        motion_cfg.cooldown_s,
        motion_cfg.enable_audio,
        motion_cfg.enable_ai,
    )

    # ------------------------------------------------------------------ capture

    reader_cfg = ReaderConfig(
        prefer=args.prefer,
        camera_index=args.camera_index,
        flip_horizontal=args.mirror,
    )
    reader = wrap_nonblocking(
        ReaderFactory.from_config(reader_cfg),
        queue_max=3,
        drop_policy="drop_old",
        start_timeout_s=6.0,
        close_timeout_s=0.75,
    )
    sampler = FrameSampler(reader, max_stale_s=args.max_stale)

    # ------------------------------------------------------------------ alerting

    describer = DescriptionClient(description_config_from_cfg(cfg_module))
    dispatcher = AlertDispatcher(
        log=MotionLog(max_entries=args.max_logs),
        snapshot_source=sampler.snapshot_frame,
        describer=describer,
        audio=BellAlert() if motion_cfg.enable_audio else NullAudio(),
        config=DispatcherConfig(),
    )
    loop = SamplingLoop(
        sampler,
        dispatcher,
        config=motion_cfg,
        tick_s=args.tick_ms / 1000.0,
        on_tick=_StatusReporter(),
    )

    # ------------------------------------------------------------------ main loop

    sampler.start()
    try:
        loop.run(max_seconds=args.max_seconds)
    except KeyboardInterrupt:
        _LOG.info("KeyboardInterrupt received, shutting down.")
    finally:
        loop.stop()
        if not dispatcher.drain(timeout=5.0):
            _LOG.warning("Some description requests were still pending at shutdown")
        dispatcher.close(wait_for_jobs=False)
        with contextlib.suppress(Exception):
            sampler.close()
        if reader.drops:
            _LOG.info("Capture dropped %d frames behind the sampler", reader.drops)

        for entry in dispatcher.log.entries():
            _LOG.info("%s  %s", entry.to_dict()["timestamp"], entry.display_text)


if __name__ == "__main__":  # pragma: no cover
    main()
