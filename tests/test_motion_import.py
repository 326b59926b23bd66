from __future__ import annotations

import numpy as np

from analysis.motion import DetectionResult, MotionConfig, MotionEngine


def test_motion_smoke_run() -> None:
    # Construct an engine with default configuration and run a single
    # still pair through it to confirm we get a DetectionResult back.
    eng = MotionEngine(MotionConfig())
    img = np.zeros((48, 64, 3), dtype=np.uint8)
    out = eng.step(img, img.copy())

    assert isinstance(out, DetectionResult)
    assert out.count == 0
    assert out.threshold == 150
    assert not out.motion


def test_cli_parser_defaults() -> None:
    from tools.run_sentinel import build_arg_parser

    args = build_arg_parser().parse_args([])
    assert args.prefer == "camera"
    assert args.tick_ms == 100
    assert args.max_logs == 20
    assert args.max_stale == 2.0
    assert args.sensitivity is None
