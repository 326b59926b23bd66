from __future__ import annotations

import io
import sys
import types

import pytest

from alerts.audio import BellAlert, NullAudio
from analysis.motion import MotionConfig
from common.config import CONFIG_MODULE_ENV, load_config_module, motion_config_from_cfg


def test_motion_config_defaults():
    cfg = MotionConfig()
    assert (cfg.sensitivity, cfg.threshold, cfg.cooldown_s) == (20, 150, 5.0)
    assert cfg.enable_audio and cfg.enable_ai


def test_motion_config_from_module_overrides_subset():
    mod = types.SimpleNamespace(SENSITIVITY=35, COOLDOWN_S=2, ENABLE_AI=False)
    cfg = motion_config_from_cfg(mod)
    assert cfg.sensitivity == 35.0
    assert cfg.cooldown_s == 2.0
    assert cfg.enable_ai is False
    assert cfg.threshold == 150


def test_motion_config_from_none_returns_base():
    base = MotionConfig(threshold=10)
    assert motion_config_from_cfg(None, base=base) is base


def test_load_config_module_from_env(monkeypatch):
    mod = types.ModuleType("sentinel_test_cfg")
    mod.TRIGGER_THRESHOLD = 42
    monkeypatch.setitem(sys.modules, "sentinel_test_cfg", mod)
    monkeypatch.setenv(CONFIG_MODULE_ENV, "sentinel_test_cfg")

    loaded = load_config_module()
    assert loaded is mod
    assert motion_config_from_cfg(loaded).threshold == 42


def test_load_config_module_explicit_missing_raises(monkeypatch):
    monkeypatch.delenv(CONFIG_MODULE_ENV, raising=False)
    with pytest.raises(ImportError):
        load_config_module("definitely_not_a_module_xyz")


def test_bell_alert_writes_bel():
    buf = io.StringIO()
    BellAlert(stream=buf).play()
    assert buf.getvalue() == "\a"
    assert NullAudio().play() is None
