# common/config.py
from __future__ import annotations

import logging
import os
from importlib import import_module
from types import ModuleType
from typing import Any, Optional

from analysis.motion.model import MotionConfig

_LOG = logging.getLogger(__name__)

CONFIG_MODULE_ENV = "SENTINEL_CONFIG_MODULE"


def load_config_module(name: Optional[str] = None) -> Optional[ModuleType]:
    """Locate the runtime config module, if one exists.

    An explicit ``name`` (or ``$SENTINEL_CONFIG_MODULE``) must import.
    Otherwise ``sentinel_config`` then ``config`` are tried and ``None`` is
    returned when neither exists.
    """
    explicit = name or os.environ.get(CONFIG_MODULE_ENV)
    if explicit:
        try:
            module = import_module(explicit)
        except ImportError as exc:
            raise ImportError(
                f"Could not import runtime config module {explicit!r}. "
                f"Set {CONFIG_MODULE_ENV} to an importable module (e.g., 'config')."
            ) from exc
        _LOG.info("Using runtime config module %s", explicit)
        return module

    for candidate in ("sentinel_config", "config"):
        try:
            module = import_module(candidate)
        except ImportError:
            continue
        _LOG.info("Using runtime config module %s", candidate)
        return module
    return None


def motion_config_from_cfg(cfg_module: Any, base: Optional[MotionConfig] = None) -> MotionConfig:
    """Build :class:`MotionConfig` from an application config module.

    Every attribute is optional and falls back to ``base`` (or the defaults):

    - SENSITIVITY
    - TRIGGER_THRESHOLD
    - COOLDOWN_S
    - ENABLE_AUDIO
    - ENABLE_AI
    """
    base = base or MotionConfig()
    if cfg_module is None:
        return base
    return MotionConfig(
        sensitivity=float(getattr(cfg_module, "SENSITIVITY", base.sensitivity)),
        threshold=int(getattr(cfg_module, "TRIGGER_THRESHOLD", base.threshold)),
        cooldown_s=float(getattr(cfg_module, "COOLDOWN_S", base.cooldown_s)),
        enable_audio=bool(getattr(cfg_module, "ENABLE_AUDIO", base.enable_audio)),
        enable_ai=bool(getattr(cfg_module, "ENABLE_AI", base.enable_ai)),
    )
