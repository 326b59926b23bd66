"""Image-description service client."""

from __future__ import annotations

from .client import (
    DescriptionClient,
    DescriptionConfig,
    DescriptionConfigError,
    DescriptionError,
    DescriptionHttpError,
    description_config_from_cfg,
)

__all__ = [
    "DescriptionClient",
    "DescriptionConfig",
    "DescriptionError",
    "DescriptionConfigError",
    "DescriptionHttpError",
    "description_config_from_cfg",
]
