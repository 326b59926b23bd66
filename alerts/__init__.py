"""Audio-alert collaborators."""

from __future__ import annotations

from .audio import AudioAlert, BellAlert, NullAudio

__all__ = ["AudioAlert", "BellAlert", "NullAudio"]
