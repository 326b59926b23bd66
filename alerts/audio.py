from __future__ import annotations

import sys
from typing import Optional, Protocol, TextIO


class AudioAlert(Protocol):
    def play(self) -> None: ...


class BellAlert:
    """Rings the terminal bell on ``stream`` (stderr by default)."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream

    def play(self) -> None:
        stream = self._stream or sys.stderr
        stream.write("\a")
        stream.flush()


class NullAudio:
    def play(self) -> None:
        return None
