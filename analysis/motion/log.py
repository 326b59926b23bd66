from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Deque, List, Optional

_LOG = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 20


def now_ms() -> float:
    return time.time() * 1000.0


def to_iso_utc(epoch_ms: float) -> str:
    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc).isoformat()


def new_entry_id() -> str:
    return uuid.uuid4().hex


@dataclass
class MotionLogEntry:
    """One qualifying trigger as shown to the operator."""

    entry_id: str
    timestamp_ms: float  # epoch ms, wall clock
    snapshot: str = ""  # data:image/jpeg;base64,... or "" when unavailable
    description: Optional[str] = None
    is_analyzing: bool = False

    @property
    def display_text(self) -> str:
        if self.is_analyzing:
            return "Analyzing..."
        return self.description or "Motion Detected"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.entry_id,
            "timestamp": to_iso_utc(self.timestamp_ms),
            "has_snapshot": bool(self.snapshot),
            "description": self.description,
            "is_analyzing": self.is_analyzing,
        }


class MotionLog:
    """Bounded, most-recent-first log of motion entries.

    Appends come from the sampling loop; in-place patches come from
    background description jobs. Both go through one lock. Patches address
    entries by id, so a patch for an entry that was already evicted is
    dropped rather than raising.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
        if max_entries <= 0:
            raise ValueError(f"max_entries must be > 0, got {max_entries!r}")
        self._max = int(max_entries)
        self._entries: Deque[MotionLogEntry] = deque()
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._max

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------ writes

    def add(self, entry: MotionLogEntry) -> Optional[MotionLogEntry]:
        """Insert ``entry`` at the head; return the evicted entry, if any."""
        with self._lock:
            self._entries.appendleft(entry)
            if len(self._entries) > self._max:
                evicted = self._entries.pop()
                if evicted.is_analyzing:
                    _LOG.debug(
                        "Evicted entry %s while its description was still pending",
                        evicted.entry_id,
                    )
                return evicted
        return None

    def attach_snapshot(self, entry_id: str, snapshot: str) -> bool:
        with self._lock:
            entry = self._find(entry_id)
            if entry is None:
                _LOG.debug("Dropping snapshot for evicted entry %s", entry_id)
                return False
            # Never touch an entry once its description has landed.
            if entry.snapshot or entry.description is not None:
                return False
            entry.snapshot = snapshot
            return True

    def complete(self, entry_id: str, description: str) -> bool:
        """Set the description of a pending entry and clear its in-flight flag.

        Accepted once per entry. Returns False when the entry is gone or was
        already completed.
        """
        with self._lock:
            entry = self._find(entry_id)
            if entry is None:
                _LOG.debug("Dropping description for evicted entry %s", entry_id)
                return False
            if not entry.is_analyzing:
                return False
            entry.description = description
            entry.is_analyzing = False
            return True

    # ------------------------------------------------------------------- reads

    def get(self, entry_id: str) -> Optional[MotionLogEntry]:
        with self._lock:
            entry = self._find(entry_id)
            return replace(entry) if entry is not None else None

    def entries(self) -> List[MotionLogEntry]:
        """Copies of the retained entries, newest first."""
        with self._lock:
            return [replace(e) for e in self._entries]

    def _find(self, entry_id: str) -> Optional[MotionLogEntry]:
        for entry in self._entries:
            if entry.entry_id == entry_id:
                return entry
        return None
