from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Set

import numpy as np

from capture.errors import SnapshotError
from capture.sampler import encode_snapshot
from describe.client import DescriptionError

from .log import MotionLog, MotionLogEntry, new_entry_id, now_ms
from .model import MotionConfig

_LOG = logging.getLogger(__name__)

# Used when the description call fails or there is nothing to describe.
FALLBACK_DESCRIPTION = "Analysis unavailable."


@dataclass
class DispatcherConfig:
    """Knobs for qualifying-trigger side effects."""

    # JPEG quality for the logged snapshot (0-100).
    snapshot_quality: int = 60

    # Background workers for encode + describe jobs.
    max_workers: int = 2


class AlertDispatcher:
    """Turn a qualifying trigger into a log entry and its side effects.

    Collaborators:

        - ``snapshot_source()`` returns the newest full-resolution BGR frame
          or raises :class:`SnapshotError`.
        - ``describer.describe(snapshot)`` returns text or raises
          :class:`DescriptionError`.
        - ``audio.play()`` is fire-and-forget.

    Only the log insert and a frame reference happen on the caller's thread.
    JPEG encoding and the description call run on a worker pool and patch the
    entry by id when they finish; results for evicted entries are dropped by
    the log.
    """

    def __init__(
        self,
        log: MotionLog,
        snapshot_source: Optional[Callable[[], np.ndarray]] = None,
        describer: Optional[Any] = None,
        audio: Optional[Any] = None,
        config: Optional[DispatcherConfig] = None,
        executor: Optional[ThreadPoolExecutor] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._log_store = log
        self._snapshot_source = snapshot_source
        self._describer = describer
        self._audio = audio
        self._cfg = config or DispatcherConfig()
        self._log = logger or _LOG

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(1, int(self._cfg.max_workers)),
            thread_name_prefix="alert-dispatch",
        )
        self._inflight: Set[Future] = set()
        self._inflight_lock = threading.Lock()

    @property
    def log(self) -> MotionLog:
        return self._log_store

    # ------------------------------------------------------------------ helpers

    def _play_audio(self) -> None:
        if self._audio is None:
            return
        try:
            self._audio.play()
        except Exception as exc:
            self._log.warning("Audio alert failed (non-fatal): %s", exc)

    def _grab_frame(self) -> Optional[np.ndarray]:
        if self._snapshot_source is None:
            return None
        try:
            return self._snapshot_source()
        except SnapshotError as exc:
            self._log.warning("Snapshot capture failed; logging without image: %s", exc)
        except Exception as exc:
            self._log.warning("Snapshot source raised unexpectedly: %s", exc)
        return None

    def _track(self, fut: Future) -> None:
        with self._inflight_lock:
            self._inflight.add(fut)

        def _done(f: Future) -> None:
            with self._inflight_lock:
                self._inflight.discard(f)
            exc = f.exception()
            if exc is not None:
                self._log.error("Alert job crashed: %s", exc)

        fut.add_done_callback(_done)

    def _run_job(self, entry_id: str, frame: Optional[np.ndarray], enable_ai: bool) -> None:
        snapshot = ""
        if frame is not None:
            try:
                snapshot = encode_snapshot(frame, quality=self._cfg.snapshot_quality)
            except SnapshotError as exc:
                self._log.warning("Snapshot encode failed for entry %s: %s", entry_id, exc)
        if snapshot:
            self._log_store.attach_snapshot(entry_id, snapshot)

        if not enable_ai:
            return

        if not snapshot or self._describer is None:
            self._log_store.complete(entry_id, FALLBACK_DESCRIPTION)
            return

        try:
            description = self._describer.describe(snapshot)
        except DescriptionError as exc:
            self._log.warning("Description request failed for entry %s: %s", entry_id, exc)
            description = FALLBACK_DESCRIPTION
        except Exception as exc:
            self._log.error("Description client raised unexpectedly for %s: %s", entry_id, exc)
            description = FALLBACK_DESCRIPTION

        if self._log_store.complete(entry_id, description):
            self._log.info("Entry %s described: %s", entry_id, description)

    # ------------------------------------------------------------------- public

    def handle_trigger(self, config: MotionConfig) -> MotionLogEntry:
        """Create the log entry for a qualifying trigger and start its side effects."""
        if config.enable_audio:
            self._play_audio()

        frame = self._grab_frame()
        entry = MotionLogEntry(
            entry_id=new_entry_id(),
            timestamp_ms=now_ms(),
            is_analyzing=bool(config.enable_ai),
        )
        self._log_store.add(entry)
        self._log.info("Motion alert logged: entry=%s", entry.entry_id)

        if frame is None and not config.enable_ai:
            return entry

        try:
            fut = self._executor.submit(
                self._run_job, entry.entry_id, frame, bool(config.enable_ai)
            )
        except RuntimeError as exc:
            # Executor already shut down; do not leave the entry pending.
            self._log.warning("Could not schedule alert job for %s: %s", entry.entry_id, exc)
            self._log_store.complete(entry.entry_id, FALLBACK_DESCRIPTION)
            return entry
        self._track(fut)
        return entry

    def pending(self) -> int:
        with self._inflight_lock:
            return len(self._inflight)

    def drain(self, timeout: Optional[float] = None) -> bool:
        """Wait for in-flight jobs. Returns True when none are left."""
        with self._inflight_lock:
            futures: List[Future] = list(self._inflight)
        if not futures:
            return True
        _done, not_done = wait(futures, timeout=timeout)
        return not not_done

    def close(self, wait_for_jobs: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait_for_jobs)
