from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Deque, Literal, Optional, Tuple

import numpy as np

from .errors import CaptureUnavailableError
from .reader import FrameStream

_LOG = logging.getLogger(__name__)

DropPolicy = Literal["drop_new", "drop_old"]

Item = Tuple[np.ndarray, float, int]


class NonBlocking:
    """Pump a blocking :class:`FrameStream` on a worker thread.

    ``read()`` never waits: it pops from a bounded queue and returns ``None``
    when the queue is empty. A full queue discards the oldest frame
    (``drop_old``) or the incoming one (``drop_new``); either way ``drops`` is
    bumped. ``alive`` turns False once the worker has exited, so a consumer
    can tell an idle source from a dead one.
    """

    def __init__(
        self,
        inner: FrameStream,
        queue_max: int = 3,
        drop_policy: DropPolicy = "drop_old",
        start_timeout_s: float = 2.0,
        close_timeout_s: float = 0.75,
    ):
        if drop_policy not in ("drop_new", "drop_old"):
            raise ValueError(f"unknown drop policy: {drop_policy!r}")
        self._inner = inner
        self._queue: Deque[Item] = deque()
        self._queue_max = max(1, int(queue_max))
        self._lock = threading.Lock()
        self._drop_policy = drop_policy
        self._running = threading.Event()
        self._ready = threading.Event()
        self._worker: Optional[threading.Thread] = None
        self._start_error: Optional[Exception] = None
        self._start_timeout_s = start_timeout_s
        self._close_timeout_s = close_timeout_s
        self.drops = 0

    @property
    def alive(self) -> bool:
        worker = self._worker
        return worker is not None and worker.is_alive()

    def start(self) -> None:
        if self.alive:
            return
        self._start_error = None
        self._ready.clear()
        self._running.set()
        self._worker = threading.Thread(target=self._pump, name="capture-pump", daemon=True)
        self._worker.start()

        # Slow devices may still be opening; keep going and let the sampler wait.
        if not self._ready.wait(self._start_timeout_s):
            _LOG.warning("Capture source still starting after %.2fs", self._start_timeout_s)
            return
        if self._start_error is not None:
            raise CaptureUnavailableError(
                f"capture source failed to start: {self._start_error}"
            ) from self._start_error

    def _pump(self) -> None:
        try:
            self._inner.start()
        except Exception as exc:
            self._start_error = exc
            self._running.clear()
            return
        finally:
            self._ready.set()

        while self._running.is_set():
            try:
                item = self._inner.read()
            except Exception:
                _LOG.debug("Capture read failed", exc_info=True)
                item = None
            if item is None:
                time.sleep(0.001)
                continue
            self._push(item)
        _LOG.debug("Capture pump stopped")

    def _push(self, item: Item) -> None:
        with self._lock:
            if len(self._queue) >= self._queue_max:
                self.drops += 1
                if self._drop_policy == "drop_new":
                    return
                self._queue.popleft()
            self._queue.append(item)

    def read(self) -> Optional[Item]:
        with self._lock:
            if self._queue:
                return self._queue.popleft()
        return None

    def close(self) -> None:
        self._running.clear()

        # inner.read() may be parked on the device; closing from a helper
        # thread releases it without hanging the caller.
        closer = threading.Thread(target=self._close_inner, name="capture-close", daemon=True)
        closer.start()
        closer.join(timeout=self._close_timeout_s)

        if self._worker is not None:
            self._worker.join(timeout=0.5)
            self._worker = None
        with self._lock:
            self._queue.clear()

    def _close_inner(self) -> None:
        try:
            self._inner.close()
        except Exception:
            _LOG.debug("Capture source close failed", exc_info=True)


def wrap_nonblocking(
    stream: FrameStream,
    queue_max: int = 3,
    drop_policy: DropPolicy = "drop_old",
    start_timeout_s: float = 2.0,
    close_timeout_s: float = 0.75,
) -> NonBlocking:
    return NonBlocking(
        stream,
        queue_max=queue_max,
        drop_policy=drop_policy,
        start_timeout_s=start_timeout_s,
        close_timeout_s=close_timeout_s,
    )
