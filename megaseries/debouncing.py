"""Coalescing of high-frequency frontend events.

Browser relayout and selection events can arrive far faster than the chart
needs to react (a scroll-wheel flood emits dozens per second). The widget
routes them through :class:`QueuedDebouncer`, which runs the callback at a
fixed cadence and, by default, keeps only the newest queued event per tick.

The chart's own handlers stay synchronous; this layer only thins the event
stream before it reaches them.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Optional, Tuple

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass
class _QueuedCall:
    args: Tuple[Any, ...]
    kwargs: dict[str, Any]


class QueuedDebouncer:
    """Queue callback invocations and execute them at a fixed cadence.

    Parameters
    ----------
    callback:
        Callable to execute from queued events.
    execute_every_ms:
        Execution cadence in milliseconds.
    drop_overflow:
        If ``True``, each tick keeps only the last queued event before executing.

    Notes
    -----
    Inside a running asyncio loop (the Jupyter kernel) ticks are scheduled with
    ``loop.call_later`` so callbacks run on the loop thread; otherwise a daemon
    ``threading.Timer`` is used.
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        *,
        execute_every_ms: int,
        drop_overflow: bool = True,
    ) -> None:
        if execute_every_ms <= 0:
            raise ValueError("execute_every_ms must be > 0")
        self._callback = callback
        self._execute_every_s = execute_every_ms / 1000.0
        self._drop_overflow = bool(drop_overflow)

        self._queue: Deque[_QueuedCall] = deque()
        self._lock = threading.Lock()
        self._timer: Optional[Any] = None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self._queue.append(_QueuedCall(args=args, kwargs=dict(kwargs)))
            if self._timer is None:
                self._schedule_next_locked()

    @property
    def pending(self) -> int:
        """Number of queued, not yet executed calls."""
        with self._lock:
            return len(self._queue)

    def flush(self) -> None:
        """Run the newest queued call (or all, without ``drop_overflow``) now."""
        with self._lock:
            self._cancel_locked()
            calls = list(self._queue)
            self._queue.clear()
        if self._drop_overflow and calls:
            calls = calls[-1:]
        for call in calls:
            self._run(call)

    def cancel(self) -> None:
        """Drop every queued call and stop the pending tick."""
        with self._lock:
            self._cancel_locked()
            self._queue.clear()

    def _cancel_locked(self) -> None:
        timer = self._timer
        self._timer = None
        if timer is not None:
            cancel = getattr(timer, "cancel", None)
            if cancel is not None:
                cancel()

    def _schedule_next_locked(self) -> None:
        delay_s = self._execute_every_s
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            timer = threading.Timer(delay_s, self._on_tick)
            timer.daemon = True
            self._timer = timer
            timer.start()
            return

        self._timer = loop.call_later(delay_s, self._on_tick)

    def _on_tick(self) -> None:
        with self._lock:
            self._timer = None
            if not self._queue:
                return

            if self._drop_overflow and len(self._queue) > 1:
                last = self._queue[-1]
                self._queue.clear()
                self._queue.append(last)

            call = self._queue.popleft()
            if self._queue:
                self._schedule_next_locked()

        self._run(call)

    def _run(self, call: _QueuedCall) -> None:
        try:
            self._callback(*call.args, **call.kwargs)
        except Exception:
            logger.exception("QueuedDebouncer callback failed")


__all__ = ["QueuedDebouncer"]
