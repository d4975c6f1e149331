from __future__ import annotations

"""
Debounced draft autosave for one editable record.

Design intent:
- Coalesce bursts of edits into one write after a quiet window.
- Never re-send a snapshot that equals the last successful write.
- Keep write failures local: surface them as status, re-arm on the next edit.
"""

import asyncio
import copy
import logging
import time
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol

from matchday.drafts.change_detector import are_equal
from matchday.internal_core.contracts import AutosaveStatus

logger = logging.getLogger(__name__)

WriteFn = Callable[[dict[str, Any]], Awaitable[Any]]
StatusListener = Callable[[AutosaveStatus], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class DebouncedPersister:
    def __init__(
        self,
        write_fn: WriteFn,
        *,
        quiescence_window: float = 2.5,
        grace_period: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        scheduler: Optional[Scheduler] = None,
        should_skip: Optional[Callable[[Mapping[str, Any]], bool]] = None,
        name: str = "draft",
    ) -> None:
        self._write_fn = write_fn
        self._window = float(quiescence_window)
        self._grace = max(0.0, float(grace_period))
        self._clock = clock
        self._scheduler = scheduler
        self._should_skip = should_skip
        self._name = name

        self._timer: Optional[TimerHandle] = None
        self._pending: Optional[dict[str, Any]] = None
        self._baseline: Optional[dict[str, Any]] = None
        self._has_baseline = False
        self._inflight: Optional[asyncio.Task] = None
        self._mounted_at: Optional[float] = None
        self._suspended = False
        self._closed = False
        self._status = AutosaveStatus()
        self._last_error: Optional[BaseException] = None
        self._listeners: list[StatusListener] = []

    def configure(self, write_fn: WriteFn, quiescence_window: float) -> None:
        if quiescence_window <= 0:
            raise ValueError("quiescence_window must be positive.")
        self._write_fn = write_fn
        self._window = float(quiescence_window)

    @property
    def status(self) -> AutosaveStatus:
        return self._status

    @property
    def last_error(self) -> Optional[BaseException]:
        return self._last_error

    @property
    def has_pending_write(self) -> bool:
        return self._timer is not None

    @property
    def is_writing(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    @property
    def last_written(self) -> Optional[dict[str, Any]]:
        return copy.deepcopy(self._baseline)

    def add_listener(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: StatusListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def mount(self, initial_snapshot: Optional[Mapping[str, Any]]) -> None:
        self._cancel_timer()
        self._set_baseline(initial_snapshot)
        self._mounted_at = self._clock()
        self._suspended = False

    def notify(self, snapshot: Optional[Mapping[str, Any]], enabled: bool) -> None:
        if self._closed:
            return
        if not enabled:
            self._suspended = True
            self._cancel_timer()
            return
        self._suspended = False

        if self._mounted_at is None:
            # First value seen without an explicit mount is the loaded state.
            self.mount(snapshot)
            return
        if self._clock() - self._mounted_at < self._grace:
            self._set_baseline(snapshot)
            return

        if not snapshot:
            return
        if self._should_skip is not None and self._should_skip(snapshot):
            logger.debug("autosave_skipped name=%s reason=should_skip", self._name)
            return
        if self._has_baseline and are_equal(snapshot, self._baseline):
            # Back to the saved value: whatever was pending is now stale.
            self._cancel_timer()
            return

        self._pending = copy.deepcopy(dict(snapshot))
        self._cancel_timer()
        self._timer = self._get_scheduler().call_later(self._window, self._on_timer_expired)

    def suspend(self) -> None:
        self._suspended = True
        self._cancel_timer()

    def resume(self) -> None:
        self._suspended = False

    def reset(self, baseline: Optional[Mapping[str, Any]] = None) -> None:
        self._cancel_timer()
        self._set_baseline(baseline)
        self._last_error = None
        self._suspended = False
        self._set_status(AutosaveStatus(last_saved_at=self._status.last_saved_at))

    async def wait_idle(self) -> None:
        while self._inflight is not None and not self._inflight.done():
            await asyncio.wait([self._inflight])

    def close(self) -> None:
        self._closed = True
        self._cancel_timer()
        self._listeners.clear()

    def _get_scheduler(self) -> Scheduler:
        if self._scheduler is not None:
            return self._scheduler
        return asyncio.get_running_loop()

    def _set_baseline(self, snapshot: Optional[Mapping[str, Any]]) -> None:
        self._baseline = copy.deepcopy(dict(snapshot)) if snapshot is not None else None
        self._has_baseline = snapshot is not None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._pending = None

    def _set_status(self, status: AutosaveStatus) -> None:
        self._status = status
        for listener in list(self._listeners):
            listener(status)

    def _on_timer_expired(self) -> None:
        snapshot = self._pending
        self._timer = None
        self._pending = None
        if snapshot is None or self._closed or self._suspended:
            return
        previous = self._inflight
        self._inflight = asyncio.get_running_loop().create_task(self._run_write(snapshot, previous))

    async def _run_write(self, snapshot: dict[str, Any], previous: Optional[asyncio.Task]) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait([previous])
        # Gate and baseline may have moved while the previous write was in flight.
        if self._closed or self._suspended:
            return
        if self._has_baseline and are_equal(snapshot, self._baseline):
            return

        self._set_status(AutosaveStatus(state="saving", last_saved_at=self._status.last_saved_at))
        started = self._clock()
        try:
            await self._write_fn(snapshot)
        except Exception as exc:
            self._last_error = exc
            logger.warning(
                "autosave_failed name=%s error_type=%s error=%s",
                self._name,
                exc.__class__.__name__,
                exc,
            )
            self._set_status(
                AutosaveStatus(
                    state="error",
                    message=str(exc) or exc.__class__.__name__,
                    last_saved_at=self._status.last_saved_at,
                )
            )
            return

        self._set_baseline(snapshot)
        self._last_error = None
        logger.debug(
            "autosave_done name=%s keys=%s elapsed_sec=%.3f",
            self._name,
            sorted(snapshot),
            self._clock() - started,
        )
        self._set_status(AutosaveStatus(state="idle", last_saved_at=time.time()))
