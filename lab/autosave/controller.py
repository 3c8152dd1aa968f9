"""
Debounced auto-save for editing surfaces.

A controller owns one timer and at most one in-flight save.  Every edit
calls :meth:`DebouncedSaveController.touch`, which marks the draft dirty
and restarts the timer; when the timer fires the draft is persisted if
it is ready and minimally complete.  Background failures are soft: they
are logged and reported through ``on_error`` while the in-memory edits
stay as they are.  The next edit starts a new cycle, so there is no
automatic retry.

An explicit :meth:`save_now` skips the readiness guards, validates and
lets persistence errors propagate to the caller.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from django.utils import timezone

logger = logging.getLogger(__name__)


class SaveState(str, Enum):
    CLEAN = 'clean'
    DIRTY = 'dirty'
    SAVING = 'saving'
    ERROR = 'error'


class DebouncedSaveController:

    def __init__(
        self,
        persist: Callable[[], Awaitable[None]],
        *,
        validate: Optional[Callable[[], None]] = None,
        min_fields_present: Optional[Callable[[], bool]] = None,
        delay: float = 0.8,
        on_saved: Optional[Callable[[], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        name: str = 'draft',
    ):
        self._persist = persist
        self._validate = validate
        self._min_fields_present = min_fields_present
        self.delay = delay
        self._on_saved = on_saved
        self._on_error = on_error
        self.name = name

        self.state = SaveState.CLEAN
        self.ready = False
        self.last_saved_at = None
        self.last_error: Optional[Exception] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None
        # bumped on every edit; a save compares it before and after
        self._edits = 0

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def mark_ready(self) -> None:
        """Allow background saves; called once the draft has been hydrated."""
        self.ready = True

    def touch(self) -> None:
        self._edits += 1
        self.state = SaveState.DIRTY
        self._arm()

    def _arm(self) -> None:
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._on_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        if self.state is not SaveState.DIRTY or self.busy or not self.ready:
            return
        if self._min_fields_present is not None and not self._min_fields_present():
            return
        self._task = asyncio.ensure_future(self._run(explicit=False))

    async def _run(self, *, explicit: bool) -> None:
        generation = self._edits
        self.state = SaveState.SAVING
        try:
            await self._persist()
        except Exception as exc:
            self.last_error = exc
            edited = self._edits != generation
            self.state = SaveState.DIRTY if edited else SaveState.ERROR
            if edited:
                self._arm()
            if explicit:
                raise
            logger.warning('Auto-save of %s failed: %s', self.name, exc)
            if self._on_error is not None:
                self._on_error(exc)
            return
        self.last_error = None
        self.last_saved_at = timezone.now()
        if self._edits != generation:
            self.state = SaveState.DIRTY
            self._arm()
        else:
            self.state = SaveState.CLEAN
        if self._on_saved is not None:
            self._on_saved()

    async def _drain(self) -> None:
        if self.busy:
            await asyncio.wait({self._task})

    async def save_now(self) -> None:
        self._cancel_timer()
        await self._drain()
        if self._validate is not None:
            self._validate()
        self._task = asyncio.ensure_future(self._run(explicit=True))
        await self._task

    async def wait_idle(self) -> None:
        """Return once no timer is pending and no save is running."""
        loop = asyncio.get_running_loop()
        while self.pending or self.busy:
            if self.busy:
                await self._drain()
            else:
                await asyncio.sleep(max(0.0, self._timer.when() - loop.time()))

    def reset(self) -> None:
        self._cancel_timer()
        self.state = SaveState.CLEAN
        self.last_error = None

    def close(self) -> None:
        self._cancel_timer()
