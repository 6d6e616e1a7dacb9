"""Debounced auto-save for the editor.

Edits are coalesced: each ``schedule`` call cancels the pending save and
restarts the idle timer, so a burst of edits produces exactly one save
once the editor goes quiet. Save failures are logged and never reach the
editor. Call ``cancel`` when the editing view is torn down.

The services are not thread-safe. With the default ``thread_timer`` the
save runs on the timer's thread, so a caller that keeps using the same
services meanwhile must pass a ``timer_factory`` that schedules on its
own loop, or use a timer that never fires and call ``flush`` itself.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, Protocol

from qulome.content.models import Draft
from qulome.drafts.services import DraftService

logger = logging.getLogger(__name__)


class Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


def thread_timer(delay: float, callback: Callable[[], None]) -> Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class DebouncedSaver:
    """Run ``save`` once after ``delay`` seconds without new edits."""

    def __init__(
        self,
        save: Callable[..., Any],
        delay: float = 1.0,
        timer_factory: TimerFactory = thread_timer,
    ) -> None:
        self._save = save
        self._delay = delay
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer: Timer | None = None
        self._generation = 0
        self._args: tuple[Any, ...] = ()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def schedule(self, *args: Any) -> None:
        """Queue a save with ``args``, replacing any queued one."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            self._args = args
            timer = self._timer_factory(self._delay, lambda: self._fire(generation))
            self._timer = timer
        timer.start()

    def flush(self) -> None:
        """Run the queued save now, if there is one."""
        with self._lock:
            if self._timer is None:
                return
            self._timer.cancel()
            generation = self._generation
        self._fire(generation)

    def cancel(self) -> None:
        """Drop the queued save without running it."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._timer = None
            self._args = ()

    def _fire(self, generation: int) -> None:
        # A cancelled timer can still call back once it has started running
        with self._lock:
            if self._timer is None or generation != self._generation:
                return
            args = self._args
            self._timer = None
            self._args = ()
        try:
            self._save(*args)
            logger.debug("Auto-saved")
        except Exception:
            logger.error("Auto-save failed", exc_info=True)


class DraftAutoSaver:
    """Debounced saving of one draft's content as it is edited."""

    def __init__(
        self,
        drafts: DraftService,
        draft_id: str,
        delay: float = 1.0,
        timer_factory: TimerFactory = thread_timer,
    ) -> None:
        self._drafts = drafts
        self.draft_id = draft_id
        self._saver = DebouncedSaver(self._save_content, delay, timer_factory)

    @property
    def pending(self) -> bool:
        return self._saver.pending

    def content_changed(self, content: str) -> None:
        self._saver.schedule(content)

    def flush(self) -> None:
        self._saver.flush()

    def cancel(self) -> None:
        self._saver.cancel()

    def _save_content(self, content: str) -> Draft:
        draft = self._drafts.get_draft(self.draft_id)
        if draft is None:
            draft = Draft(id=self.draft_id)
        draft.content = content
        return self._drafts.save_draft(draft)
