"""Tests for debounced auto-save."""

from qulome.autosave import DebouncedSaver, DraftAutoSaver
from qulome.drafts.services import DraftService
from qulome.storage.adapter import StorageAdapter
from qulome.storage.backends import MemoryStore


class _FakeTimer:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True


class _TimerFactory:
    """Records every timer so tests can fire them by hand."""

    def __init__(self):
        self.timers: list[_FakeTimer] = []

    def __call__(self, delay, callback):
        timer = _FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> _FakeTimer:
        return self.timers[-1]


class TestDebouncedSaver:
    def test_burst_saves_once_with_last_value(self):
        calls: list = []
        timers = _TimerFactory()
        saver = DebouncedSaver(calls.append, delay=0.5, timer_factory=timers)
        for text in ("a", "ab", "abc"):
            saver.schedule(text)
        assert all(t.cancelled for t in timers.timers[:-1])
        assert timers.last.delay == 0.5
        timers.last.callback()
        assert calls == ["abc"]
        assert not saver.pending

    def test_superseded_timer_firing_late_does_not_save(self):
        calls: list = []
        timers = _TimerFactory()
        saver = DebouncedSaver(calls.append, timer_factory=timers)
        saver.schedule("a")
        saver.schedule("b")
        timers.timers[0].callback()
        assert calls == []
        assert saver.pending
        timers.last.callback()
        assert calls == ["b"]
        assert not saver.pending

    def test_cancelled_timer_callback_is_ignored(self):
        calls: list = []
        timers = _TimerFactory()
        saver = DebouncedSaver(calls.append, timer_factory=timers)
        saver.schedule("x")
        saver.cancel()
        timers.last.callback()
        assert calls == []

    def test_flush_runs_pending_save(self):
        calls: list = []
        timers = _TimerFactory()
        saver = DebouncedSaver(calls.append, timer_factory=timers)
        saver.schedule("x")
        saver.flush()
        assert calls == ["x"]
        assert timers.last.cancelled
        saver.flush()
        assert calls == ["x"]

    def test_save_errors_are_logged_not_raised(self, caplog):
        def failing(_):
            raise RuntimeError("disk full")

        timers = _TimerFactory()
        saver = DebouncedSaver(failing, timer_factory=timers)
        saver.schedule("x")
        timers.last.callback()
        assert "Auto-save failed" in caplog.text
        assert not saver.pending


class TestDraftAutoSaver:
    def test_saves_existing_draft(self):
        drafts = DraftService(StorageAdapter(MemoryStore()))
        draft = drafts.create_draft("<p>old</p>")
        timers = _TimerFactory()
        autosaver = DraftAutoSaver(drafts, draft.id, timer_factory=timers)
        autosaver.content_changed("<h1>New</h1>")
        assert autosaver.pending
        assert drafts.get_draft(draft.id).content == "<p>old</p>"
        timers.last.callback()
        saved = drafts.get_draft(draft.id)
        assert saved.content == "<h1>New</h1>"
        assert saved.title == "New"

    def test_creates_missing_draft(self):
        drafts = DraftService(StorageAdapter(MemoryStore()))
        autosaver = DraftAutoSaver(drafts, "draft-new", timer_factory=_TimerFactory())
        autosaver.content_changed("<p>fresh</p>")
        autosaver.flush()
        assert drafts.get_draft("draft-new").title == "fresh"

    def test_cancel_on_teardown(self):
        drafts = DraftService(StorageAdapter(MemoryStore()))
        draft = drafts.create_draft("<p>old</p>")
        autosaver = DraftAutoSaver(drafts, draft.id, timer_factory=_TimerFactory())
        autosaver.content_changed("<p>lost</p>")
        autosaver.cancel()
        autosaver.flush()
        assert drafts.get_draft(draft.id).content == "<p>old</p>"
