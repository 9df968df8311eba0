"""Shared fixtures for Voxe Reader tests."""

import pytest

from voxe.engine import NarrationEngine
from voxe.segmenter import segment


class FakeEngine(NarrationEngine):
    """Records every call; the test fires callbacks by hand."""

    def __init__(self, available=True):
        self.available = available
        self.calls = []
        self.requests = []     # (text, config, callbacks) per speak()
        self.speaking = False
        self.paused = False

    @property
    def callbacks(self):
        return self.requests[-1][2]

    def speak(self, text, config, callbacks):
        self.calls.append("speak")
        self.requests.append((text, config, callbacks))

    def pause(self):
        self.calls.append("pause")
        self.paused = True

    def resume(self):
        self.calls.append("resume")
        self.paused = False

    def cancel(self):
        self.calls.append("cancel")
        self.speaking = False
        self.paused = False

    def is_speaking(self):
        return self.speaking

    def is_paused(self):
        return self.paused

    def is_available(self):
        return self.available

    def start(self):
        """Simulate the engine beginning to speak the latest request."""
        self.speaking = True
        self.callbacks.on_start()


class FakeHandle:
    def __init__(self, loop, when, callback, args):
        self.loop = loop
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeLoop:
    """Stand-in for an asyncio loop: call_later runs only on advance()."""

    def __init__(self):
        self.time = 0.0
        self.handles = []

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self, self.time + delay, callback, args)
        self.handles.append(handle)
        return handle

    def advance(self, seconds):
        self.time += seconds
        due = [h for h in self.handles if h.when <= self.time and not h.cancelled]
        self.handles = [h for h in self.handles if h not in due]
        for handle in due:
            handle.callback(*handle.args)


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def fake_loop():
    return FakeLoop()


@pytest.fixture
def sample_units():
    """Three sentences from a short passage."""
    return segment("It was dark. Who's there? Nobody answered!")
