"""Playback state machine keeping the spoken position in sync with text units."""

import asyncio
import bisect
import itertools
import logging
from dataclasses import dataclass

from voxe.constants import SEEK_RESTART_DELAY
from voxe.engine import NarrationCallbacks, is_cancellation
from voxe.errors import EngineError
from voxe.models import (
    EngineEnded,
    EngineFailed,
    EngineProgress,
    EngineStarted,
    NarrationConfig,
    PlaybackState,
)

logger = logging.getLogger(__name__)

NO_DOCUMENT_MESSAGE = "Please load a document first"
UNAVAILABLE_MESSAGE = "Speech synthesis is not supported in this environment"


@dataclass(frozen=True)
class NarrationRequest:
    id: int
    start_index: int
    char_starts: tuple[int, ...]   # start of each unit within the spoken text

    def resolve(self, char_offset: int) -> int | None:
        """Map a char offset in the spoken text to an absolute unit index."""
        pos = bisect.bisect_right(self.char_starts, char_offset) - 1
        if pos < 0:
            return None
        return self.start_index + pos


def build_request(request_id: int, units, start_index: int) -> tuple[str, NarrationRequest]:
    """Join units[start_index:] into the text to speak and index its units."""
    texts = [u.text for u in units[start_index:]]
    starts = []
    total = 0
    for text in texts:
        starts.append(total)
        total += len(text) + 1  # one separating space
    request = NarrationRequest(id=request_id, start_index=start_index, char_starts=tuple(starts))
    return " ".join(texts).strip(), request


class NarrationCoordinator:
    """Owns playback state for one document view.

    User operations (play, seek, reset, load_document) and engine events
    (delivered as messages through ``deliver``) are the only things that
    change state. Every narration request carries an id; events from a
    superseded request are dropped.

    Notifications are optional callables:
      on_unit_changed(index or None), on_state_changed(PlaybackState),
      on_error(message).

    The seek restart is scheduled on ``loop``. Without one the running
    loop is used, so a coordinator built outside a coroutine must be
    given a loop.
    """

    def __init__(
        self,
        engine,
        config: NarrationConfig | None = None,
        loop=None,
        restart_delay: float = SEEK_RESTART_DELAY,
        on_unit_changed=None,
        on_state_changed=None,
        on_error=None,
    ):
        self.engine = engine
        self.config = config or NarrationConfig()
        self.restart_delay = restart_delay
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                raise RuntimeError(
                    "NarrationCoordinator needs an event loop: pass loop= or create it inside a coroutine"
                ) from None
        self._loop = loop
        self._on_unit_changed = on_unit_changed
        self._on_state_changed = on_state_changed
        self._on_error = on_error

        self._units = ()
        self._state = PlaybackState.IDLE
        self._index = None
        self._request = None
        self._pending = None
        self._ids = itertools.count(1)
        self._unavailable_reported = False

    @property
    def units(self) -> tuple:
        return self._units

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def current_index(self) -> int | None:
        return self._index

    # --- User operations ---

    def load_document(self, units) -> None:
        """Replace the active units and return to a clean idle state."""
        self._stop()
        self._units = tuple(units)
        logger.debug("Loaded document with %d units", len(self._units))

    def play(self) -> None:
        """Toggle playback: resume when paused, pause when playing, else start."""
        if not self._units:
            self._report(NO_DOCUMENT_MESSAGE)
            return

        if self._state is PlaybackState.PAUSED and self._index is not None:
            self._resume()
        elif self._state is PlaybackState.PLAYING:
            self._pause()
        else:
            self._begin(self._index if self._index is not None else 0)

    def seek(self, index: int) -> None:
        """Jump to a unit; selecting the current unit pauses or resumes in place."""
        if not 0 <= index < len(self._units):
            logger.debug("Ignoring seek to %s (document has %d units)", index, len(self._units))
            return

        if index == self._index and self._state is PlaybackState.PLAYING:
            self._pause()
            return
        if index == self._index and self._state is PlaybackState.PAUSED:
            self._resume()
            return

        self._stop()
        self._pending = self._loop.call_later(self.restart_delay, self._begin, index)

    def reset(self) -> None:
        """Cancel narration and forget the current position."""
        self._stop()

    # --- Engine events ---

    def deliver(self, message) -> None:
        """Apply an engine event to the state machine."""
        if self._request is None or message.request_id != self._request.id:
            logger.debug("Dropping stale %s", message)
            return

        if isinstance(message, EngineStarted):
            self._set_index(self._request.start_index)
            self._set_state(PlaybackState.PLAYING)
        elif isinstance(message, EngineProgress):
            index = self._request.resolve(message.char_offset)
            if index is not None:
                self._set_index(index)
        elif isinstance(message, EngineEnded):
            self._finish()
        elif isinstance(message, EngineFailed):
            if not is_cancellation(message.code):
                logger.error("Speech synthesis error: %s", message.code)
                self._report(f"Speech synthesis error: {message.code}")
            self._finish()
        else:
            raise TypeError(f"Unknown engine message: {message!r}")

    # --- Internals ---

    def _callbacks(self, request_id: int) -> NarrationCallbacks:
        return NarrationCallbacks(
            on_start=lambda: self.deliver(EngineStarted(request_id)),
            on_progress=lambda offset: self.deliver(EngineProgress(request_id, offset)),
            on_end=lambda: self.deliver(EngineEnded(request_id)),
            on_error=lambda code=None: self.deliver(EngineFailed(request_id, code)),
        )

    def _begin(self, start_index: int) -> None:
        """Issue one narration request covering units[start_index:]."""
        self._cancel_pending()

        text, request = build_request(next(self._ids), self._units, start_index)
        if not text:
            logger.warning("No text to read from unit %d", start_index)
            return

        if not self.engine.is_available():
            if not self._unavailable_reported:
                self._unavailable_reported = True
                self._report(UNAVAILABLE_MESSAGE)
            return

        self._request = request
        self.engine.cancel()
        logger.info("Narrating from unit %d (%d chars)", start_index, len(text))
        try:
            self.engine.speak(text, self.config, self._callbacks(request.id))
        except EngineError as e:
            logger.error("Failed to start narration: %s", e)
            self._report(f"Speech synthesis error: {e.code}")
            self._finish()

    def _pause(self) -> None:
        if self.engine.is_speaking():
            self.engine.pause()
        self._set_state(PlaybackState.PAUSED)

    def _resume(self) -> None:
        self.engine.resume()
        self._set_state(PlaybackState.PLAYING)

    def _stop(self) -> None:
        """Cancel any request or pending restart, then go idle."""
        self._cancel_pending()
        self._request = None
        self.engine.cancel()
        self._set_state(PlaybackState.IDLE)
        self._set_index(None)

    def _finish(self) -> None:
        self._request = None
        self._set_state(PlaybackState.IDLE)
        self._set_index(None)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _set_state(self, state: PlaybackState) -> None:
        if state is self._state:
            return
        logger.debug("Playback %s -> %s", self._state.value, state.value)
        self._state = state
        if self._on_state_changed:
            self._on_state_changed(state)

    def _set_index(self, index: int | None) -> None:
        if index == self._index:
            return
        self._index = index
        if self._on_unit_changed:
            self._on_unit_changed(index)

    def _report(self, message: str) -> None:
        if self._on_error:
            self._on_error(message)
