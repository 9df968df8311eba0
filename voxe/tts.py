"""Narration engine: edge-tts synthesis with word boundaries, pygame playback."""

import asyncio
import collections
import io
import logging
from dataclasses import dataclass

import aiohttp
import edge_tts
import pygame
from pydub import AudioSegment

from voxe.constants import (
    BOUNDARY_TICKS_PER_MS,
    ENGINE_READY_TIMEOUT,
    PITCH_HZ_PER_UNIT,
    PLAYBACK_POLL_INTERVAL,
    READY_PROBE_DELAY,
)
from voxe.engine import NarrationCallbacks, NarrationEngine
from voxe.errors import EngineError, EngineUnavailable
from voxe.models import NarrationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Boundary:
    time_ms: float
    char_offset: int


def rate_string(rate: float) -> str:
    """Convert a speed multiplier to an edge-tts rate string.

    1.0 -> "+0%", 0.9 -> "-10%", 1.5 -> "+50%".
    """
    return f"{round((rate - 1.0) * 100):+d}%"


def pitch_string(pitch: float) -> str:
    """Convert a pitch multiplier to an edge-tts pitch shift in Hz."""
    return f"{round((pitch - 1.0) * PITCH_HZ_PER_UNIT):+d}Hz"


def locate_words(text: str, words: list[str]) -> list[int]:
    """Find each boundary word in text, scanning forward.

    A word the service rewrote (and so can't be found) is placed at the end
    of the previous match.
    """
    offsets = []
    cursor = 0
    for word in words:
        pos = text.find(word, cursor)
        if pos == -1:
            offsets.append(cursor)
            continue
        offsets.append(pos)
        cursor = pos + len(word)
    return offsets


async def synthesize(text: str, voice: str, config: NarrationConfig) -> tuple[bytes, list[Boundary]]:
    """Stream MP3 audio and word boundaries for text from edge-tts.

    Empty audio counts as a synthesis failure.
    """
    communicate = edge_tts.Communicate(
        text,
        voice,
        rate=rate_string(config.rate),
        pitch=pitch_string(config.pitch),
        boundary="WordBoundary",
    )
    audio = bytearray()
    timings = []
    words = []
    async for chunk in communicate.stream():
        if chunk["type"] == "audio":
            audio.extend(chunk["data"])
        elif chunk["type"] == "WordBoundary":
            timings.append(chunk["offset"] / BOUNDARY_TICKS_PER_MS)
            words.append(chunk["text"])

    if not audio:
        raise EngineError("synthesis-failed", f"TTS produced no audio for: {text[:50]}...")

    offsets = locate_words(text, words)
    return bytes(audio), [Boundary(t, o) for t, o in zip(timings, offsets)]


def mp3_to_wav(data: bytes) -> bytes:
    """Decode MP3 bytes to WAV so every pygame build can play them."""
    buf = io.BytesIO()
    AudioSegment.from_file(io.BytesIO(data), format="mp3").export(buf, format="wav")
    return buf.getvalue()


def _error_code(exc: Exception) -> str:
    if isinstance(exc, EngineError):
        return exc.code
    if isinstance(exc, (aiohttp.ClientError, edge_tts.exceptions.WebSocketError)):
        return "network"
    if isinstance(exc, pygame.error):
        return "audio-hardware"
    return "synthesis-failed"


class EdgeNarrationEngine(NarrationEngine):
    """
    Narrate with Microsoft Edge neural voices.

    Synthesis and playback polling run as one asyncio task per request on the
    running loop, so callbacks fire on the same loop as user operations.
    Progress is reported for each word boundary once the mixer position has
    passed it.
    """

    def __init__(self, poll_interval: float = PLAYBACK_POLL_INTERVAL):
        self.poll_interval = poll_interval
        self._task = None
        self._callbacks = None
        self._started = False
        self._paused = False
        self._mixer_ready = None
        self._voices = None
        self._voices_task = None

    # --- Availability and voices ---

    def is_available(self) -> bool:
        """Initialize the mixer once; False when no audio output exists."""
        if self._mixer_ready is None:
            try:
                pygame.mixer.init()
                self._mixer_ready = True
            except pygame.error as e:
                logger.warning("Audio output unavailable: %s", e)
                self._mixer_ready = False
        return self._mixer_ready

    async def load_voices(self) -> list[dict]:
        """Fetch the voice list once; concurrent callers share the request."""
        if self._voices is not None:
            return self._voices
        if self._voices_task is None:
            self._voices_task = asyncio.ensure_future(edge_tts.list_voices())
        try:
            self._voices = await asyncio.shield(self._voices_task)
        except Exception:
            self._voices_task = None
            raise
        return self._voices

    async def wait_until_ready(
        self,
        timeout: float = ENGINE_READY_TIMEOUT,
        probe_delay: float = READY_PROBE_DELAY,
    ) -> list[dict]:
        """Wait for voices, probing once more after a timeout.

        Raises:
            EngineUnavailable: If there is no audio output or no voices arrive.
        """
        if not self.is_available():
            raise EngineUnavailable("No audio output device")
        try:
            return await asyncio.wait_for(self.load_voices(), timeout)
        except asyncio.TimeoutError:
            logger.warning("Voice list not ready after %.0fs, probing again...", timeout)
        except (aiohttp.ClientError, edge_tts.exceptions.EdgeTTSException) as e:
            raise EngineUnavailable(f"Could not load voices: {e}") from e

        await asyncio.sleep(probe_delay)
        if self._voices_task is not None and self._voices_task.done() and not self._voices_task.exception():
            self._voices = self._voices_task.result()
        if not self._voices:
            raise EngineUnavailable("Voice list did not become ready")
        return self._voices

    async def _voice_for(self, config: NarrationConfig) -> str:
        if config.voice:
            return config.voice
        for voice in await self.load_voices():
            if voice.get("Locale") == config.lang:
                return voice["ShortName"]
        raise EngineError("language-unavailable", f"No voice for language {config.lang}")

    # --- NarrationEngine ---

    def speak(self, text: str, config: NarrationConfig, callbacks: NarrationCallbacks) -> None:
        self.cancel()
        self._callbacks = callbacks
        self._started = False
        self._paused = False
        self._task = asyncio.get_running_loop().create_task(self._run(text, config, callbacks))

    def pause(self) -> None:
        if self._started and not self._paused:
            pygame.mixer.music.pause()
        self._paused = True

    def resume(self) -> None:
        if self._started and self._paused:
            pygame.mixer.music.unpause()
        self._paused = False

    def cancel(self) -> None:
        """Stop the current request and report it as canceled or interrupted."""
        if self._task is None or self._task.done():
            return
        self._task.cancel()
        if self._started:
            pygame.mixer.music.stop()
        callbacks = self._callbacks
        code = "interrupted" if self._started else "canceled"
        self._task = None
        self._callbacks = None
        self._started = False
        self._paused = False
        callbacks.on_error(code)

    def is_speaking(self) -> bool:
        return self._task is not None and not self._task.done() and self._started

    def is_paused(self) -> bool:
        return self._paused

    async def _run(self, text: str, config: NarrationConfig, callbacks: NarrationCallbacks) -> None:
        try:
            voice = await self._voice_for(config)
            audio, boundaries = await synthesize(text, voice, config)
            wav = await asyncio.get_running_loop().run_in_executor(None, mp3_to_wav, audio)

            while self._paused:
                await asyncio.sleep(self.poll_interval)

            pygame.mixer.music.load(io.BytesIO(wav), "wav")
            pygame.mixer.music.play()
            self._started = True
            callbacks.on_start()

            pending = collections.deque(boundaries)
            while True:
                await asyncio.sleep(self.poll_interval)
                if self._paused:
                    continue
                position = pygame.mixer.music.get_pos()
                while pending and pending[0].time_ms <= position:
                    callbacks.on_progress(pending.popleft().char_offset)
                if not pygame.mixer.music.get_busy():
                    break
        except asyncio.CancelledError:
            raise
        except Exception as e:
            code = _error_code(e)
            logger.error("Narration failed (%s): %s", code, e)
            if self._started:
                pygame.mixer.music.stop()
            self._task = None
            self._started = False
            self._paused = False
            callbacks.on_error(code)
            return

        self._task = None
        self._started = False
        callbacks.on_end()
