"""Data models for segmentation and narration playback."""

import enum
from dataclasses import dataclass

from voxe.constants import DEFAULT_LANG, DEFAULT_VOICE, DEFAULT_RATE, DEFAULT_PITCH


@dataclass(frozen=True)
class Unit:
    text: str
    start_offset: int   # into the normalized text, inclusive
    end_offset: int     # exclusive


class PlaybackState(enum.Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True)
class NarrationConfig:
    """Voice settings handed through to the engine untouched."""

    lang: str = DEFAULT_LANG
    voice: str | None = DEFAULT_VOICE   # None: first voice matching lang
    rate: float = DEFAULT_RATE
    pitch: float = DEFAULT_PITCH


# Engine events, tagged with the id of the request that produced them.

@dataclass(frozen=True)
class EngineStarted:
    request_id: int


@dataclass(frozen=True)
class EngineProgress:
    request_id: int
    char_offset: int


@dataclass(frozen=True)
class EngineEnded:
    request_id: int


@dataclass(frozen=True)
class EngineFailed:
    request_id: int
    code: str | None = None
