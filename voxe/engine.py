"""Narration engine base class.

Provides the abstract interface the coordinator drives. Concrete engines
speak text and report progress through a NarrationCallbacks bundle.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from voxe.constants import CANCELLATION_CODES
from voxe.models import NarrationConfig


@dataclass(frozen=True)
class NarrationCallbacks:
    """Callbacks an engine must fire for each narration request."""

    on_start: Callable[[], None]
    on_progress: Callable[[int], None]   # char offset into the spoken text
    on_end: Callable[[], None]
    on_error: Callable[[Optional[str]], None]


def is_cancellation(code: Optional[str]) -> bool:
    """True when an error code means the request was stopped on purpose."""
    return not code or code in CANCELLATION_CODES


class NarrationEngine(ABC):
    """
    Abstract base class for narration engines.

    Subclasses must implement:
    - speak(): Start narrating text, superseding any prior request
    - pause() / resume(): Hold and continue the current request
    - cancel(): Stop the current request; fires on_error with a cancellation code
    - is_speaking() / is_paused(): Report playback status
    """

    @abstractmethod
    def speak(
        self,
        text: str,
        config: NarrationConfig,
        callbacks: NarrationCallbacks,
    ) -> None:
        """
        Start narrating text.

        Args:
            text: The text to speak.
            config: Voice settings.
            callbacks: Event callbacks for this request.

        Raises:
            EngineError: If the request cannot be issued.
        """
        pass

    @abstractmethod
    def pause(self) -> None:
        pass

    @abstractmethod
    def resume(self) -> None:
        pass

    @abstractmethod
    def cancel(self) -> None:
        pass

    @abstractmethod
    def is_speaking(self) -> bool:
        pass

    @abstractmethod
    def is_paused(self) -> bool:
        pass

    def is_available(self) -> bool:
        """Check whether narration can run in this environment."""
        return True

    def get_info(self) -> dict:
        """
        Get information about the engine.

        Returns:
            Dictionary with engine info.
        """
        return {
            "engine": self.__class__.__name__,
            "available": self.is_available(),
            "speaking": self.is_speaking(),
            "paused": self.is_paused(),
        }
