"""Tests for the engine base class and error types."""

import pytest

from voxe.engine import NarrationEngine
from voxe.errors import EngineError, NoContentError, UserInputError, VoxeError


def test_engine_is_abstract():
    """NarrationEngine can't be instantiated without the playback methods."""
    with pytest.raises(TypeError):
        NarrationEngine()


def test_get_info(engine):
    engine.speaking = True
    assert engine.get_info() == {
        "engine": "FakeEngine",
        "available": True,
        "speaking": True,
        "paused": False,
    }


def test_engine_error_carries_code():
    """The raw code is kept; the message defaults to it."""
    err = EngineError("network")
    assert err.code == "network"
    assert str(err) == "network"
    assert str(EngineError("network", "Connection reset")) == "Connection reset"


def test_error_hierarchy():
    assert issubclass(NoContentError, UserInputError)
    assert issubclass(UserInputError, VoxeError)
    assert issubclass(EngineError, VoxeError)
