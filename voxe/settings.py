"""Narration settings loaded from an optional JSON file."""

import json
import logging
import os

from voxe.constants import SEEK_RESTART_DELAY, SETTINGS_FILE
from voxe.models import NarrationConfig

logger = logging.getLogger(__name__)


def load_settings(path: str = SETTINGS_FILE) -> tuple[NarrationConfig, float]:
    """Read narration config and seek delay (seconds) from a JSON file.

    Missing keys keep their defaults. A missing or malformed file yields
    the defaults.
    """
    defaults = NarrationConfig()
    if not os.path.exists(path):
        return defaults, SEEK_RESTART_DELAY
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError:
        logger.warning("Malformed settings file: %s, using defaults", path)
        return defaults, SEEK_RESTART_DELAY

    if not isinstance(data, dict):
        logger.warning("Malformed settings file: %s, using defaults", path)
        return defaults, SEEK_RESTART_DELAY

    try:
        config = NarrationConfig(
            lang=data.get("lang", defaults.lang),
            voice=data.get("voice", defaults.voice),
            rate=float(data.get("rate", defaults.rate)),
            pitch=float(data.get("pitch", defaults.pitch)),
        )
        delay_ms = data.get("seek_delay_ms")
        delay = delay_ms / 1000 if delay_ms is not None else SEEK_RESTART_DELAY
    except (TypeError, ValueError):
        logger.warning("Malformed settings file: %s, using defaults", path)
        return defaults, SEEK_RESTART_DELAY
    return config, delay


def apply_overrides(config: NarrationConfig, **overrides) -> NarrationConfig:
    """Return config with every non-None override applied."""
    values = {
        "lang": config.lang,
        "voice": config.voice,
        "rate": config.rate,
        "pitch": config.pitch,
    }
    for key, value in overrides.items():
        if value is not None:
            values[key] = value
    return NarrationConfig(**values)
