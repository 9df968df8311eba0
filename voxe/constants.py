"""All magic numbers and configuration constants."""

SEEK_RESTART_DELAY = 0.1            # seconds: wait after cancel before re-issuing on seek
ENGINE_READY_TIMEOUT = 10.0         # seconds: bounded wait for the voice list
READY_PROBE_DELAY = 1.0             # seconds: grace period before the fallback readiness probe
PLAYBACK_POLL_INTERVAL = 0.05       # seconds: mixer position polling period
BOUNDARY_TICKS_PER_MS = 10_000      # edge-tts boundary offsets are 100ns ticks
PITCH_HZ_PER_UNIT = 50              # Hz shift for a pitch multiplier delta of 1.0
CANCELLATION_CODES = ("canceled", "interrupted")
DEFAULT_LANG = "en-US"
DEFAULT_VOICE = "en-US-AriaNeural"
DEFAULT_RATE = 1.0
DEFAULT_PITCH = 1.0
COVER_MIN_CHARS = 50                # sections shorter than this look like a cover
COVER_MIN_WORDS = 10                # sections with fewer words look like a cover
COVER_KEYWORDS = ("title page", "copyright")
MAX_SECTIONS_TO_TRY = 10            # stop looking for content after this many sections
SETTINGS_FILE = "voxe.json"
VERSION = "0.1.0"
