"""Default endpoints, cache settings and other constants."""

from pathlib import Path

# Remote analysis service
DEFAULT_API_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_VOICE_API_BASE_URL = "http://127.0.0.1:8000"
DEFAULT_USER_ID = "default_user"
DEFAULT_REQUEST_TIMEOUT_SEC = 300.0

# Paths
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "vhs"
DEFAULT_DB_PATH = DEFAULT_CONFIG_DIR / "vhs.db"

# Config file
CONFIG_FILE_PATH = DEFAULT_CONFIG_DIR / "config.json"

# Conversation sessions in the durable tier expire after 12 hours
DEFAULT_SESSION_TTL_HOURS = 12.0
MS_PER_HOUR = 60 * 60 * 1000

# Video keys
VIDEO_KEY_PREFIX = "rag_"
UNKNOWN_VIDEO_KEY = "rag_unknown"
INVALID_VIDEO_KEY = "rag_invalid"
FINGERPRINT_LENGTH = 12
MAX_KEY_PREFIX_CHARS = 64

# Highlights
HIGHLIGHT_MODES = ("text", "voice")
DEFAULT_HIGHLIGHT_DURATION_SEC = 30
DEFAULT_HIGHLIGHT_COUNT = 1
FALLBACK_HIGHLIGHT_TITLE = "AI highlight"

# Conversation
ASK_FAILURE_ANSWER = "Failed to generate an answer."
