"""
Guardian - Constants
====================

Default thresholds, windows and limits for every detector.
Values here are the global defaults; Config may override most of them
from environment variables.
"""

from pathlib import Path


# =============================================================================
# Similarity Spam
# =============================================================================

SPAM_WINDOW_SECONDS = 10
SPAM_MESSAGE_THRESHOLD = 3  # similar messages (including the current one)
SPAM_SIMILARITY_THRESHOLD = 0.6
SPAM_WARNING_DELETE_AFTER = 5  # seconds


# =============================================================================
# Thread Spam
# =============================================================================

THREAD_SPAM_WINDOW_SECONDS = 30
THREAD_SPAM_THRESHOLD = 3
THREAD_SPAM_TIMEOUT_SECONDS = 600  # 10 minutes


# =============================================================================
# Raid Detection
# =============================================================================

RAID_WINDOW_SECONDS = 300  # 5 minutes
RAID_BASELINE_SECONDS = 7 * 24 * 3600  # 7 days
RAID_RATE_MULTIPLIER = 5.0
RAID_JOIN_FLOOR = 5


# =============================================================================
# Anti-Nuke
# =============================================================================

NUKE_WINDOW_SECONDS = 120  # 2 minutes
NUKE_ROLE_THRESHOLD = 10
NUKE_CHANNEL_THRESHOLD = 5


# =============================================================================
# GIF Guard
# =============================================================================

GIF_MAX_BYTES = 15 * 1024 * 1024  # anything larger is dangerous outright
GIF_DOWNLOAD_CAP_BYTES = 20 * 1024 * 1024
GIF_DOWNLOAD_TIMEOUT = 15  # seconds
GIF_PROBE_TIMEOUT = 5  # seconds
GIF_MAX_DIMENSION = 8192
GIF_MAX_FRAMES = 500  # hard refusal
GIF_ABORT_FRAMES = 200  # decode abort
GIF_ABNORMAL_MIN_FRAMES = 50
GIF_ABNORMAL_BYTES_PER_FRAME = 100
GIF_SAMPLE_STEP = 8  # sample every Nth pixel on both axes
GIF_MUTE_SECONDS = 5
GIF_WARNING_DELETE_AFTER = 15

# Flashing classifier
FLASH_LUMINANCE_DELTA = 150
FLASH_HUE_DELTA = 150
FAST_FRAME_MS = 20
RAPID_RATIO_STRONG = 0.6
RAPID_RATIO_WEAK = 0.4
FAST_RATIO_WITH_WEAK = 0.6
EXTREME_LUMINANCE_DELTA = 180
EXTREME_HUE_DELTA = 180
FAST_RATIO_WITH_EXTREME = 0.5
RAPID_RUN_LIMIT = 5


# =============================================================================
# Word Filters
# =============================================================================

INSULT_DELETE_DELAY = 2  # seconds; reply stays readable in context
INSULT_ADMONITION = (
    "⚠️ 暴言・不適切な表現は禁止されています。\n"
    "Insulting or abusive language is not allowed here."
)

# Punishment level -> timeout seconds (levels 2-7); 8 = kick, 9 = ban
NGWORD_TIMEOUT_LEVELS = {
    2: 60,        # 1 minute
    3: 300,       # 5 minutes
    4: 600,       # 10 minutes
    5: 3600,      # 1 hour
    6: 21600,     # 6 hours
    7: 86400,     # 24 hours
}
NGWORD_KICK_LEVEL = 8
NGWORD_BAN_LEVEL = 9


# =============================================================================
# Remediation
# =============================================================================

DELETED_MESSAGE_MEMORY = 5000  # message ids remembered by MessageDeleter


# =============================================================================
# Bundled Data
# =============================================================================

PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / "data"
INSULT_WORDS_FILE = PACKAGE_DATA_DIR / "insult_words.json"
DANGEROUS_BOTS_FILE = PACKAGE_DATA_DIR / "dangerous_bots.json"
