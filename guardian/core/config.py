"""
Guardian - Configuration Module
===============================

Centralized configuration management with environment variable validation.

DESIGN:
    A single source of truth loaded from environment variables at startup.

    Key patterns:
    - Singleton via get_config() ensures one Config instance
    - Validation happens once at load time, not on every access
    - Detector thresholds default to guardian.core.constants and may be
      overridden per deployment
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Set

from guardian.core import constants as C
from guardian.core.logger import LOCAL_TZ


# =============================================================================
# Detector Thresholds
# =============================================================================

@dataclass
class DetectorThresholds:
    """
    Global detector thresholds.

    DESIGN:
        Grouped separately from Config so services and tests can build
        thresholds without touching the environment.
    """

    spam_window_seconds: int = C.SPAM_WINDOW_SECONDS
    spam_message_threshold: int = C.SPAM_MESSAGE_THRESHOLD
    spam_similarity_threshold: float = C.SPAM_SIMILARITY_THRESHOLD

    thread_spam_window_seconds: int = C.THREAD_SPAM_WINDOW_SECONDS
    thread_spam_threshold: int = C.THREAD_SPAM_THRESHOLD
    thread_spam_timeout_seconds: int = C.THREAD_SPAM_TIMEOUT_SECONDS

    raid_window_seconds: int = C.RAID_WINDOW_SECONDS
    raid_baseline_seconds: int = C.RAID_BASELINE_SECONDS
    raid_rate_multiplier: float = C.RAID_RATE_MULTIPLIER
    raid_join_floor: int = C.RAID_JOIN_FLOOR

    nuke_window_seconds: int = C.NUKE_WINDOW_SECONDS
    nuke_role_threshold: int = C.NUKE_ROLE_THRESHOLD
    nuke_channel_threshold: int = C.NUKE_CHANNEL_THRESHOLD

    gif_mute_seconds: int = C.GIF_MUTE_SECONDS


# =============================================================================
# Configuration Dataclass
# =============================================================================

@dataclass
class Config:
    """
    Bot configuration loaded from environment variables.

    Attributes:
        discord_token: Discord bot authentication token.
        data_dir: Directory holding the settings database and lock file.
        mod_log_channel_name: Name of the per-guild logging channel.
        mute_role_name: Name of the lazily created mute role.
        raid_role_name: Name of the lazily created raid-guard role.
        trusted_bot_ids: Bots that anti-nuke never acts on.
    """

    # -------------------------------------------------------------------------
    # Required
    # -------------------------------------------------------------------------

    discord_token: str

    # -------------------------------------------------------------------------
    # Optional: Identity & Paths
    # -------------------------------------------------------------------------

    data_dir: Path = Path("data")
    insult_words_path: Optional[Path] = None
    dangerous_bots_path: Optional[Path] = None

    # -------------------------------------------------------------------------
    # Optional: Names
    # -------------------------------------------------------------------------

    mod_log_channel_name: str = "guardian-log"
    mute_role_name: str = "Muted"
    raid_role_name: str = "RaidGuard"

    # -------------------------------------------------------------------------
    # Optional: Trust
    # -------------------------------------------------------------------------

    trusted_bot_ids: Set[int] = field(default_factory=set)

    # -------------------------------------------------------------------------
    # Optional: Webhooks
    # -------------------------------------------------------------------------

    error_webhook_url: Optional[str] = None

    # -------------------------------------------------------------------------
    # Detectors
    # -------------------------------------------------------------------------

    thresholds: DetectorThresholds = field(default_factory=DetectorThresholds)


# =============================================================================
# Embed Colors
# =============================================================================

class EmbedColors:
    """Standardized color palette for Discord embeds."""

    RED = 0xDC3545      # Bans, deletes, hazards
    GOLD = 0xE6B84A     # Warnings, timeouts
    GREEN = 0x1F5E2E    # Releases, positive actions
    BLUE = 0x3498DB     # Informational logs
    ORANGE = 0xFF9800   # Lockdown / high priority

    LOG_NEGATIVE = RED
    LOG_WARNING = GOLD
    LOG_POSITIVE = GREEN
    LOG_INFO = BLUE
    LOCKDOWN = ORANGE


# =============================================================================
# Validation
# =============================================================================

class ConfigValidationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


def _parse_int_set(value: Optional[str]) -> Set[int]:
    """
    Parse comma-separated string to set of integers.

    Args:
        value: Comma-separated string of integers (e.g., "123,456,789").

    Returns:
        Set of parsed integers, empty set if input is None or empty.
    """
    if not value:
        return set()
    result = set()
    for part in value.split(","):
        part = part.strip()
        if part:
            try:
                result.add(int(part))
            except ValueError:
                pass  # Skip invalid entries silently
    return result


def _parse_int_with_default(
    value: Optional[str],
    default: int,
    name: str,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
) -> int:
    """
    Parse optional integer with default and range validation.

    Args:
        value: String value from environment variable.
        default: Default value if not set or invalid.
        name: Variable name for warning messages.
        min_val: Minimum allowed value (inclusive).
        max_val: Maximum allowed value (inclusive).

    Returns:
        Parsed integer within valid range, or default.
    """
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        from guardian.core.logger import logger
        logger.warning(f"Config {name}='{value}' invalid, using default {default}")
        return default
    if min_val is not None and parsed < min_val:
        from guardian.core.logger import logger
        logger.warning(f"Config {name}={parsed} below min {min_val}, using {min_val}")
        return min_val
    if max_val is not None and parsed > max_val:
        from guardian.core.logger import logger
        logger.warning(f"Config {name}={parsed} above max {max_val}, using {max_val}")
        return max_val
    return parsed


def _parse_path_optional(value: Optional[str]) -> Optional[Path]:
    """Parse optional filesystem path."""
    return Path(value) if value else None


def _validate_url(value: Optional[str], name: str) -> Optional[str]:
    """Return the URL if it looks like http(s), otherwise None."""
    if not value:
        return None
    if not value.startswith(("https://", "http://")):
        from guardian.core.logger import logger
        logger.warning(f"Config {name} invalid URL format, ignoring")
        return None
    return value


# =============================================================================
# Configuration Loading
# =============================================================================

def _load_thresholds() -> DetectorThresholds:
    """Build detector thresholds from environment overrides."""
    env = os.getenv
    return DetectorThresholds(
        spam_window_seconds=_parse_int_with_default(
            env("SPAM_WINDOW_SECONDS"), C.SPAM_WINDOW_SECONDS, "SPAM_WINDOW_SECONDS", min_val=1, max_val=600
        ),
        spam_message_threshold=_parse_int_with_default(
            env("SPAM_MESSAGE_THRESHOLD"), C.SPAM_MESSAGE_THRESHOLD, "SPAM_MESSAGE_THRESHOLD", min_val=2, max_val=50
        ),
        spam_similarity_threshold=_parse_int_with_default(
            env("SPAM_SIMILARITY_PERCENT"),
            int(C.SPAM_SIMILARITY_THRESHOLD * 100),
            "SPAM_SIMILARITY_PERCENT",
            min_val=1,
            max_val=100,
        ) / 100,
        thread_spam_window_seconds=_parse_int_with_default(
            env("THREAD_SPAM_WINDOW_SECONDS"), C.THREAD_SPAM_WINDOW_SECONDS, "THREAD_SPAM_WINDOW_SECONDS",
            min_val=1, max_val=3600,
        ),
        thread_spam_threshold=_parse_int_with_default(
            env("THREAD_SPAM_THRESHOLD"), C.THREAD_SPAM_THRESHOLD, "THREAD_SPAM_THRESHOLD", min_val=1, max_val=100
        ),
        thread_spam_timeout_seconds=_parse_int_with_default(
            env("THREAD_SPAM_TIMEOUT_SECONDS"), C.THREAD_SPAM_TIMEOUT_SECONDS, "THREAD_SPAM_TIMEOUT_SECONDS",
            min_val=60, max_val=28 * 86400,
        ),
        raid_window_seconds=_parse_int_with_default(
            env("RAID_WINDOW_SECONDS"), C.RAID_WINDOW_SECONDS, "RAID_WINDOW_SECONDS", min_val=10, max_val=86400
        ),
        raid_baseline_seconds=_parse_int_with_default(
            env("RAID_BASELINE_SECONDS"), C.RAID_BASELINE_SECONDS, "RAID_BASELINE_SECONDS",
            min_val=3600, max_val=90 * 86400,
        ),
        raid_rate_multiplier=float(_parse_int_with_default(
            env("RAID_RATE_MULTIPLIER"), int(C.RAID_RATE_MULTIPLIER), "RAID_RATE_MULTIPLIER", min_val=1, max_val=100
        )),
        raid_join_floor=_parse_int_with_default(
            env("RAID_JOIN_FLOOR"), C.RAID_JOIN_FLOOR, "RAID_JOIN_FLOOR", min_val=1, max_val=1000
        ),
        nuke_window_seconds=_parse_int_with_default(
            env("NUKE_WINDOW_SECONDS"), C.NUKE_WINDOW_SECONDS, "NUKE_WINDOW_SECONDS", min_val=10, max_val=3600
        ),
        nuke_role_threshold=_parse_int_with_default(
            env("NUKE_ROLE_THRESHOLD"), C.NUKE_ROLE_THRESHOLD, "NUKE_ROLE_THRESHOLD", min_val=1, max_val=500
        ),
        nuke_channel_threshold=_parse_int_with_default(
            env("NUKE_CHANNEL_THRESHOLD"), C.NUKE_CHANNEL_THRESHOLD, "NUKE_CHANNEL_THRESHOLD", min_val=1, max_val=500
        ),
        gif_mute_seconds=_parse_int_with_default(
            env("GIF_MUTE_SECONDS"), C.GIF_MUTE_SECONDS, "GIF_MUTE_SECONDS", min_val=1, max_val=3600
        ),
    )


def load_config() -> Config:
    """
    Load and validate configuration from environment variables.

    Returns:
        Validated Config object with all settings.

    Raises:
        ConfigValidationError: If any required variable is missing or invalid.
    """
    discord_token = os.getenv("DISCORD_TOKEN")
    if not discord_token:
        raise ConfigValidationError("Missing required environment variables: DISCORD_TOKEN")

    return Config(
        discord_token=discord_token,
        data_dir=Path(os.getenv("DATA_DIR", "data")),
        insult_words_path=_parse_path_optional(os.getenv("INSULT_WORDS_PATH")),
        dangerous_bots_path=_parse_path_optional(os.getenv("DANGEROUS_BOTS_PATH")),
        mod_log_channel_name=os.getenv("MOD_LOG_CHANNEL_NAME", "guardian-log"),
        mute_role_name=os.getenv("MUTE_ROLE_NAME", "Muted"),
        raid_role_name=os.getenv("RAID_ROLE_NAME", "RaidGuard"),
        trusted_bot_ids=_parse_int_set(os.getenv("TRUSTED_BOT_IDS")),
        error_webhook_url=_validate_url(os.getenv("ERROR_WEBHOOK_URL"), "ERROR_WEBHOOK_URL"),
        thresholds=_load_thresholds(),
    )


# =============================================================================
# Global Config Instance
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance, loading if needed.

    Raises:
        ConfigValidationError: On first call if config is invalid.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def validate_and_log_config() -> None:
    """
    Validate configuration and log a summary at startup.

    Raises:
        ConfigValidationError: If required configuration is missing.
    """
    from guardian.core.logger import logger

    config = get_config()
    t = config.thresholds

    logger.tree("Configuration Validated", [
        ("Timezone", str(LOCAL_TZ)),
        ("Data Dir", str(config.data_dir)),
        ("Log Channel", f"#{config.mod_log_channel_name}"),
        ("Spam", f"{t.spam_message_threshold} similar / {t.spam_window_seconds}s @ {t.spam_similarity_threshold:.2f}"),
        ("Thread Spam", f"{t.thread_spam_threshold} ops / {t.thread_spam_window_seconds}s"),
        ("Raid", f"floor {t.raid_join_floor}, x{t.raid_rate_multiplier:g} / {t.raid_window_seconds}s"),
        ("Anti-Nuke", f"roles {t.nuke_role_threshold}, channels {t.nuke_channel_threshold} / {t.nuke_window_seconds}s"),
        ("Trusted Bots", str(len(config.trusted_bot_ids))),
    ], emoji="⚙️")


__all__ = [
    "Config",
    "ConfigValidationError",
    "DetectorThresholds",
    "EmbedColors",
    "get_config",
    "load_config",
    "validate_and_log_config",
]
