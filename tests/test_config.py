"""
Tests for environment configuration.
"""

import pytest

from guardian.core.config import ConfigValidationError, load_config


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "DISCORD_TOKEN", "TRUSTED_BOT_IDS", "SPAM_SIMILARITY_PERCENT", "RAID_JOIN_FLOOR",
        "NUKE_CHANNEL_THRESHOLD", "ERROR_WEBHOOK_URL", "DATA_DIR", "MOD_LOG_CHANNEL_NAME",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLoadConfig:
    """Tests for load_config()."""

    def test_missing_token_raises(self, clean_env):
        with pytest.raises(ConfigValidationError):
            load_config()

    def test_defaults(self, clean_env):
        clean_env.setenv("DISCORD_TOKEN", "abc")

        config = load_config()

        assert config.discord_token == "abc"
        assert config.mod_log_channel_name == "guardian-log"
        assert config.trusted_bot_ids == set()
        assert config.thresholds.spam_message_threshold == 3
        assert config.thresholds.spam_similarity_threshold == pytest.approx(0.6)
        assert config.thresholds.nuke_role_threshold == 10
        assert config.thresholds.nuke_channel_threshold == 5

    def test_trusted_bot_ids_skip_garbage(self, clean_env):
        clean_env.setenv("DISCORD_TOKEN", "abc")
        clean_env.setenv("TRUSTED_BOT_IDS", "123, 456,nope,,789")

        assert load_config().trusted_bot_ids == {123, 456, 789}

    def test_threshold_overrides(self, clean_env):
        clean_env.setenv("DISCORD_TOKEN", "abc")
        clean_env.setenv("SPAM_SIMILARITY_PERCENT", "80")
        clean_env.setenv("NUKE_CHANNEL_THRESHOLD", "3")

        t = load_config().thresholds

        assert t.spam_similarity_threshold == pytest.approx(0.8)
        assert t.nuke_channel_threshold == 3

    def test_out_of_range_is_clamped(self, clean_env):
        clean_env.setenv("DISCORD_TOKEN", "abc")
        clean_env.setenv("RAID_JOIN_FLOOR", "0")
        assert load_config().thresholds.raid_join_floor == 1

    def test_invalid_number_uses_default(self, clean_env):
        clean_env.setenv("DISCORD_TOKEN", "abc")
        clean_env.setenv("RAID_JOIN_FLOOR", "lots")
        assert load_config().thresholds.raid_join_floor == 5

    def test_bad_webhook_ignored(self, clean_env):
        clean_env.setenv("DISCORD_TOKEN", "abc")
        clean_env.setenv("ERROR_WEBHOOK_URL", "not-a-url")
        assert load_config().error_webhook_url is None
