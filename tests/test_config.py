"""
Tests for configuration layering and validation.
"""

from unittest.mock import patch

import keyring
import pytest

from settlement_sync.core.config import DEFAULT_SETTLEMENT_ID, load_config
from settlement_sync.core.errors import ConfigurationError

REQUIRED_ENV = {"SUPABASE_URL": "https://db.example.co/", "SUPABASE_SERVICE_ROLE_KEY": "env-key"}


class TestLoadConfig:
    def test_defaults(self, tmp_path):
        config = load_config(env=REQUIRED_ENV, config_path=str(tmp_path / "missing.toml"), use_keyring=False)

        assert config.supabase_url == "https://db.example.co"
        assert config.service_role_key == "env-key"
        assert config.settlement_ids == [DEFAULT_SETTLEMENT_ID]
        assert config.scrape_interval_seconds == 60.0
        assert config.member_scope == "settlement"
        assert config.manual_scrape_cooldown_seconds == 300.0
        assert config.snapshots_enabled is True

    def test_missing_credentials_fatal(self, tmp_path):
        with pytest.raises(ConfigurationError, match="SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY"):
            load_config(env={}, config_path=str(tmp_path / "missing.toml"), use_keyring=False)

    def test_legacy_url_variable(self, tmp_path):
        env = {"VITE_SUPABASE_URL": "https://legacy.example.co", "SUPABASE_SERVICE_ROLE_KEY": "k"}

        config = load_config(env=env, config_path=str(tmp_path / "missing.toml"), use_keyring=False)

        assert config.supabase_url == "https://legacy.example.co"

    def test_file_then_environment_precedence(self, tmp_path):
        config_file = tmp_path / "settlement_sync.toml"
        config_file.write_text(
            'supabase_url = "https://file.example.co"\n'
            'settlement_ids = ["1", "2"]\n'
            "scrape_interval_seconds = 120\n"
            'member_scope = "global"\n'
        )
        env = {"SUPABASE_SERVICE_ROLE_KEY": "k", "SCRAPE_INTERVAL_SECONDS": "30", "SNAPSHOTS_ENABLED": "false"}

        config = load_config(env=env, config_path=str(config_file), use_keyring=False)

        assert config.supabase_url == "https://file.example.co"
        assert config.settlement_ids == ["1", "2"]
        assert config.scrape_interval_seconds == 30.0
        assert config.member_scope == "global"
        assert config.snapshots_enabled is False

    def test_config_path_from_environment(self, tmp_path):
        config_file = tmp_path / "custom.toml"
        config_file.write_text('snapshot_dir = "out"\n')
        env = dict(REQUIRED_ENV, SETTLEMENT_SYNC_CONFIG=str(config_file))

        assert load_config(env=env, use_keyring=False).snapshot_dir == "out"

    def test_settlement_ids_from_environment(self, tmp_path):
        env = dict(REQUIRED_ENV, SETTLEMENT_IDS="111, 222,,")

        config = load_config(env=env, config_path=str(tmp_path / "missing.toml"), use_keyring=False)

        assert config.settlement_ids == ["111", "222"]

    def test_credential_from_keyring(self, tmp_path):
        env = {"SUPABASE_URL": "https://db.example.co"}

        with patch("settlement_sync.core.config.keyring.get_password", return_value="keyring-key") as get_password:
            config = load_config(env=env, config_path=str(tmp_path / "missing.toml"))

        assert config.service_role_key == "keyring-key"
        get_password.assert_called_once_with("SettlementSync", "service_role_key")

    def test_no_keyring_backend(self, tmp_path):
        env = {"SUPABASE_URL": "https://db.example.co"}

        with patch("settlement_sync.core.config.keyring.get_password", side_effect=keyring.errors.NoKeyringError()):
            with pytest.raises(ConfigurationError, match="SUPABASE_SERVICE_ROLE_KEY"):
                load_config(env=env, config_path=str(tmp_path / "missing.toml"))

    @pytest.mark.parametrize(
        "overrides",
        [
            {"MEMBER_SCOPE": "everyone"},
            {"SCRAPE_INTERVAL_SECONDS": "0"},
            {"SCRAPE_INTERVAL_SECONDS": "soon"},
        ],
    )
    def test_invalid_values(self, tmp_path, overrides):
        with pytest.raises(ConfigurationError):
            load_config(env=dict(REQUIRED_ENV, **overrides), config_path=str(tmp_path / "missing.toml"), use_keyring=False)

    def test_invalid_toml(self, tmp_path):
        config_file = tmp_path / "bad.toml"
        config_file.write_text("this is = = not toml")

        with pytest.raises(ConfigurationError, match="not valid TOML"):
            load_config(env=REQUIRED_ENV, config_path=str(config_file), use_keyring=False)
