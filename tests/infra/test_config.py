"""
Tests for infra/config/ module.

Tests the configuration system:
- Config loading/saving
- Env var expansion
- Provider definitions and credential status
- Config path resolution

All tests use temporary directories - no production data touched.
"""

import pytest
import yaml
from pathlib import Path

from infra.config import (
    OhseerConfig,
    ProviderConfig,
    DefaultsConfig,
    ConfigManager,
    resolve_env_vars,
    load_config,
    get_config_path,
    get_config,
    DEFAULT_CONFIG_PATH,
)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "ohseer" / "config.yaml"


@pytest.fixture
def manager(config_path):
    """Create a ConfigManager pointing at a temp file."""
    return ConfigManager(config_path)


# =============================================================================
# Schema Tests
# =============================================================================

class TestResolveEnvVars:
    """Test environment variable resolution."""

    def test_resolves_single_var(self, monkeypatch):
        """${VAR} should be replaced with env value."""
        monkeypatch.setenv("TEST_KEY", "secret123")
        assert resolve_env_vars("${TEST_KEY}") == "secret123"

    def test_resolves_multiple_vars(self, monkeypatch):
        monkeypatch.setenv("OHSEER_USER", "alice")
        monkeypatch.setenv("OHSEER_HOST", "example.com")
        assert resolve_env_vars("${OHSEER_USER}@${OHSEER_HOST}") == "alice@example.com"

    def test_missing_var_becomes_empty(self, monkeypatch):
        """Missing env var should become empty string."""
        monkeypatch.delenv("DEFINITELY_NOT_SET", raising=False)
        assert resolve_env_vars("${DEFINITELY_NOT_SET}") == ""

    def test_literal_string_unchanged(self):
        assert resolve_env_vars("literal-api-key") == "literal-api-key"

    def test_non_string_unchanged(self):
        assert resolve_env_vars(["TABLES"]) == ["TABLES"]
        assert resolve_env_vars(5) == 5


class TestProviderConfig:
    def test_minimal_provider(self):
        """Provider only needs type."""
        config = ProviderConfig(type="mistral-ocr")
        assert config.type == "mistral-ocr"
        assert config.enabled is True
        assert config.model is None
        assert config.api_key_refs == []
        assert config.timeout is None
        assert config.poll_interval == 2.0

    def test_full_provider(self):
        config = ProviderConfig(
            type="claude",
            model="claude-opus-4-1",
            api_key_refs=["anthropic"],
            timeout=120,
            poll_interval=1,
            enabled=False,
            extra={"max_tokens": 8000},
        )
        assert config.model == "claude-opus-4-1"
        assert config.timeout == 120
        assert config.enabled is False
        assert config.extra == {"max_tokens": 8000}

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            ProviderConfig(type="claude", timeout=0)


class TestOhseerConfig:
    def test_empty_config_valid(self):
        """Empty config should be valid with defaults."""
        config = OhseerConfig()
        assert config.api_keys == {}
        assert config.providers == {}
        assert config.defaults.providers == ["tensorlake", "mistral", "claude"]
        assert config.defaults.timeout == 60.0

    def test_with_defaults_creates_sensible_config(self):
        config = OhseerConfig.with_defaults()

        assert config.api_keys["tensorlake"] == "${TENSORLAKE_API_KEY}"
        assert set(config.providers) == {"tensorlake", "mistral", "claude", "textract"}
        assert config.providers["mistral"].type == "mistral-ocr"
        assert config.providers["claude"].timeout == 300.0
        assert config.providers["textract"].api_key_refs == ["aws_access_key_id", "aws_secret_access_key"]

    def test_resolve_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("MY_API_KEY", "secret123")
        config = OhseerConfig(api_keys={"myservice": "${MY_API_KEY}"})

        assert config.resolve_api_key("myservice") == "secret123"

    def test_resolve_api_key_literal(self):
        config = OhseerConfig(api_keys={"myservice": "literal-key"})
        assert config.resolve_api_key("myservice") == "literal-key"

    def test_resolve_api_key_missing(self):
        """resolve_api_key should return None for missing key."""
        assert OhseerConfig().resolve_api_key("nonexistent") is None

    def test_resolve_api_key_blank_is_none(self, monkeypatch):
        monkeypatch.setenv("BLANK_KEY", "  ")
        config = OhseerConfig(api_keys={"blank": "${BLANK_KEY}"})

        assert config.resolve_api_key("blank") is None

    def test_provider_timeout_falls_back_to_defaults(self):
        config = OhseerConfig.with_defaults()
        config.defaults.timeout = 45

        assert config.provider_timeout("claude") == 300.0
        assert config.provider_timeout("mistral") == 45
        assert config.provider_timeout("unknown") == 45

    def test_get_provider_missing(self):
        assert OhseerConfig().get_provider("nonexistent") is None

    def test_provider_without_keys_is_available(self):
        config = OhseerConfig(providers={"local": ProviderConfig(type="tensorlake")})

        assert config.has_credentials("local") is True
        assert config.key_hint("local") == "no keys required"

    def test_key_hint_literal_key(self):
        config = OhseerConfig(
            api_keys={"lit": "abc"},
            providers={"p": ProviderConfig(type="claude", api_key_refs=["lit"])},
        )

        assert config.key_hint("p") == "api_keys.lit"
        assert config.key_hint("unknown") == "not configured"


# =============================================================================
# Config Manager Tests
# =============================================================================

class TestConfigManager:
    def test_exists_false_initially(self, manager):
        assert manager.exists() is False

    def test_load_returns_defaults_when_no_file(self, manager):
        """load() should return defaults if no config file."""
        config = manager.load()

        assert isinstance(config, OhseerConfig)
        assert "tensorlake" in config.providers

    def test_save_creates_file_and_parent(self, manager, config_path):
        manager.save(OhseerConfig.with_defaults())

        assert manager.exists() is True
        assert config_path.exists()

    def test_save_and_load_roundtrip(self, manager):
        """Saved config should load identically."""
        original = OhseerConfig(
            api_keys={"test": "value"},
            providers={"custom": ProviderConfig(type="claude", model="m", api_key_refs=["test"])},
            defaults=DefaultsConfig(providers=["custom"], timeout=30),
        )

        manager.save(original)
        loaded = manager.load()

        assert loaded == original

    def test_saved_file_keeps_env_references(self, manager, config_path, monkeypatch):
        monkeypatch.setenv("TENSORLAKE_API_KEY", "real-secret")
        manager.save(OhseerConfig.with_defaults())

        data = yaml.safe_load(config_path.read_text())

        assert data["api_keys"]["tensorlake"] == "${TENSORLAKE_API_KEY}"

    def test_empty_file_is_empty_config(self, manager, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text("")

        assert manager.load() == OhseerConfig()

    def test_update_merges_changes(self, manager):
        """update() should merge changes into existing config."""
        manager.save(OhseerConfig.with_defaults())

        manager.update({"defaults": {"timeout": 90}})

        config = manager.load()
        assert config.defaults.timeout == 90
        assert config.defaults.providers == ["tensorlake", "mistral", "claude"]

    def test_set_api_key(self, manager):
        manager.save(OhseerConfig())
        manager.set_api_key("newservice", "newkey")

        assert manager.load().api_keys["newservice"] == "newkey"

    def test_add_provider(self, manager):
        manager.save(OhseerConfig())
        manager.add_provider(
            name="eu-textract",
            provider_type="textract",
            api_key_refs=["id", "secret"],
            region="eu-west-1",
        )

        provider = manager.load().providers["eu-textract"]
        assert provider.type == "textract"
        assert provider.api_key_refs == ["id", "secret"]
        assert provider.extra == {"region": "eu-west-1"}


# =============================================================================
# Runtime Tests
# =============================================================================

class TestRuntime:
    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OHSEER_CONFIG", str(tmp_path / "env.yaml"))

        assert get_config_path(str(tmp_path / "cli.yaml")) == (tmp_path / "cli.yaml").resolve()

    def test_env_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OHSEER_CONFIG", str(tmp_path / "env.yaml"))

        assert get_config_path() == (tmp_path / "env.yaml").resolve()

    def test_default_path(self, monkeypatch):
        monkeypatch.delenv("OHSEER_CONFIG", raising=False)

        assert get_config_path() == DEFAULT_CONFIG_PATH.expanduser().resolve()

    def test_get_config_reads_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"defaults": {"providers": ["claude"]}}))

        assert get_config(str(path)).defaults.providers == ["claude"]

    def test_load_config_without_path(self):
        assert load_config(None) == OhseerConfig.with_defaults()

    def test_load_config_with_path(self, tmp_path):
        assert isinstance(load_config(Path(tmp_path / "missing.yaml")), OhseerConfig)
