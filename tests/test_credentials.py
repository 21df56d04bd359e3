"""Tests for the cmapclient.credentials module."""

import pytest

from cmapclient.credentials import CredentialProvider
from cmapclient.errors import MissingCredentialError


@pytest.fixture
def no_env_key(monkeypatch):
    """Remove CMAP_API_KEY for the duration of a test."""
    monkeypatch.delenv("CMAP_API_KEY", raising=False)


class TestGetKey:
    """Tests for CredentialProvider.get_key."""

    def test_in_memory_key(self, tmp_path, no_env_key):
        """A key passed to the constructor should be returned."""
        provider = CredentialProvider(api_key="abc", secrets_file=tmp_path / "s.toml")
        assert provider.get_key() == "abc"

    def test_environment_key(self, tmp_path, monkeypatch):
        """The CMAP_API_KEY variable should be used when no key is in memory."""
        monkeypatch.setenv("CMAP_API_KEY", "from-env")
        provider = CredentialProvider(secrets_file=tmp_path / "s.toml")
        assert provider.get_key() == "from-env"

    def test_settings_key(self, tmp_path, no_env_key, default_settings):
        """The api_key setting should be used as a last resort."""
        default_settings.get.side_effect = lambda key, default=None: (
            "from-settings" if key == "api_key" else default)
        provider = CredentialProvider(secrets_file=tmp_path / "s.toml")
        assert provider.get_key() == "from-settings"

    def test_missing_key_raises(self, tmp_path, no_env_key):
        """Without any key a MissingCredentialError should be raised."""
        provider = CredentialProvider(secrets_file=tmp_path / "s.toml")
        with pytest.raises(MissingCredentialError) as excinfo:
            provider.get_key()
        assert "simonscmap.com" in str(excinfo.value)
        assert "set_api_key" in str(excinfo.value)


class TestSetKey:
    """Tests for CredentialProvider.set_key."""

    def test_persists_to_secrets_file(self, tmp_path, no_env_key):
        """set_key should write the key to the secrets file."""
        secrets = tmp_path / "config" / ".secrets.toml"
        CredentialProvider(secrets_file=secrets).set_key("new-key")
        text = secrets.read_text()
        assert "[default]" in text
        assert 'api_key = "new-key"' in text

    def test_overwrites_previous_key(self, tmp_path, no_env_key):
        """A second set_key should replace the stored key."""
        secrets = tmp_path / ".secrets.toml"
        provider = CredentialProvider(secrets_file=secrets)
        provider.set_key("first")
        provider.set_key("second")
        text = secrets.read_text()
        assert "second" in text
        assert "first" not in text

    def test_updates_session(self, tmp_path, no_env_key, default_settings):
        """set_key should update the environment, settings and memory."""
        import os
        provider = CredentialProvider(api_key="old", secrets_file=tmp_path / "s.toml")
        provider.set_key("new")
        assert provider.get_key() == "new"
        assert os.environ["CMAP_API_KEY"] == "new"
        default_settings.set.assert_called_once_with("api_key", "new")

    def test_new_provider_sees_key(self, tmp_path, no_env_key):
        """A provider created later in the session should find the key."""
        CredentialProvider(secrets_file=tmp_path / "s.toml").set_key("shared")
        assert CredentialProvider(secrets_file=tmp_path / "s.toml").get_key() == "shared"


class TestShadowingEnvKey:
    """Tests for CredentialProvider.shadowing_env_key."""

    def test_different_environment_key(self, tmp_path, monkeypatch):
        """A different exported key should be reported."""
        monkeypatch.setenv("CMAP_API_KEY", "old")
        provider = CredentialProvider(secrets_file=tmp_path / "s.toml")
        assert provider.shadowing_env_key("new") == "old"

    def test_same_or_missing_environment_key(self, tmp_path, monkeypatch):
        """No shadowing when the variable is unset or already equal."""
        provider = CredentialProvider(secrets_file=tmp_path / "s.toml")
        monkeypatch.delenv("CMAP_API_KEY", raising=False)
        assert provider.shadowing_env_key("new") is None
        monkeypatch.setenv("CMAP_API_KEY", "new")
        assert provider.shadowing_env_key("new") is None
