import pytest
from pydantic import ValidationError

from securevault.conf import CHALLENGE_TTL, LEGACY_THRESHOLD, VaultSettings


class TestVaultSettings:

    def test_defaults(self):
        settings = VaultSettings()
        assert settings.key_name == "securevault-key"
        assert settings.legacy_threshold == LEGACY_THRESHOLD == 20
        assert settings.challenge_ttl == CHALLENGE_TTL == 60
        assert settings.rp_id == "localhost"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SECUREVAULT_CHALLENGE_TTL", "120")
        monkeypatch.setenv("SECUREVAULT_RP_ID", "Vault.Example.com")
        monkeypatch.setenv("SECUREVAULT_RP_NAME", "Example Vault")
        settings = VaultSettings.from_env()
        assert settings.challenge_ttl == 120
        assert settings.rp_id == "vault.example.com"
        assert settings.rp_name == "Example Vault"
        assert settings.legacy_threshold == 20

    def test_from_env_unset(self, monkeypatch):
        for name in (
            "SECUREVAULT_KEY_NAME",
            "SECUREVAULT_LEGACY_THRESHOLD",
            "SECUREVAULT_CHALLENGE_TTL",
            "SECUREVAULT_RP_NAME",
            "SECUREVAULT_RP_ID",
        ):
            monkeypatch.delenv(name, raising=False)
        assert VaultSettings.from_env() == VaultSettings()

    def test_invalid_ttl(self, monkeypatch):
        monkeypatch.setenv("SECUREVAULT_CHALLENGE_TTL", "0")
        with pytest.raises(ValidationError):
            VaultSettings.from_env()

    def test_invalid_rp_id(self):
        with pytest.raises(ValidationError):
            VaultSettings(rp_id="https://vault.example.com/")
