"""Tests for environment-derived settings."""

from apiclients import config
from apiclients.config import Settings, load_settings


class TestLoadSettings:
    def test_reads_vault_identifiers(self, monkeypatch):
        monkeypatch.setenv("ansible_hashi_vault_role_id", "role-123")
        monkeypatch.setenv("ansible_hashi_vault_secret_id", "secret-456")
        assert load_settings() == Settings("role-123", "secret-456")

    def test_empty_value_is_kept(self, monkeypatch):
        monkeypatch.setenv("ansible_hashi_vault_role_id", "")
        monkeypatch.setenv("ansible_hashi_vault_secret_id", "secret-456")
        assert load_settings().ansible_hashi_vault_role_id == ""

    def test_defaults_to_empty(self, monkeypatch):
        monkeypatch.delenv("ansible_hashi_vault_role_id", raising=False)
        monkeypatch.delenv("ansible_hashi_vault_secret_id", raising=False)
        assert load_settings() == Settings()

    def test_module_level_settings(self):
        assert isinstance(config.envs, Settings)
