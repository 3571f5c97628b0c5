"""Tests for cirrus.config — settings from CIRRUS_* variables."""

from __future__ import annotations

from cirrus.config import Settings


def test_settings_read_from_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CIRRUS_TENANT_ID", "t-1")
    monkeypatch.setenv("CIRRUS_SUBSCRIPTION_ID", "sub-1")
    monkeypatch.setenv("CIRRUS_KEY_STORE", "memory")

    s = Settings()

    assert s.tenant_id == "t-1"
    assert s.subscription_id == "sub-1"
    assert s.key_store == "memory"
    assert s.log_dir == s.repo_root / "local" / "logs"


def test_only_consumed_settings_are_declared():
    assert set(Settings.model_fields) == {
        "app_version",
        "log_level",
        "tenant_id",
        "client_id",
        "authority_host",
        "key_store",
        "key_store_env_prefix",
        "key_vault_url",
        "subscription_id",
        "repo_root",
    }
