"""Tests for configuration loading."""

import pytest

from lxcmanager.app.config import (
    ProxmoxConfig,
    ReconcilerConfig,
    Settings,
    missing_proxmox_settings,
)

PROXMOX_ENV = ("PROXMOX_HOST", "PROXMOX_NODE", "PROXMOX_TOKEN_ID", "PROXMOX_TOKEN_SECRET")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in PROXMOX_ENV:
        monkeypatch.delenv(name, raising=False)


class TestProxmoxConfig:
    def test_reads_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROXMOX_HOST", "pve:8006")
        monkeypatch.setenv("PROXMOX_VERIFY_SSL", "true")

        config = ProxmoxConfig()

        assert config.host == "pve:8006"
        assert config.verify_ssl is True

    def test_verify_ssl_off_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PROXMOX_VERIFY_SSL", raising=False)
        assert ProxmoxConfig().verify_ssl is False


class TestReconcilerConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in (
            "RECONCILER_TASK_MAX_ATTEMPTS",
            "RECONCILER_TASK_INTERVAL_MS",
            "RECONCILER_ADDRESS_MAX_ATTEMPTS",
            "RECONCILER_ADDRESS_INTERVAL_MS",
        ):
            monkeypatch.delenv(name, raising=False)

        config = ReconcilerConfig()

        assert config.task_max_attempts == 30
        assert config.task_interval_ms == 500
        assert config.address_max_attempts == 5
        assert config.address_interval_ms == 1000
        assert config.serialize_per_container is False

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RECONCILER_ADDRESS_MAX_ATTEMPTS", "20")
        assert ReconcilerConfig().address_max_attempts == 20


class TestMissingProxmoxSettings:
    def test_all_missing(self) -> None:
        assert missing_proxmox_settings(Settings()) == list(PROXMOX_ENV)

    def test_partially_set(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROXMOX_HOST", "pve:8006")
        monkeypatch.setenv("PROXMOX_NODE", "pve")

        assert missing_proxmox_settings(Settings()) == [
            "PROXMOX_TOKEN_ID",
            "PROXMOX_TOKEN_SECRET",
        ]

    def test_complete(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROXMOX_HOST", "pve:8006")
        monkeypatch.setenv("PROXMOX_NODE", "pve")
        monkeypatch.setenv("PROXMOX_TOKEN_ID", "root@pam!mgr")
        monkeypatch.setenv("PROXMOX_TOKEN_SECRET", "secret")

        assert missing_proxmox_settings(Settings()) == []
