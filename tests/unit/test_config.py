"""Unit tests for layered configuration."""

from __future__ import annotations

import pytest

from incusdash import config as config_mod
from incusdash.config import IncusDashConfig, _load_dotenv


@pytest.fixture(autouse=True)
def _no_dotenv(monkeypatch):
    monkeypatch.setattr(config_mod, "_dotenv", {})
    for key in (
        "INCUSDASH_API_URL", "INCUSDASH_SOCKET", "INCUSDASH_VERIFY_TLS",
        "INCUSDASH_TIMEOUT", "INCUSDASH_CLIENT_CERT", "INCUSDASH_CLIENT_KEY",
        "INCUSDASH_LOG_LEVEL", "INCUSDASH_LOG_FILE",
    ):
        monkeypatch.delenv(key, raising=False)


class TestIncusDashConfig:
    def test_defaults(self):
        cfg = IncusDashConfig()
        assert cfg.api_url == "https://localhost:8443"
        assert cfg.api_prefix == "/1.0"
        assert cfg.socket_path is None
        assert cfg.verify_tls is True
        assert cfg.timeout == 30.0
        assert cfg.dashboard_root == "/dashboard"
        assert cfg.cert_pair() is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("INCUSDASH_API_URL", "https://incus:9443")
        monkeypatch.setenv("INCUSDASH_VERIFY_TLS", "false")
        monkeypatch.setenv("INCUSDASH_TIMEOUT", "2.5")
        monkeypatch.setenv("INCUSDASH_CLIENT_CERT", "a.crt")
        monkeypatch.setenv("INCUSDASH_CLIENT_KEY", "a.key")
        cfg = IncusDashConfig()
        assert cfg.api_url == "https://incus:9443"
        assert cfg.verify_tls is False
        assert cfg.timeout == 2.5
        assert cfg.cert_pair() == ("a.crt", "a.key")

    def test_dotenv_fallback_key(self, monkeypatch):
        monkeypatch.setattr(config_mod, "_dotenv", {"INCUS_SOCKET": "/var/lib/incus/unix.socket"})
        assert IncusDashConfig().socket_path == "/var/lib/incus/unix.socket"

    def test_env_beats_dotenv(self, monkeypatch):
        monkeypatch.setattr(config_mod, "_dotenv", {"INCUS_URL": "https://from-file:8443"})
        monkeypatch.setenv("INCUSDASH_API_URL", "https://from-env:8443")
        assert IncusDashConfig().api_url == "https://from-env:8443"


class TestLoadDotenv:
    def test_parses_file(self, tmp_path):
        (tmp_path / ".git").mkdir()
        (tmp_path / ".env").write_text(
            "# comment\n\nINCUS_URL='https://x:8443'\nnot a pair\nINCUSDASH_TIMEOUT = 4\n",
            encoding="utf-8",
        )
        pairs = _load_dotenv(tmp_path)
        assert pairs == {"INCUS_URL": "https://x:8443", "INCUSDASH_TIMEOUT": "4"}

    def test_stops_at_repo_root(self, tmp_path):
        (tmp_path / ".env").write_text("INCUS_URL=outside\n", encoding="utf-8")
        repo = tmp_path / "repo"
        (repo / ".git").mkdir(parents=True)
        assert _load_dotenv(repo) == {}
