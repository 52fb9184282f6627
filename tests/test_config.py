"""Tests for settings loading."""

import pytest

from motorproxy.config import Config, ProxySettings, load_settings


@pytest.fixture
def no_env_file(tmp_path):
    # An explicit path that does not exist keeps a stray .env out of the test.
    return str(tmp_path / "missing.env")


class TestLoadSettings:
    def test_defaults(self, no_env_file):
        settings = load_settings(no_env_file)

        assert settings.auto_auth is True
        assert settings.card_number == "1001600244772"
        assert settings.password == ""
        assert settings.host == "0.0.0.0"
        assert settings.port == 3001
        assert settings.session_ttl_minutes == 25
        assert settings.upstream_timeout_seconds == 30.0
        assert settings.handshake_timeout_seconds == 20.0
        assert settings.log_file is None
        assert not settings.auto_auth_ready

    def test_environment_overrides(self, monkeypatch, no_env_file):
        monkeypatch.setenv("EBSCO_CARD_NUMBER", "2002")
        monkeypatch.setenv("EBSCO_PASSWORD", "pin")
        monkeypatch.setenv("PROXY_PORT", "8080")
        monkeypatch.setenv("SESSION_TTL_MINUTES", "10")
        monkeypatch.setenv("LOG_FILE", "proxy.log")

        settings = load_settings(no_env_file)

        assert settings.card_number == "2002"
        assert settings.password == "pin"
        assert settings.port == 8080
        assert settings.session_ttl_minutes == 10
        assert settings.log_file == "proxy.log"
        assert settings.auto_auth_ready

    @pytest.mark.parametrize(
        "raw, expected",
        [("false", False), ("0", False), ("no", False), ("TRUE", True), ("garbage", True)],
    )
    def test_auto_auth_flag(self, monkeypatch, no_env_file, raw, expected):
        monkeypatch.setenv("EBSCO_AUTO_AUTH", raw)
        assert load_settings(no_env_file).auto_auth is expected

    @pytest.mark.parametrize("raw", ["0", "-5", "soon"])
    def test_invalid_ttl_falls_back(self, monkeypatch, no_env_file, raw):
        monkeypatch.setenv("SESSION_TTL_MINUTES", raw)
        assert load_settings(no_env_file).session_ttl_minutes == Config.DEFAULT_SESSION_TTL_MINUTES

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("EBSCO_PASSWORD=from-file\nPROXY_PORT=4000\n")

        settings = load_settings(str(env_file))

        assert settings.password == "from-file"
        assert settings.port == 4000

    def test_process_env_wins_over_env_file(self, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("EBSCO_PASSWORD=from-file\n")
        monkeypatch.setenv("EBSCO_PASSWORD", "from-env")

        assert load_settings(str(env_file)).password == "from-env"


def test_auto_auth_ready_requires_flag():
    assert not ProxySettings(auto_auth=False, password="pin").auto_auth_ready
