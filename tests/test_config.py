"""Tests for environment-driven settings."""

import pytest

from flightbook.config import ConfigError, Settings


class TestIntegerSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("QR_WIDTH", raising=False)
        monkeypatch.delenv("DB_PORT", raising=False)
        settings = Settings()
        assert settings.qr_width == 300
        assert settings.db_port == 3306

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("QR_WIDTH", "420")
        monkeypatch.setenv("DB_PORT", "3307")
        settings = Settings()
        assert settings.qr_width == 420
        assert settings.db_port == 3307

    @pytest.mark.parametrize("name", ["QR_WIDTH", "DB_PORT"])
    def test_malformed_value(self, monkeypatch, name):
        monkeypatch.setenv(name, "wide")
        with pytest.raises(ConfigError, match=name):
            Settings()
