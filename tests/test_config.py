"""Tests for settings validation."""

import pytest

from app.config import MIN_JWT_SECRET_LENGTH, Settings


@pytest.fixture(name="make_settings")
def make_settings_fixture(monkeypatch):
    def make(secret: str, env: str = "development") -> Settings:
        monkeypatch.setattr(Settings, "JWT_SECRET_KEY", secret)
        monkeypatch.setattr(Settings, "APP_ENV", env)
        return Settings()

    return make


class TestSettings:
    def test_strong_secret_is_valid(self, make_settings):
        assert make_settings("s" * MIN_JWT_SECRET_LENGTH).validate() == []

    def test_missing_secret_generated_outside_production(self, make_settings):
        settings = make_settings("")
        assert settings.jwt_secret_generated is True
        assert len(settings.JWT_SECRET_KEY) >= MIN_JWT_SECRET_LENGTH
        problems = settings.validate()
        assert len(problems) == 1
        assert "auto-generated" in problems[0]

    def test_missing_secret_in_production(self, make_settings):
        settings = make_settings("", env="production")
        assert settings.jwt_secret_generated is False
        assert settings.is_production
        assert settings.validate() == ["JWT_SECRET_KEY is empty or a known insecure default"]

    def test_known_default_rejected(self, make_settings):
        assert make_settings("default-secret-key").validate() == ["JWT_SECRET_KEY is empty or a known insecure default"]

    def test_short_secret_rejected(self, make_settings):
        problems = make_settings("short").validate()
        assert "at least" in problems[0]
        assert "current: 5" in problems[0]
