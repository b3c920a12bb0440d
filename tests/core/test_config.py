"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from cosmic_clash.core.config import Settings, get_settings


def build(**overrides: object) -> Settings:
    return Settings(_env_file=None, **overrides)  # type: ignore[call-arg, arg-type]


class TestCorsOrigins:
    def test_csv_string(self) -> None:
        settings = build(CORS_ORIGINS="http://a.test, http://b.test ,")
        assert settings.CORS_ORIGINS == ["http://a.test", "http://b.test"]

    def test_json_array_string(self) -> None:
        settings = build(CORS_ORIGINS='["http://a.test"]')
        assert settings.CORS_ORIGINS == ["http://a.test"]

    def test_invalid_json_rejected(self) -> None:
        with pytest.raises(ValidationError):
            build(CORS_ORIGINS="[not json")

    def test_wildcard_with_credentials_rejected(self) -> None:
        with pytest.raises(ValidationError, match="ALLOW_CREDENTIALS"):
            build(CORS_ORIGINS="*", ALLOW_CREDENTIALS=True)

    def test_wildcard_without_credentials_allowed(self) -> None:
        settings = build(CORS_ORIGINS="*", ALLOW_CREDENTIALS=False)
        assert settings.CORS_ORIGINS == ["*"]


class TestEngineSettings:
    def test_defaults(self) -> None:
        settings = build()
        assert settings.CLASSIFY_DEBOUNCE_SECONDS == pytest.approx(0.75)
        assert settings.CLASSIFICATION_ERROR_TTL_SECONDS == pytest.approx(7.0)
        assert settings.CONTEST_COOLDOWN_SECONDS == 10
        assert settings.HISTORY_CAPACITY == 20

    @pytest.mark.parametrize("field", ["HISTORY_CAPACITY", "CONTEST_COOLDOWN_SECONDS"])
    def test_negative_values_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            build(**{field: -1})


class TestGetSettings:
    def test_unknown_environment_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "staging")
        get_settings.cache_clear()
        try:
            with pytest.raises(ValueError, match="ENVIRONMENT"):
                get_settings()
        finally:
            get_settings.cache_clear()

    def test_production_requires_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        get_settings.cache_clear()
        try:
            with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
                get_settings()
        finally:
            get_settings.cache_clear()

    def test_test_environment_reads_no_env_file(self) -> None:
        get_settings.cache_clear()
        settings = get_settings()
        assert settings.ENVIRONMENT == "test"
