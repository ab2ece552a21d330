"""
Tests for application settings
"""
import pytest
from pydantic import ValidationError

from app.core.config import PROJECT_ROOT, Settings, get_settings


def test_settings_defaults():
    settings = Settings()

    assert settings.app_name == "Vilt starter kit | Devuni"
    assert settings.sentry_traces_sample_rate == 1.0
    assert settings.inertia_ssr_url == "http://127.0.0.1:13714"
    assert settings.inertia_root_view == "app.html"
    assert settings.vite_prefetch_concurrency == 3


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("APP_NAME", "Parts shop")
    monkeypatch.setenv("SENTRY_DSN", "https://key@errors.example.com/1")
    monkeypatch.setenv("SENTRY_TRACES_SAMPLE_RATE", "0.25")
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.app_name == "Parts shop"
    assert settings.sentry_dsn == "https://key@errors.example.com/1"
    assert settings.sentry_traces_sample_rate == 0.25


@pytest.mark.parametrize("rate", [-0.1, 1.5])
def test_sample_rate_must_be_a_fraction(rate):
    with pytest.raises(ValidationError):
        Settings(sentry_traces_sample_rate=rate)


def test_environment_is_normalized():
    settings = Settings(app_env=" Production ")

    assert settings.app_env == "production"
    assert settings.is_production


def test_production_forces_https_unless_disabled():
    assert Settings(app_env="production").https_forced
    assert not Settings(app_env="production", force_https=False).https_forced
    assert not Settings(app_env="local").https_forced
    assert Settings(app_env="local", force_https=True).https_forced


def test_error_tracking_environment_defaults_to_app_env():
    assert Settings(app_env="staging").error_tracking_environment == "staging"
    assert Settings(app_env="staging", sentry_environment="eu").error_tracking_environment == "eu"


def test_blank_optional_values_are_unset():
    settings = Settings(sentry_dsn="  ", inertia_version="")

    assert settings.sentry_dsn is None
    assert settings.inertia_version is None


def test_relative_paths_resolve_from_project_root(tmp_path):
    settings = Settings()

    assert settings.resolve_path("public/build") == PROJECT_ROOT / "public" / "build"
    assert settings.resolve_path(str(tmp_path)) == tmp_path


def test_list_settings_are_split():
    settings = Settings(allowed_origins="http://a.test, http://b.test,", routes_except="debug*, health")

    assert settings.allowed_origins_list == ["http://a.test", "http://b.test"]
    assert settings.routes_except_list == ["debug*", "health"]
