# FILE: tests/test_settings.py
"""Tests for config/settings.py and config/defaults.py."""

from config.defaults import CompilerDefaults
from config.settings import (
    DEFAULT_ALLOWED_PATHS,
    DEFAULT_BACKEND_FRAMEWORK,
    DEFAULT_BACKEND_LANGUAGE,
    DEFAULT_DATABASE,
    DEFAULT_OVERLAY_CACHE_SIZE,
    DEFAULT_OVERLAY_CACHE_TTL,
    Settings,
    get_settings,
)


class TestGetSettings:
    def test_defaults_without_env(self, monkeypatch):
        for var in (
            "FACTORY_ALLOWED_PATHS",
            "FACTORY_DEFAULT_BACKEND_LANGUAGE",
            "FACTORY_DEFAULT_BACKEND_FRAMEWORK",
            "FACTORY_DEFAULT_DATABASE",
            "FACTORY_OVERLAY_PATHS",
        ):
            monkeypatch.delenv(var, raising=False)

        s = get_settings()
        assert s.allowed_paths == DEFAULT_ALLOWED_PATHS
        assert s.default_backend_language == DEFAULT_BACKEND_LANGUAGE
        assert s.default_backend_framework == DEFAULT_BACKEND_FRAMEWORK
        assert s.default_database == DEFAULT_DATABASE
        assert s.overlay_paths == ()

    def test_allowed_paths_csv(self, monkeypatch):
        monkeypatch.setenv("FACTORY_ALLOWED_PATHS", "src/, lib/ ,")
        assert get_settings().allowed_paths == ("src/", "lib/")

    def test_empty_allowed_paths_disables_policy(self, monkeypatch):
        monkeypatch.setenv("FACTORY_ALLOWED_PATHS", "")
        assert get_settings().allowed_paths == ()

    def test_language_is_normalized(self, monkeypatch):
        monkeypatch.setenv("FACTORY_DEFAULT_BACKEND_LANGUAGE", "  Go ")
        assert get_settings().default_backend_language == "go"

    def test_overlay_cache_limits(self, monkeypatch):
        monkeypatch.delenv("FACTORY_OVERLAY_CACHE_TTL", raising=False)
        monkeypatch.delenv("FACTORY_OVERLAY_CACHE_SIZE", raising=False)
        assert get_settings().overlay_cache_ttl == DEFAULT_OVERLAY_CACHE_TTL
        assert get_settings().overlay_cache_size == DEFAULT_OVERLAY_CACHE_SIZE

        get_settings.cache_clear()
        monkeypatch.setenv("FACTORY_OVERLAY_CACHE_TTL", "30")
        monkeypatch.setenv("FACTORY_OVERLAY_CACHE_SIZE", "8")
        assert get_settings().overlay_cache_ttl == 30.0
        assert get_settings().overlay_cache_size == 8

    def test_cached(self):
        assert get_settings() is get_settings()


class TestCompilerDefaults:
    def test_from_settings(self):
        s = Settings(default_backend_language="go", default_backend_framework="gin", default_database="mysql")
        d = CompilerDefaults.from_settings(s)
        assert d.backend_language == "go"
        assert d.backend_framework == "gin"
        assert d.database == "mysql"
