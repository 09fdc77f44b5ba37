"""Tests for configuration helpers."""

import logging

import pytest

from lambda_flusher.config import (
    DEFAULT_EXTENSION_NAME,
    DEFAULT_FLUSH_TIMEOUT_MILLIS,
    DEFAULT_OBSERVED_SOURCES,
    ExtensionSettings,
    parse_flush_timeout,
    parse_sources,
    resolve_runtime_api,
)
from lambda_flusher.errors import RegistrationError


class TestResolveRuntimeApi:
    """Tests for resolve_runtime_api()."""

    def test_host_and_port(self):
        """Test the value format Lambda provides."""
        assert (
            resolve_runtime_api("127.0.0.1:9001")
            == "http://127.0.0.1:9001/2020-01-01/extension"
        )

    def test_http_prefix_tolerated(self):
        """Test that an explicit http:// prefix is accepted."""
        assert (
            resolve_runtime_api("http://localhost:9001")
            == "http://localhost:9001/2020-01-01/extension"
        )

    def test_surrounding_whitespace(self):
        """Test that whitespace is stripped."""
        assert resolve_runtime_api("  127.0.0.1:9001\n").startswith(
            "http://127.0.0.1:9001/"
        )

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_value(self, value):
        """Test that an absent value is a registration failure."""
        with pytest.raises(RegistrationError, match="not set"):
            resolve_runtime_api(value)

    @pytest.mark.parametrize(
        "value",
        ["127.0.0.1:notaport", "https://127.0.0.1:9001", "127.0.0.1:9001/extra/path"],
    )
    def test_malformed_value(self, value):
        """Test that malformed values are rejected."""
        with pytest.raises(RegistrationError, match="Malformed"):
            resolve_runtime_api(value)


class TestParseSources:
    """Tests for parse_sources()."""

    def test_default_when_unset(self):
        assert parse_sources(None) == DEFAULT_OBSERVED_SOURCES
        assert parse_sources("") == DEFAULT_OBSERVED_SOURCES

    def test_comma_separated(self):
        assert parse_sources("a, b,,c ") == frozenset({"a", "b", "c"})

    def test_wildcard(self):
        assert parse_sources("*") == frozenset({"*"})


class TestExtensionSettings:
    """Tests for ExtensionSettings.from_env()."""

    def test_defaults(self, monkeypatch):
        """Test defaults with only the runtime API set."""
        monkeypatch.setenv("AWS_LAMBDA_RUNTIME_API", "127.0.0.1:9001")
        monkeypatch.delenv("LAMBDA_EXTENSION_NAME", raising=False)
        monkeypatch.delenv("LAMBDA_FLUSHER_SOURCES", raising=False)
        monkeypatch.delenv("LAMBDA_FLUSHER_FLUSH_TIMEOUT_MS", raising=False)

        settings = ExtensionSettings.from_env()

        assert settings.runtime_api == "127.0.0.1:9001"
        assert settings.extension_name == DEFAULT_EXTENSION_NAME
        assert settings.observed_sources == DEFAULT_OBSERVED_SOURCES
        assert settings.flush_timeout_millis == DEFAULT_FLUSH_TIMEOUT_MILLIS
        assert settings.events == ("INVOKE",)

    def test_overrides(self, monkeypatch):
        """Test that every setting can be overridden from env."""
        monkeypatch.setenv("AWS_LAMBDA_RUNTIME_API", "127.0.0.1:9001")
        monkeypatch.setenv("LAMBDA_EXTENSION_NAME", "custom")
        monkeypatch.setenv("LAMBDA_FLUSHER_SOURCES", "*")
        monkeypatch.setenv("LAMBDA_FLUSHER_FLUSH_TIMEOUT_MS", "500")

        settings = ExtensionSettings.from_env()

        assert settings.extension_name == "custom"
        assert settings.observed_sources == frozenset({"*"})
        assert settings.flush_timeout_millis == 500

    def test_runtime_api_unset(self, monkeypatch):
        """Test that a missing runtime API is deferred to registration."""
        monkeypatch.delenv("AWS_LAMBDA_RUNTIME_API", raising=False)

        settings = ExtensionSettings.from_env()

        assert settings.runtime_api is None


class TestParseFlushTimeout:
    """Tests for parse_flush_timeout()."""

    def test_valid_value(self):
        assert parse_flush_timeout(" 500 ") == 500

    def test_unset_uses_default(self):
        assert parse_flush_timeout(None) == DEFAULT_FLUSH_TIMEOUT_MILLIS

    @pytest.mark.parametrize("value", ["soon", "-5", "0", "1.5"])
    def test_invalid_value_falls_back(self, value, caplog):
        """Test that a bad value is logged and replaced by the default."""
        with caplog.at_level(logging.WARNING):
            assert parse_flush_timeout(value) == DEFAULT_FLUSH_TIMEOUT_MILLIS

        assert "LAMBDA_FLUSHER_FLUSH_TIMEOUT_MS" in caplog.text

    def test_from_env_with_invalid_value(self, monkeypatch):
        """Test that settings load with a non-numeric timeout."""
        monkeypatch.setenv("LAMBDA_FLUSHER_FLUSH_TIMEOUT_MS", "soon")

        assert ExtensionSettings.from_env().flush_timeout_millis == DEFAULT_FLUSH_TIMEOUT_MILLIS
