"""Tests for common utilities."""

import json
import logging

import pytest
from goto_links.common.validators import is_valid_url, is_valid_identifier
from goto_links.common.logging_config import setup_logging


class TestValidators:
    """Test validation utilities."""

    @pytest.mark.parametrize("url", [
        "https://google.com",
        "http://world",
        "https://sub.example.com:8080/path?query=value#frag",
        "ftp://files.example.com/pub",
        "mailto:someone@example.com",
        "http://127.0.0.1:9997/hello",
    ])
    def test_valid_urls(self, url):
        """Absolute URLs are accepted."""
        valid, error = is_valid_url(url)
        assert valid, error

    def test_relative_url(self):
        """Strings without a scheme are refused."""
        valid, error = is_valid_url("this is not a valid URL")
        assert not valid
        assert error == "relative URL without a base"

        valid, _ = is_valid_url("/just/a/path")
        assert not valid

    def test_empty_url(self):
        """Empty targets are refused."""
        valid, error = is_valid_url("")
        assert not valid
        assert "required" in error.lower()

    @pytest.mark.parametrize("url", [
        "https://",
        "http:///path",
        "https://example.com:notaport/",
        "https://exa mple.com",
        "https://example.com/\nnext",
    ])
    def test_invalid_urls(self, url):
        """URLs without a usable host or with raw whitespace are refused."""
        valid, _ = is_valid_url(url)
        assert not valid

    def test_valid_identifiers(self):
        """Ordinary path segments are accepted."""
        for identifier in ("hello", "4cca4", "with-dash", "with_underscore", "a.b", "é"):
            valid, error = is_valid_identifier(identifier)
            assert valid, error

    def test_invalid_identifiers(self):
        """Empty, slashed and whitespace identifiers are refused."""
        valid, error = is_valid_identifier("")
        assert not valid
        assert "required" in error

        valid, error = is_valid_identifier("a/b")
        assert not valid
        assert "/" in error

        valid, _ = is_valid_identifier("a b")
        assert not valid

        valid, _ = is_valid_identifier("tab\there")
        assert not valid

    def test_unencodable_strings(self):
        """Lone surrogates cannot be stored or hashed as UTF-8."""
        valid, error = is_valid_url("http://a.com/\ud800")
        assert not valid
        assert "UTF-8" in error

        valid, error = is_valid_identifier("id\udfff")
        assert not valid
        assert "UTF-8" in error

    def test_non_printable_characters_are_allowed(self):
        """C1 controls and noncharacters are kept; the log escapes them."""
        for char in ("\x81", "\x9b", "\ufffe", "\uffff"):
            assert is_valid_url(f"http://a.com/{char}")[0]
            assert is_valid_identifier(f"id{char}")[0]


class TestLogging:
    """Test logging setup."""

    def test_setup_logging(self, tmp_path):
        """Handlers are installed once, with an optional file handler."""
        log_file = tmp_path / "goto.log"

        logger = setup_logging(level="debug", log_file=str(log_file))
        setup_logging(level="debug", log_file=str(log_file))
        logger = setup_logging(level="debug", log_file=str(log_file))

        assert logger.name == "goto_links"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2

        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()

        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_unknown_level_defaults_to_info(self):
        """Unknown level names fall back to INFO."""
        logger = setup_logging(level="chatty")
        assert logger.level == logging.INFO

    def test_json_format(self, tmp_path):
        """JSON lines stay parseable when messages carry quotes and backslashes."""
        log_file = tmp_path / "goto.log"
        logger = setup_logging(log_file=str(log_file), json_format=True)

        logger.getChild("store").warning('Registered /q -> https://example.com/?q="a\\b"')
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "goto_links.store"
        assert entry["message"] == 'Registered /q -> https://example.com/?q="a\\b"'

