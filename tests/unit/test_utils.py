"""
Unit tests for utility functions.
"""

import pytest

import config
from errors import ValidationError
from utils import (
    RETRYABLE_STATUS_CODES,
    SUPPORTED_LANGUAGES,
    format_dataset_id,
    is_no_records_response,
    truncate,
    validate_language,
    validate_pxweb_format,
)


class TestValidationFunctions:
    """Test caller input validation."""

    def test_validate_language_valid(self):
        """Test supported languages, case-insensitively."""
        for language in SUPPORTED_LANGUAGES:
            assert validate_language(language) == language
        assert validate_language("DE") == "de"
        assert validate_language(" fr ") == "fr"

    def test_validate_language_invalid(self):
        """Test unsupported or missing languages."""
        for language in ["es", "", None, "english"]:
            with pytest.raises(ValidationError, match="Invalid language"):
                validate_language(language)

    def test_format_dataset_id(self):
        """Test dataset identifier trimming."""
        assert format_dataset_id("  px-x-1502040100_131 ") == "px-x-1502040100_131"
        assert format_dataset_id("DF_LWZ_1") == "DF_LWZ_1"

    def test_format_dataset_id_empty(self):
        """Test that an empty identifier is rejected."""
        for dataset_id in ["", "   ", None]:
            with pytest.raises(ValidationError):
                format_dataset_id(dataset_id)

    def test_validate_pxweb_format(self):
        """Test PXWEB response formats."""
        assert validate_pxweb_format("json-stat") == "json-stat"
        assert validate_pxweb_format("csv") == "csv"
        with pytest.raises(ValidationError, match="Invalid format"):
            validate_pxweb_format("xlsx")


class TestResponseHelpers:
    """Test upstream response helpers."""

    def test_no_records_markers(self):
        """Test detection of the 'query matched nothing' 404."""
        assert is_no_records_response(404, "<error>NoRecordsFound</error>")
        assert is_no_records_response(404, "NoResultsFound: empty")
        assert is_no_records_response(404, "No Results Found")

    def test_no_records_requires_404(self):
        """Test that other statuses or bodies are not treated as empty results."""
        assert not is_no_records_response(404, "Dataflow not found")
        assert not is_no_records_response(500, "NoRecordsFound")
        assert not is_no_records_response(404, None)

    def test_retryable_status_codes(self):
        """Test the retry whitelist."""
        assert RETRYABLE_STATUS_CODES == {408, 413, 429, 500, 502, 503, 504}
        assert 404 not in RETRYABLE_STATUS_CODES
        assert 400 not in RETRYABLE_STATUS_CODES

    def test_truncate(self):
        """Test shortening of long upstream bodies."""
        assert truncate("  short  ") == "short"
        assert truncate("x" * 400, limit=10) == "x" * 10 + "..."
        assert truncate(None) == ""


class TestConfig:
    """Test the configuration snapshot."""

    def test_get_current_config(self):
        """Test that every setting is reported."""
        current = config.get_current_config()
        assert current["pxweb_base_url"] == config.PXWEB_BASE_URL
        assert current["sse_base_url"] == config.SSE_BASE_URL
        assert current["max_retries"] == config.MAX_RETRIES
        assert current["data_timeout"] == config.DATA_TIMEOUT
        assert not current["pxweb_base_url"].endswith("/")

    def test_invalid_numeric_env_falls_back(self, monkeypatch):
        """Test that malformed numeric values use the default."""
        monkeypatch.setenv("BFS_TEST_NUMBER", "not-a-number")
        assert config._env_float("BFS_TEST_NUMBER", 2.5) == 2.5
        assert config._env_int("BFS_TEST_NUMBER", 7) == 7

        monkeypatch.setenv("BFS_TEST_NUMBER", "4")
        assert config._env_float("BFS_TEST_NUMBER", 2.5) == 4.0
        assert config._env_int("BFS_TEST_NUMBER", 7) == 4
