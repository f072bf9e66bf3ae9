"""Tests for configuration loading and validation."""

import dataclasses

import pytest

from smart_status.config import ApiConfig, AppConfig, EngineConfig, _validate_config


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_invalid_api_url(self):
        config = dataclasses.replace(AppConfig(), api=dataclasses.replace(ApiConfig(), base_url="ftp://x"))
        with pytest.raises(ValueError, match="SMART_STATUS_API_URL"):
            _validate_config(config)

    def test_invalid_timeout(self):
        config = dataclasses.replace(AppConfig(), api=dataclasses.replace(ApiConfig(), timeout_sec=0))
        with pytest.raises(ValueError, match="SMART_STATUS_API_TIMEOUT"):
            _validate_config(config)

    def test_invalid_days_per_milestone(self):
        engine = dataclasses.replace(EngineConfig(), days_per_milestone=0)
        with pytest.raises(ValueError, match="ENGINE_DAYS_PER_MILESTONE"):
            _validate_config(dataclasses.replace(AppConfig(), engine=engine))

    def test_blank_placeholder(self):
        engine = dataclasses.replace(EngineConfig(), milestone_title_placeholder="  ")
        with pytest.raises(ValueError, match="MILESTONE_TITLE_PLACEHOLDER"):
            _validate_config(dataclasses.replace(AppConfig(), engine=engine))

    def test_safe_int_parsing(self):
        from smart_status.config import _safe_int

        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_rejects_garbage(self, monkeypatch):
        from smart_status.config import _safe_int

        monkeypatch.setenv("SMART_STATUS_TEST_INT", "seven")
        with pytest.raises(ValueError, match="SMART_STATUS_TEST_INT"):
            _safe_int("SMART_STATUS_TEST_INT", "7")

    def test_safe_float_parsing(self):
        from smart_status.config import _safe_float

        assert _safe_float("NONEXISTENT_VAR_12345", "3.14") == pytest.approx(3.14)
