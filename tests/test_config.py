"""Tests for configuration and logging setup."""

import json
import logging

import pytest

from webanalyzer.config import AnalysisThresholds, Config
from webanalyzer.exceptions import ConfigurationError
from webanalyzer.logging_config import setup_logging


ENV_VARS = [
    "USER_AGENT",
    "REQUEST_TIMEOUT",
    "PAGESPEED_API_KEY",
    "GOOGLE_PSI_API_KEY",
    "PSI_STRATEGY",
    "PERFORMANCE_BACKEND",
    "LIGHTHOUSE_TIMEOUT",
    "WAPPALYZER_API_KEY",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfig:
    def test_defaults(self, clean_env):
        config = Config.from_env()

        assert config.timeout == 10
        assert config.pagespeed_api_key is None
        assert config.performance_backend == "auto"
        assert config.psi_strategy == "desktop"

    def test_from_env(self, clean_env):
        clean_env.setenv("REQUEST_TIMEOUT", "20")
        clean_env.setenv("PAGESPEED_API_KEY", "psi-key")
        clean_env.setenv("PERFORMANCE_BACKEND", "lighthouse")
        clean_env.setenv("WAPPALYZER_API_KEY", "wap-key")

        config = Config.from_env()

        assert config.timeout == 20
        assert config.pagespeed_api_key == "psi-key"
        assert config.performance_backend == "lighthouse"
        assert config.wappalyzer_api_key == "wap-key"

    def test_google_key_fallback(self, clean_env):
        clean_env.setenv("GOOGLE_PSI_API_KEY", "google-key")
        assert Config.from_env().pagespeed_api_key == "google-key"

    def test_invalid_backend(self):
        with pytest.raises(ConfigurationError, match="performance_backend"):
            Config(performance_backend="webpagetest")

    def test_invalid_backend_from_env(self, clean_env):
        clean_env.setenv("PERFORMANCE_BACKEND", "webpagetest")
        with pytest.raises(ConfigurationError, match="webpagetest"):
            Config.from_env()

    def test_invalid_timeout_from_env(self, clean_env):
        clean_env.setenv("REQUEST_TIMEOUT", "ten")
        with pytest.raises(ConfigurationError, match="REQUEST_TIMEOUT must be an integer"):
            Config.from_env()


class TestAnalysisThresholds:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("WEBANALYZER_THRESHOLD_TITLE_MAX", "70")
        monkeypatch.setenv("WEBANALYZER_THRESHOLD_IMAGE_ALT_PARTIAL_COVERAGE", "75.5")

        thresholds = AnalysisThresholds.from_env()

        assert thresholds.title_max == 70
        assert thresholds.image_alt_partial_coverage == 75.5

    def test_from_env_ignores_bad_values(self, monkeypatch):
        monkeypatch.setenv("WEBANALYZER_THRESHOLD_TITLE_MIN", "thirty")
        assert AnalysisThresholds.from_env().title_min == 30

    def test_from_file(self, tmp_path):
        path = tmp_path / "thresholds.json"
        path.write_text(json.dumps({"thresholds": {"title_max": 80}}))

        thresholds = AnalysisThresholds.from_file(str(path))

        assert thresholds.title_max == 80
        assert thresholds.title_min == 30

    def test_from_missing_file(self, tmp_path):
        thresholds = AnalysisThresholds.from_file(str(tmp_path / "missing.json"))
        assert thresholds.to_dict() == AnalysisThresholds().to_dict()


class TestSetupLogging:
    def test_log_file_created(self, tmp_path):
        log_file = tmp_path / "logs" / "webanalyzer.log"

        setup_logging(level="DEBUG", log_file=str(log_file))
        logging.getLogger("webanalyzer.test").debug("hello")

        assert logging.getLogger().level == logging.DEBUG
        assert log_file.exists()
        assert logging.getLogger("httpx").level == logging.WARNING

        setup_logging(level="WARNING")
