from dotenv import load_dotenv
from dataclasses import dataclass
from typing import Optional
from pathlib import Path
import json
import os

from webanalyzer.constants import DEFAULT_REQUEST_TIMEOUT_SECONDS
from webanalyzer.exceptions import ConfigurationError

load_dotenv()  # Loads variables from .env file

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

PERFORMANCE_BACKENDS = ("auto", "pagespeed", "lighthouse", "basic")


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'")


@dataclass
class Config:
    """Configuration for the web analyzer."""
    user_agent: str = DEFAULT_USER_AGENT
    timeout: int = DEFAULT_REQUEST_TIMEOUT_SECONDS
    log_level: str = "INFO"

    # PageSpeed Insights API
    pagespeed_api_key: Optional[str] = None
    psi_strategy: str = "desktop"  # 'mobile' or 'desktop'
    psi_locale: str = "en"

    # Performance backend: auto, pagespeed, lighthouse or basic
    performance_backend: str = "auto"
    lighthouse_timeout: int = 90

    # Hosted technology lookup
    wappalyzer_api_key: Optional[str] = None

    def __post_init__(self):
        if self.performance_backend not in PERFORMANCE_BACKENDS:
            raise ConfigurationError(
                f"performance_backend must be one of {', '.join(PERFORMANCE_BACKENDS)}, "
                f"got '{self.performance_backend}'"
            )

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        Returns:
            Config: Configuration instance with values from environment

        Raises:
            ConfigurationError: For a non-integer timeout or an unknown backend
        """
        return cls(
            user_agent=os.getenv("USER_AGENT", DEFAULT_USER_AGENT),
            timeout=_int_env("REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT_SECONDS),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            # PageSpeed Insights
            pagespeed_api_key=os.getenv("PAGESPEED_API_KEY") or os.getenv("GOOGLE_PSI_API_KEY"),
            psi_strategy=os.getenv("PSI_STRATEGY", "desktop"),
            psi_locale=os.getenv("PSI_LOCALE", "en"),
            performance_backend=os.getenv("PERFORMANCE_BACKEND", "auto"),
            lighthouse_timeout=_int_env("LIGHTHOUSE_TIMEOUT", 90),
            wappalyzer_api_key=os.getenv("WAPPALYZER_API_KEY"),
        )


@dataclass
class AnalysisThresholds:
    """Configurable thresholds for SEO scoring."""

    title_min: int = 30
    title_max: int = 60
    meta_description_min: int = 120
    meta_description_max: int = 160

    # Alt text coverage (percent) that still earns partial credit
    image_alt_partial_coverage: float = 80.0

    @classmethod
    def from_env(cls) -> "AnalysisThresholds":
        """Load thresholds from environment variables.

        Environment variables should be prefixed with WEBANALYZER_THRESHOLD_
        e.g., WEBANALYZER_THRESHOLD_TITLE_MAX=70

        Returns:
            AnalysisThresholds with values from environment
        """
        thresholds = cls()
        prefix = "WEBANALYZER_THRESHOLD_"

        for field_name in thresholds.__dataclass_fields__:
            env_key = f"{prefix}{field_name.upper()}"
            env_value = os.getenv(env_key)

            if env_value is not None:
                field_type = thresholds.__dataclass_fields__[field_name].type
                try:
                    if field_type in (int, "int"):
                        setattr(thresholds, field_name, int(env_value))
                    elif field_type in (float, "float"):
                        setattr(thresholds, field_name, float(env_value))
                except ValueError:
                    pass  # Keep default if conversion fails

        return thresholds

    @classmethod
    def from_file(cls, path: str) -> "AnalysisThresholds":
        """Load thresholds from a JSON configuration file.

        Args:
            path: Path to JSON configuration file

        Returns:
            AnalysisThresholds with values from file
        """
        thresholds = cls()
        file_path = Path(path)

        if not file_path.exists():
            return thresholds

        with open(file_path, 'r') as f:
            config = json.load(f)

        threshold_config = config.get('thresholds', config)

        for field_name in thresholds.__dataclass_fields__:
            if field_name in threshold_config:
                setattr(thresholds, field_name, threshold_config[field_name])

        return thresholds

    def to_dict(self) -> dict:
        """Convert thresholds to dictionary."""
        return {
            field_name: getattr(self, field_name)
            for field_name in self.__dataclass_fields__
        }


# Global default thresholds instance
default_thresholds = AnalysisThresholds()
