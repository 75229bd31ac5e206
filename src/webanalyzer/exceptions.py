"""Exceptions raised by the web analyzer.

Network failures of the page fetch itself are reported as values
(``FetchResult.success``), not exceptions. Everything here is raised for bad
input or for failures of an optional collaborator.
"""

from typing import Any, Dict, Optional


class WebAnalyzerError(Exception):
    """Base exception for all web analyzer errors."""

    error_code: str = "WEBANALYZER_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Return structured error response dict."""
        response = {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response


class InvalidURLError(WebAnalyzerError, ValueError):
    """URL is missing a scheme or host, or uses an unsupported scheme."""

    error_code = "INVALID_URL"
    status_code = 400

    def __init__(self, url: str, reason: str = "Invalid URL"):
        super().__init__(f"{reason}: {url}", details={"url": url, "reason": reason})


class BlockedHostError(WebAnalyzerError):
    """URL points at an internal or private address."""

    error_code = "BLOCKED_HOST"
    status_code = 403

    def __init__(self, host: str):
        super().__init__(
            f"Access to internal addresses is not allowed: {host}",
            details={"host": host},
        )


class InvalidAnalysisModeError(WebAnalyzerError, ValueError):
    """Unknown analysis mode requested."""

    error_code = "INVALID_ANALYSIS_MODE"
    status_code = 400

    def __init__(self, mode: str, allowed: tuple):
        super().__init__(
            f"Unknown analysis mode '{mode}' (expected one of: {', '.join(allowed)})",
            details={"mode": mode},
        )


class PerformanceAnalysisError(WebAnalyzerError):
    """Performance backend failed or is not available."""

    error_code = "PERFORMANCE_ANALYSIS_FAILED"
    status_code = 502


class TechLookupError(WebAnalyzerError):
    """Hosted technology lookup failed."""

    error_code = "TECH_LOOKUP_FAILED"

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message, details={"status_code": status_code})
        self.status_code = status_code


class ScreenshotError(WebAnalyzerError):
    """Headless browser could not capture the page."""

    error_code = "SCREENSHOT_FAILED"


class ConfigurationError(WebAnalyzerError, ValueError):
    """Environment or configuration value is invalid."""

    error_code = "CONFIGURATION_ERROR"
