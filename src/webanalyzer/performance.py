"""Performance analysis: picks PageSpeed Insights, local Lighthouse or the basic timer."""

import asyncio
import logging
from typing import Optional, Union

from webanalyzer.basic_performance import BasicPerformanceAnalyzer
from webanalyzer.config import Config
from webanalyzer.exceptions import PerformanceAnalysisError
from webanalyzer.external.pagespeed_insights import PageSpeedInsightsAPI
from webanalyzer.lighthouse_report import (
    extract_screenshot,
    get_metrics_status,
    parse_lighthouse_result,
)
from webanalyzer.lighthouse_runner import LighthouseRunner
from webanalyzer.models import BasicPerformanceMetrics, PerformanceMetrics

logger = logging.getLogger(__name__)

__all__ = [
    "PerformanceAnalyzer",
    "extract_screenshot",
    "get_metrics_status",
    "parse_lighthouse_result",
]

PerformanceResult = Union[PerformanceMetrics, BasicPerformanceMetrics]


class PerformanceAnalyzer:
    """Runs one performance audit with the configured or best available backend.

    With ``performance_backend="auto"`` the order is PageSpeed Insights (when an
    API key is configured), then the local Lighthouse CLI (when it is on PATH),
    then the basic response-time estimate.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config.from_env()
        # Created on first use and kept for the life of the analyzer, so the
        # PSI rate limiter and the basic analyzer's session span every request
        self._psi_api: Optional[PageSpeedInsightsAPI] = None
        self._basic_analyzer: Optional[BasicPerformanceAnalyzer] = None

    def resolve_backend(self) -> str:
        backend = self.config.performance_backend
        if backend != "auto":
            return backend
        if self.config.pagespeed_api_key:
            return "pagespeed"
        if LighthouseRunner.is_available():
            return "lighthouse"
        return "basic"

    @property
    def psi_api(self) -> PageSpeedInsightsAPI:
        if self._psi_api is None:
            self._psi_api = PageSpeedInsightsAPI(
                api_key=self.config.pagespeed_api_key,
                strategy=self.config.psi_strategy,
                locale=self.config.psi_locale,
            )
        return self._psi_api

    @property
    def basic_analyzer(self) -> BasicPerformanceAnalyzer:
        if self._basic_analyzer is None:
            self._basic_analyzer = BasicPerformanceAnalyzer()
        return self._basic_analyzer

    async def analyze(self, url: str) -> PerformanceResult:
        """Audit a URL.

        Raises:
            PerformanceAnalysisError: If the selected backend fails
        """
        backend = self.resolve_backend()
        logger.info(f"Performance analysis of {url} using {backend}")

        if backend == "pagespeed":
            return await self.psi_api.analyze(url)

        loop = asyncio.get_running_loop()

        if backend == "lighthouse":
            runner = LighthouseRunner(timeout=self.config.lighthouse_timeout)
            return await loop.run_in_executor(None, runner.run_lighthouse, url)

        if backend == "basic":
            return await loop.run_in_executor(None, self.basic_analyzer.analyze, url)

        raise PerformanceAnalysisError(f"Unknown performance backend: {backend}")

    def close(self) -> None:
        if self._basic_analyzer is not None:
            self._basic_analyzer.close()
            self._basic_analyzer = None
