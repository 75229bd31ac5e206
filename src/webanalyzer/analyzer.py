"""Page analyzer that combines fetching, SEO scoring, technology detection and performance."""

import asyncio
import logging
from typing import Any, Dict, Optional

from webanalyzer.config import AnalysisThresholds, Config
from webanalyzer.constants import ANALYSIS_MODES
from webanalyzer.crawler import (
    WebCrawler,
    ensure_public_url,
    extract_metadata,
    extract_technology_hints,
)
from webanalyzer.exceptions import InvalidAnalysisModeError, PerformanceAnalysisError
from webanalyzer.models import DetectionResult, FetchResult, LegacyTechnologies, PageMetadata
from webanalyzer.performance import PerformanceAnalyzer
from webanalyzer.seo_analyzer import SEOAnalyzer
from webanalyzer.technology_detector import TechnologyDetector

logger = logging.getLogger(__name__)

SEO_MODES = ("seo", "full")
TECH_MODES = ("tech", "full")
PERFORMANCE_MODES = ("performance", "full")


class PageAnalyzer:
    """Analyzes a single web page.

    Every mode returns the preview metadata (title, description, image, url,
    favicon). On top of that:

    - ``seo`` / ``full`` add ``seo``
    - ``tech`` / ``full`` add ``technologies`` (legacy buckets) and
      ``technologies_detailed``
    - ``performance`` / ``full`` add ``performance``
    - ``basic`` adds ``technologies`` built from header and meta-tag hints
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        crawler: Optional[WebCrawler] = None,
        detector: Optional[TechnologyDetector] = None,
        seo_analyzer: Optional[SEOAnalyzer] = None,
        performance_analyzer: Optional[PerformanceAnalyzer] = None,
    ):
        """Initialize the page analyzer.

        Args:
            config: Configuration (loaded from the environment if None)
            crawler: Page fetcher
            detector: Technology detector
            seo_analyzer: SEO scorer
            performance_analyzer: Performance backend selector
        """
        self.config = config or Config.from_env()
        self.crawler = crawler or WebCrawler(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout,
        )
        self.detector = detector or TechnologyDetector()
        self.seo_analyzer = seo_analyzer or SEOAnalyzer(AnalysisThresholds.from_env())
        self.performance_analyzer = performance_analyzer or PerformanceAnalyzer(self.config)

    async def analyze(self, url: str, analysis: str = "basic") -> Dict[str, Any]:
        """Analyze a URL.

        Args:
            url: Public http(s) URL
            analysis: One of basic, seo, tech, performance, full

        Returns:
            JSON-serialisable response dictionary. Fetch failures are reported
            under ``error`` instead of being raised.

        Raises:
            InvalidAnalysisModeError: Unknown analysis mode
            InvalidURLError: Malformed URL
            BlockedHostError: URL points at an internal address
        """
        if analysis not in ANALYSIS_MODES:
            raise InvalidAnalysisModeError(analysis, ANALYSIS_MODES)

        url = ensure_public_url(url)

        loop = asyncio.get_running_loop()
        fetch_result = await loop.run_in_executor(None, self.crawler.fetch, url)

        if not fetch_result.success:
            return self._fetch_failure_response(url, analysis, fetch_result)

        result = extract_metadata(url, fetch_result.html).to_dict()

        if analysis in SEO_MODES:
            result["seo"] = self.seo_analyzer.analyze(fetch_result.html).to_dict()

        if analysis in TECH_MODES:
            result.update(self.detect_technologies(fetch_result))

        if analysis in PERFORMANCE_MODES:
            result["performance"] = await self._analyze_performance(url)

        if analysis == "basic":
            hints = extract_technology_hints(fetch_result.html, fetch_result.headers)
            result["technologies"] = hints.to_dict()

        return result

    def detect_technologies(self, fetch_result: FetchResult) -> Dict[str, Any]:
        """Run the technology detector, falling back to empty results on failure."""
        try:
            detection = self.detector.detect(fetch_result.html, fetch_result.headers)
            legacy = self.detector.to_legacy_grouping(detection)
        except Exception as e:
            logger.error(f"Technology detection failed for {fetch_result.url}: {e}")
            detection = DetectionResult.empty()
            legacy = LegacyTechnologies()

        return {
            "technologies": legacy.to_dict(),
            "technologies_detailed": detection.to_dict(),
        }

    async def _analyze_performance(self, url: str) -> Dict[str, Any]:
        try:
            metrics = await self.performance_analyzer.analyze(url)
        except PerformanceAnalysisError as e:
            logger.error(f"Performance analysis failed for {url}: {e}")
            return {"error": f"Performance analysis failed: {e.message}"}
        return metrics.to_dict()

    def close(self) -> None:
        """Release the HTTP sessions held by the crawler and performance backends."""
        self.crawler.close()
        self.performance_analyzer.close()

    @staticmethod
    def _fetch_failure_response(
        url: str, analysis: str, fetch_result: FetchResult
    ) -> Dict[str, Any]:
        """Structurally complete response for a page that could not be fetched."""
        result = PageMetadata(url=url).to_dict()
        result["error"] = fetch_result.error or "Failed to fetch page"

        if analysis in TECH_MODES:
            result["technologies"] = LegacyTechnologies().to_dict()
            result["technologies_detailed"] = DetectionResult.empty().to_dict()

        return result
