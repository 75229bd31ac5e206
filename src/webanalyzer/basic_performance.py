"""Timing-only performance estimate for when Lighthouse is not available."""

import logging
import time
from typing import Optional

import requests

from webanalyzer.constants import (
    BASIC_PERF_NO_CACHE_CONTROL_PENALTY,
    BASIC_PERF_NO_COMPRESSION_PENALTY,
    BASIC_PERF_RESPONSE_PENALTIES,
    BASIC_PERF_SIZE_PENALTIES,
    BASIC_PERF_TIMEOUT_SECONDS,
)
from webanalyzer.models import BasicPerformanceMetrics

logger = logging.getLogger(__name__)


class BasicPerformanceAnalyzer:
    """Scores a page from a single GET: response time, HTML size and headers."""

    USER_AGENT = "webanalyzer Performance Analyzer/1.0"

    def __init__(
        self,
        timeout: int = BASIC_PERF_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()

    def analyze(self, url: str) -> BasicPerformanceMetrics:
        """Fetch the URL once and score it.

        Network failures are not raised: they produce a zero score with the
        error listed in the recommendations.
        """
        start_time = time.time()

        try:
            response = self.session.get(
                url,
                timeout=self.timeout,
                headers={"User-Agent": self.USER_AGENT},
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            response_time = (time.time() - start_time) * 1000
            logger.warning(f"Basic performance analysis failed for {url}: {e}")
            return BasicPerformanceMetrics(
                url=url,
                score=0,
                response_time_ms=response_time,
                ttfb_ms=response_time,
                recommendations=[
                    "Performance analysis failed",
                    "Check that the site is reachable",
                    str(e) or type(e).__name__,
                ],
            )

        response_time = (time.time() - start_time) * 1000
        content_size = len(response.content)
        headers = {name.lower(): value for name, value in response.headers.items()}

        score, recommendations = self.score(response_time, content_size, headers)

        elapsed = getattr(response, "elapsed", None)
        ttfb = elapsed.total_seconds() * 1000 if elapsed is not None else response_time

        return BasicPerformanceMetrics(
            url=url,
            score=score,
            response_time_ms=round(response_time, 1),
            ttfb_ms=round(ttfb, 1),
            content_size=content_size,
            status_code=response.status_code,
            recommendations=recommendations,
        )

    @staticmethod
    def score(response_time_ms: float, content_size: int, headers: dict) -> tuple[int, list[str]]:
        """Apply the fixed penalty table and return (score, recommendations)."""
        score = 100
        recommendations = []

        for limit, penalty, message in BASIC_PERF_RESPONSE_PENALTIES:
            if response_time_ms > limit:
                score -= penalty
                recommendations.append(message)
                break

        for limit, penalty, message in BASIC_PERF_SIZE_PENALTIES:
            if content_size > limit:
                score -= penalty
                recommendations.append(message)
                break

        if not headers.get("content-encoding"):
            score -= BASIC_PERF_NO_COMPRESSION_PENALTY
            recommendations.append("Compression not enabled - enable gzip/brotli")

        if not headers.get("cache-control"):
            score -= BASIC_PERF_NO_CACHE_CONTROL_PENALTY
            recommendations.append("Missing cache headers")

        if not headers.get("content-security-policy"):
            recommendations.append("Consider adding a Content Security Policy")

        return max(0, min(100, round(score))), recommendations

    def close(self) -> None:
        self.session.close()
