"""
Google PageSpeed Insights API Client

Runs Lighthouse remotely through Google's PageSpeed Insights API.
API Documentation: https://developers.google.com/speed/docs/insights/v5/get-started

Rate Limits:
- 400 requests per 100 seconds
- 25,000 requests per day (free tier)
"""

import asyncio
import logging
from collections import deque
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import httpx

from webanalyzer.constants import LIGHTHOUSE_CATEGORIES, PSI_TIMEOUT_SECONDS
from webanalyzer.exceptions import PerformanceAnalysisError
from webanalyzer.lighthouse_report import parse_lighthouse_result
from webanalyzer.models import PerformanceMetrics

logger = logging.getLogger(__name__)


class PageSpeedInsightsAPI:
    """Client for Google PageSpeed Insights API v5"""

    API_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
    RATE_LIMIT_REQUESTS = 400  # Max requests per 100 seconds
    RATE_LIMIT_WINDOW = 100  # Seconds

    def __init__(
        self,
        api_key: str,
        strategy: str = "desktop",  # 'mobile' or 'desktop'
        categories: Optional[List[str]] = None,
        locale: str = "en",
        timeout: float = PSI_TIMEOUT_SECONDS,
    ):
        """
        Initialize PageSpeed Insights API client.

        Args:
            api_key: Google API key with PageSpeed Insights API enabled
            strategy: 'mobile' or 'desktop' analysis
            categories: Lighthouse categories to run (default: the four scored ones)
            locale: Locale for results (default: 'en')
            timeout: Request timeout in seconds
        """
        if not api_key:
            raise PerformanceAnalysisError("PageSpeed Insights API key not configured")

        self.api_key = api_key
        self.strategy = strategy
        self.categories = categories or list(LIGHTHOUSE_CATEGORIES)
        self.locale = locale
        self.timeout = timeout

        # Rate limiting
        self.request_times: deque = deque()
        self.semaphore = asyncio.Semaphore(4)  # Max 4 concurrent requests
        self.total_requests = 0
        self.failed_requests = 0

    async def analyze(self, url: str, strategy: Optional[str] = None) -> PerformanceMetrics:
        """
        Analyze a URL with PageSpeed Insights.

        Args:
            url: URL to analyze
            strategy: Override default strategy ('mobile' or 'desktop')

        Returns:
            PerformanceMetrics parsed from the Lighthouse result

        Raises:
            PerformanceAnalysisError: On timeout, HTTP error or an error payload
        """
        await self._enforce_rate_limit()

        strategy = strategy or self.strategy
        params = {
            'url': url,
            'key': self.api_key,
            'strategy': strategy,
            'category': self.categories,
            'locale': self.locale,
        }

        try:
            async with self.semaphore:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    logger.info(f"[PSI] Analyzing {url} ({strategy})")
                    response = await client.get(self.API_URL, params=params)
                    response.raise_for_status()

                    self.total_requests += 1
                    data = response.json()

        except httpx.TimeoutException:
            self.failed_requests += 1
            logger.error(f"[PSI] Timeout analyzing {url} (>{self.timeout:.0f}s)")
            raise PerformanceAnalysisError(f"PageSpeed Insights timeout for {url}")

        except httpx.HTTPStatusError as e:
            self.failed_requests += 1
            status = e.response.status_code
            if status == 429:
                logger.error(f"[PSI] Rate limit exceeded for {url}")
                raise PerformanceAnalysisError(
                    "PageSpeed Insights rate limit exceeded. Try again later."
                )
            elif status == 400:
                logger.error(f"[PSI] Invalid URL or parameters: {url}")
                raise PerformanceAnalysisError(f"Invalid URL for PageSpeed Insights: {url}")
            else:
                logger.error(f"[PSI] API error {status} for {url}")
                raise PerformanceAnalysisError(f"PageSpeed API error: {status}")

        except httpx.HTTPError as e:
            self.failed_requests += 1
            error_msg = str(e) if str(e) else type(e).__name__
            logger.error(f"[PSI] Error analyzing {url}: {error_msg}")
            raise PerformanceAnalysisError(f"Failed to analyze performance: {error_msg}")

        except ValueError:
            self.failed_requests += 1
            logger.error(f"[PSI] Response for {url} is not valid JSON")
            raise PerformanceAnalysisError("PageSpeed Insights returned an invalid response")

        return self._parse_response(data, url)

    async def _enforce_rate_limit(self):
        """Enforce rate limit of 400 requests per 100 seconds"""
        now = datetime.now()

        # Remove requests older than 100 seconds
        while self.request_times and (now - self.request_times[0]) > timedelta(seconds=self.RATE_LIMIT_WINDOW):
            self.request_times.popleft()

        # Wait if at limit
        if len(self.request_times) >= self.RATE_LIMIT_REQUESTS:
            oldest_request = self.request_times[0]
            wait_time = self.RATE_LIMIT_WINDOW - (now - oldest_request).total_seconds()

            if wait_time > 0:
                logger.warning(f"[PSI] Rate limit reached. Waiting {wait_time:.1f}s...")
                await asyncio.sleep(wait_time)

                now = datetime.now()
                while self.request_times and (now - self.request_times[0]) > timedelta(seconds=self.RATE_LIMIT_WINDOW):
                    self.request_times.popleft()

        self.request_times.append(now)

    def _parse_response(self, data: Any, url: str) -> PerformanceMetrics:
        """Validate the API payload and parse its Lighthouse result."""
        if not isinstance(data, dict):
            self.failed_requests += 1
            raise PerformanceAnalysisError("PageSpeed Insights returned an invalid response")

        error = data.get('error')
        if error:
            self.failed_requests += 1
            message = (error.get('message') if isinstance(error, dict) else str(error)) or 'PageSpeed API error'
            logger.error(f"[PSI] Error payload for {url}: {message}")
            raise PerformanceAnalysisError(f"Failed to analyze performance: {message}")

        lighthouse = data.get('lighthouseResult')
        if not isinstance(lighthouse, dict) or not lighthouse:
            self.failed_requests += 1
            raise PerformanceAnalysisError(f"PageSpeed Insights returned no Lighthouse result for {url}")

        return parse_lighthouse_result(lighthouse, url, source="pagespeed")

    def get_stats(self) -> Dict[str, Any]:
        """Get API usage statistics"""
        return {
            'total_requests': self.total_requests,
            'failed_requests': self.failed_requests,
            'success_rate': (
                round((self.total_requests - self.failed_requests) / self.total_requests * 100, 1)
                if self.total_requests > 0 else 0
            ),
            'requests_in_window': len(self.request_times),
        }
