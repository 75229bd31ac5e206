"""
Wappalyzer Lookup API Client

Hosted technology lookup, used as a second opinion next to the local signature
matcher. API Documentation: https://www.wappalyzer.com/api/
"""

import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from webanalyzer.constants import WAPPALYZER_TIMEOUT_SECONDS
from webanalyzer.exceptions import TechLookupError
from webanalyzer.models import TechLookupResult

logger = logging.getLogger(__name__)

# API status code -> user facing message
STATUS_MESSAGES = {
    401: "Wappalyzer API key is invalid or expired",
    403: "Access to the Wappalyzer API is not authorized",
    404: "URL not found or not reachable",
    429: "API rate limit reached. Please try again later.",
}


class WappalyzerAPI:
    """Client for the Wappalyzer v2 lookup endpoint"""

    API_URL = "https://api.wappalyzer.com/v2/lookup/"
    USER_AGENT = "webanalyzer/0.1.0"

    def __init__(self, api_key: Optional[str], timeout: float = WAPPALYZER_TIMEOUT_SECONDS):
        if not api_key:
            raise TechLookupError(
                "Wappalyzer API key not configured. Set WAPPALYZER_API_KEY in .env",
                status_code=500,
            )
        self.api_key = api_key
        self.timeout = timeout

    async def lookup(self, url: str) -> TechLookupResult:
        """
        Look up the technologies of a URL.

        Args:
            url: Absolute URL to look up

        Returns:
            TechLookupResult with technologies sorted by confidence (descending)

        Raises:
            TechLookupError: On API errors or when the API has no data for the URL
        """
        start_time = time.perf_counter()
        headers = {"X-Api-Key": self.api_key, "User-Agent": self.USER_AGENT}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                logger.info(f"[Wappalyzer] Looking up {url}")
                response = await client.get(self.API_URL, params={"urls": url}, headers=headers)
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = STATUS_MESSAGES.get(status)
            if message is None:
                message = f"Wappalyzer API error: {self._error_message(e.response)}"
            logger.error(f"[Wappalyzer] API error {status} for {url}")
            raise TechLookupError(message, status_code=status)

        except httpx.HTTPError as e:
            error_msg = str(e) if str(e) else type(e).__name__
            logger.error(f"[Wappalyzer] Error looking up {url}: {error_msg}")
            raise TechLookupError(f"Wappalyzer API error: {error_msg}", status_code=500)

        except ValueError:
            logger.error(f"[Wappalyzer] Response for {url} is not valid JSON")
            raise TechLookupError("Wappalyzer returned an invalid response", status_code=502)

        url_data = self._find_url_data(data, url)
        if not url_data:
            raise TechLookupError("Wappalyzer returned no data for this URL", status_code=404)

        entries = url_data.get("technologies")
        if not isinstance(entries, list):
            entries = []
        technologies: List[Dict[str, Any]] = sorted(
            (tech for tech in entries if isinstance(tech, dict)),
            key=lambda tech: tech.get("confidence") or 0,
            reverse=True,
        )
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            f"[Wappalyzer] {len(technologies)} technologies for {url} in {elapsed_ms:.0f}ms"
        )
        return TechLookupResult(
            url=url_data.get("url") or url,
            technologies=technologies,
            analysis_time_ms=elapsed_ms,
        )

    @staticmethod
    def _find_url_data(data: Any, url: str) -> Optional[Dict[str, Any]]:
        """Responses are keyed by URL; some API versions return a list instead."""
        if isinstance(data, dict):
            item = data.get(url)
            return item if isinstance(item, dict) else None
        if isinstance(data, list):
            for item in data:
                if isinstance(item, dict) and item.get("url") == url:
                    return item
            return data[0] if data and isinstance(data[0], dict) else None
        return None

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.reason_phrase or str(response.status_code)
        if isinstance(payload, dict) and payload.get("message"):
            return str(payload["message"])
        return response.reason_phrase or str(response.status_code)
