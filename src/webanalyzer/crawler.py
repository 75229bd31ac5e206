"""Page fetcher and metadata extraction for single-page analysis."""

import ipaddress
import logging
import random
import socket
import time
from typing import Mapping, Optional
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from webanalyzer.constants import (
    BLOCKED_HOSTNAMES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    EXPONENTIAL_BACKOFF_BASE,
    HTTP_CODES_TRIGGER_UA_ROTATION,
    MAX_REDIRECTS,
)
from webanalyzer.exceptions import BlockedHostError, InvalidURLError
from webanalyzer.models import FetchResult, LegacyTechnologies, PageMetadata

logger = logging.getLogger(__name__)


def validate_url(url: str) -> str:
    """Check that a URL is absolute http(s) with a host.

    Returns:
        The URL, stripped of surrounding whitespace

    Raises:
        InvalidURLError: If the URL is empty, relative or not http(s)
    """
    if not url or not url.strip():
        raise InvalidURLError(url or "", "URL is required")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError(url, "URL must start with http:// or https://")
    if not parsed.hostname:
        raise InvalidURLError(url, "URL has no host")
    return url


def _parse_ip_literal(host: str):
    """Parse an IP literal, including the short, decimal, hex and octal IPv4
    forms that inet_aton (and so the resolver) accepts."""
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        pass
    try:
        return ipaddress.IPv4Address(socket.inet_aton(host))
    except (OSError, ValueError):
        return None


def is_blocked_host(hostname: str) -> bool:
    """Return True for local names and non-public literal IP addresses.

    Hostnames are not resolved; only literal addresses are classified.
    """
    host = (hostname or "").strip().lower().rstrip(".").strip("[]")
    if not host:
        return True
    if host in BLOCKED_HOSTNAMES or host.endswith(".localhost"):
        return True

    address = _parse_ip_literal(host)
    if address is None:
        return False
    if getattr(address, "ipv4_mapped", None):
        address = address.ipv4_mapped

    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_multicast
        or address.is_unspecified
    )


def ensure_public_url(url: str) -> str:
    """Validate a URL and refuse internal addresses.

    Raises:
        InvalidURLError: If the URL is malformed
        BlockedHostError: If the host is local or private
    """
    url = validate_url(url)
    hostname = urlparse(url).hostname or ""
    if is_blocked_host(hostname):
        raise BlockedHostError(hostname)
    return url


class WebCrawler:
    """Fetches single pages for analysis."""

    # Realistic browser user agents (rotated when a site refuses the request)
    BROWSER_USER_AGENTS = [
        # Chrome on Windows
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        # Chrome on macOS
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        # Firefox on Windows
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
        # Safari on macOS
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    ]

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: int = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ):
        """Initialize the crawler.

        Args:
            user_agent: Custom user agent (a browser UA is picked if None)
            timeout: Request timeout in seconds
            max_retries: Maximum attempts per fetch
        """
        self.user_agent = user_agent or random.choice(self.BROWSER_USER_AGENTS)
        self.timeout = timeout
        self.max_retries = max(1, max_retries)

        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        })

    def fetch(self, url: str) -> FetchResult:
        """Fetch a page, retrying transient failures.

        Redirects are followed one hop at a time and every target must pass
        the internal-address guard. Never raises for network problems;
        failures come back as ``FetchResult(success=False, error=...)``.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult with HTML and lower-cased response headers
        """
        last_error = None
        status_code = 0
        user_agent = self.user_agent

        for attempt in range(self.max_retries):
            try:
                if attempt > 0:
                    delay = (EXPONENTIAL_BACKOFF_BASE ** attempt) + random.uniform(0, 1)
                    time.sleep(delay)

                start_time = time.time()
                response = self._get(url, user_agent)
                load_time = time.time() - start_time

                response.raise_for_status()

                headers = {name.lower(): value for name, value in response.headers.items()}
                logger.debug(f"Fetched {url} ({response.status_code}) in {load_time:.2f}s")

                return FetchResult(
                    url=url,
                    html=response.text,
                    headers=headers,
                    status_code=response.status_code,
                    load_time=load_time,
                )

            except (BlockedHostError, InvalidURLError) as e:
                last_error = f"Redirect refused: {e.message}"
                break

            except requests.exceptions.HTTPError as e:
                status_code = e.response.status_code if e.response is not None else 0
                last_error = str(e)
                if status_code in HTTP_CODES_TRIGGER_UA_ROTATION:
                    # Site refused this client, try another browser identity
                    user_agent = random.choice(self.BROWSER_USER_AGENTS)
                    continue
                if 400 <= status_code < 500:
                    break

            except requests.exceptions.TooManyRedirects:
                last_error = f"Exceeded {MAX_REDIRECTS} redirects"
                break

            except requests.exceptions.Timeout:
                last_error = f"Request timeout after {self.timeout}s"

            except requests.exceptions.ConnectionError as e:
                last_error = f"Connection error: {str(e)}"

            except requests.exceptions.RequestException as e:
                last_error = str(e)

            logger.debug(f"Fetch attempt {attempt + 1} for {url} failed: {last_error}")

        logger.warning(f"Failed to fetch {url}: {last_error}")
        return FetchResult(
            url=url,
            status_code=status_code,
            success=False,
            error=f"Failed to fetch page: {last_error}",
        )

    def _get(self, url: str, user_agent: str) -> requests.Response:
        """GET a URL, following redirects only to public hosts.

        The user agent goes on each request; the shared session headers are
        never modified, so concurrent fetches do not see each other's rotation.

        Raises:
            BlockedHostError: A redirect points at an internal address
            InvalidURLError: A redirect points at a non-http(s) URL
            requests.exceptions.TooManyRedirects: More than MAX_REDIRECTS hops
        """
        headers = {"User-Agent": user_agent}
        current = url

        for _ in range(MAX_REDIRECTS + 1):
            response = self.session.get(
                current, timeout=self.timeout, headers=headers, allow_redirects=False
            )
            location = response.headers.get("Location") if response.is_redirect else None
            if not location:
                return response

            response.close()
            current = ensure_public_url(urljoin(current, location))
            logger.debug(f"Following redirect to {current}")

        raise requests.exceptions.TooManyRedirects(f"Exceeded {MAX_REDIRECTS} redirects")

    def close(self) -> None:
        self.session.close()


def extract_metadata(url: str, html: str) -> PageMetadata:
    """Extract preview metadata from HTML content.

    Args:
        url: The requested page URL
        html: HTML content

    Returns:
        PageMetadata with title, description, og:image, canonical URL and an
        absolute favicon URL
    """
    soup = BeautifulSoup(html or "", "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text() if title_tag else None

    description_tag = soup.find("meta", attrs={"name": "description"})
    description = description_tag.get("content") if description_tag else None

    image_tag = soup.find("meta", attrs={"property": "og:image"})
    image = image_tag.get("content") if image_tag else None

    canonical_tag = soup.find("link", rel="canonical")
    canonical = canonical_tag.get("href") if canonical_tag else None

    favicon = None
    for link in soup.find_all("link", href=True):
        rel = " ".join(link.get("rel") or []).lower()
        if rel in ("icon", "shortcut icon"):
            favicon = link["href"]
            break

    return PageMetadata(
        url=canonical or url,
        title=title or None,
        description=description or None,
        image=image or None,
        favicon=urljoin(url, favicon) if favicon else None,
    )


def extract_technology_hints(
    html: str, headers: Optional[Mapping[str, str]] = None
) -> LegacyTechnologies:
    """Cheap technology hints for the basic analysis mode.

    ``x-powered-by`` goes to ``servers`` as "Powered by: ..."; generator and
    framework meta tags go to ``marketing``.
    """
    hints = LegacyTechnologies()
    lowered = {str(k).lower(): v for k, v in (headers or {}).items()}

    powered_by = lowered.get("x-powered-by")
    if powered_by:
        hints.servers.append(f"Powered by: {powered_by}")

    soup = BeautifulSoup(html or "", "html.parser")
    for meta in soup.find_all("meta"):
        name = (meta.get("name") or "").lower()
        content = meta.get("content")
        if not name or not content:
            continue
        if "generator" in name:
            hints.marketing.append(f"Generator: {content}")
        elif "framework" in name:
            hints.marketing.append(f"Framework: {content}")

    return hints
