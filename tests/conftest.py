"""Shared fixtures."""

import copy
from unittest.mock import patch

import httpx
import pytest

REAL_ASYNC_CLIENT = httpx.AsyncClient

LIGHTHOUSE_RESULT = {
    "finalUrl": "https://example.com/",
    "userAgent": "Mozilla/5.0 (X11; Linux x86_64) HeadlessChrome/120.0.0.0",
    "timing": {"total": 8123.4},
    "categories": {
        "performance": {"score": 0.87},
        "accessibility": {"score": 0.9},
        "best-practices": {"score": 1.0},
        "seo": {"score": 0.92},
    },
    "audits": {
        "first-contentful-paint": {"numericValue": 1200.5},
        "largest-contentful-paint": {"numericValue": 2300.0},
        "total-blocking-time": {"numericValue": 450.0},
        "cumulative-layout-shift": {"numericValue": 0.3},
        "speed-index": {"numericValue": 3100.0},
        "interactive": {"numericValue": 4000.0},
        "max-potential-fid": {"numericValue": 80.0},
        "render-blocking-resources": {
            "title": "Eliminate render-blocking resources",
            "description": "Resources are blocking the first paint of your page.",
            "score": 0.4,
            "numericValue": 450,
            "displayValue": "Potential savings of 450 ms",
            "details": {"type": "opportunity", "items": []},
        },
        "unused-css-rules": {
            "title": "Reduce unused CSS",
            "score": 1,
            "numericValue": 0,
            "details": {"type": "opportunity", "items": []},
        },
        "mainthread-work-breakdown": {
            "title": "Minimize main-thread work",
            "description": "Consider reducing the time spent parsing JS.",
            "score": 0.5,
            "displayValue": "2.1 s",
            "details": {"type": "diagnostic"},
        },
        "dom-size": {
            "title": "Avoids an excessive DOM size",
            "score": 1,
            "details": {"type": "diagnostic"},
        },
        "final-screenshot": {
            "details": {"type": "screenshot", "data": "data:image/jpeg;base64,/9j/AAAA"},
        },
    },
}


@pytest.fixture
def lighthouse_result():
    """A trimmed Lighthouse result (lhr)."""
    return copy.deepcopy(LIGHTHOUSE_RESULT)


@pytest.fixture
def mock_http():
    """Route every httpx.AsyncClient through a request handler.

    Usage: ``requests = mock_http(handler)``; the returned list collects the
    requests the handler saw.
    """
    patchers = []

    def install(handler):
        seen = []

        def recording_handler(request):
            seen.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording_handler)

        def factory(*args, **kwargs):
            kwargs.pop("transport", None)
            return REAL_ASYNC_CLIENT(*args, transport=transport, **kwargs)

        patcher = patch("httpx.AsyncClient", side_effect=factory)
        patcher.start()
        patchers.append(patcher)
        return seen

    yield install

    for patcher in patchers:
        patcher.stop()
