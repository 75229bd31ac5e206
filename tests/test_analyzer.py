"""Tests for the page analyzer."""

from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from webanalyzer.analyzer import PageAnalyzer
from webanalyzer.config import Config
from webanalyzer.exceptions import (
    BlockedHostError,
    InvalidAnalysisModeError,
    InvalidURLError,
    PerformanceAnalysisError,
)
from webanalyzer.models import BasicPerformanceMetrics, FetchResult, LegacyTechnologies

URL = "https://blog.example.com/"

PAGE_HTML = """
<html>
  <head>
    <title>Example Blog - Notes on Building Small Web Things</title>
    <meta name="description" content="Short description">
    <meta name="generator" content="WordPress 6.4.2">
    <meta property="og:image" content="https://blog.example.com/cover.png">
    <link rel="icon" href="/favicon.png">
    <link rel="stylesheet" href="/wp-content/themes/astra/style.css">
  </head>
  <body><h1>Example Blog</h1><p>Hello</p></body>
</html>
"""

METADATA_KEYS = {"title", "description", "image", "url", "favicon"}


@pytest.fixture
def crawler():
    crawler = Mock()
    crawler.fetch.return_value = FetchResult(
        url=URL,
        html=PAGE_HTML,
        headers={"server": "nginx", "x-powered-by": "PHP/8.2"},
        status_code=200,
    )
    return crawler


@pytest.fixture
def performance_analyzer():
    analyzer = Mock()
    analyzer.analyze = AsyncMock(
        return_value=BasicPerformanceMetrics(url=URL, score=90, response_time_ms=300.0)
    )
    return analyzer


@pytest.fixture
def page_analyzer(crawler, performance_analyzer):
    return PageAnalyzer(
        config=Config(),
        crawler=crawler,
        performance_analyzer=performance_analyzer,
    )


class TestPageAnalyzer:
    """Test cases for PageAnalyzer."""

    @pytest.mark.asyncio
    async def test_basic(self, page_analyzer, performance_analyzer):
        result = await page_analyzer.analyze(URL)

        assert set(result) == METADATA_KEYS | {"technologies"}
        assert result["title"] == "Example Blog - Notes on Building Small Web Things"
        assert result["favicon"] == "https://blog.example.com/favicon.png"
        assert result["image"] == "https://blog.example.com/cover.png"
        assert result["technologies"]["servers"] == ["Powered by: PHP/8.2"]
        assert result["technologies"]["marketing"] == ["Generator: WordPress 6.4.2"]
        performance_analyzer.analyze.assert_not_called()

    @pytest.mark.asyncio
    async def test_seo(self, page_analyzer):
        result = await page_analyzer.analyze(URL, analysis="seo")

        assert set(result) == METADATA_KEYS | {"seo"}
        assert "Description too short (17 characters)" in result["seo"]["issues"]

    @pytest.mark.asyncio
    async def test_tech(self, page_analyzer):
        result = await page_analyzer.analyze(URL, analysis="tech")

        assert set(result) == METADATA_KEYS | {"technologies", "technologies_detailed"}
        assert result["technologies"]["cms"] == ["WordPress"]
        assert result["technologies"]["servers"] == ["Nginx"]
        assert result["technologies"]["languages"] == ["PHP"]

        detailed = result["technologies_detailed"]
        wordpress = next(t for t in detailed["technologies"] if t["name"] == "WordPress")
        assert wordpress["version"] == "6.4.2"
        assert detailed["stats"]["html_size"] == len(PAGE_HTML)

    @pytest.mark.asyncio
    async def test_full(self, page_analyzer):
        result = await page_analyzer.analyze(URL, analysis="full")

        assert {"seo", "technologies", "technologies_detailed", "performance"} <= set(result)
        assert result["performance"]["score"] == 90
        assert result["performance"]["source"] == "basic"

    @pytest.mark.asyncio
    async def test_performance_failure_reported(self, page_analyzer, performance_analyzer):
        performance_analyzer.analyze.side_effect = PerformanceAnalysisError("Lighthouse timed out")

        result = await page_analyzer.analyze(URL, analysis="performance")

        assert result["performance"] == {
            "error": "Performance analysis failed: Lighthouse timed out"
        }

    @pytest.mark.asyncio
    async def test_invalid_pagespeed_response_reported(self, crawler, mock_http):
        mock_http(lambda request: httpx.Response(200, text="<html>proxy error</html>"))
        config = Config(pagespeed_api_key="key", performance_backend="pagespeed")
        page_analyzer = PageAnalyzer(config=config, crawler=crawler)

        result = await page_analyzer.analyze(URL, analysis="full")

        assert result["performance"] == {
            "error": "Performance analysis failed: "
                     "PageSpeed Insights returned an invalid response"
        }
        assert result["seo"]["score"] >= 0

    @pytest.mark.asyncio
    async def test_fetch_failure(self, page_analyzer, crawler):
        crawler.fetch.return_value = FetchResult(
            url=URL, success=False, error="Failed to fetch page: Connection error: refused"
        )

        result = await page_analyzer.analyze(URL, analysis="tech")

        assert result["error"] == "Failed to fetch page: Connection error: refused"
        assert result["url"] == URL
        assert result["title"] is None
        assert result["technologies"] == LegacyTechnologies().to_dict()
        assert result["technologies_detailed"]["technologies"] == []

    @pytest.mark.asyncio
    async def test_detector_failure_falls_back_to_empty(self, crawler, performance_analyzer):
        detector = Mock()
        detector.detect.side_effect = RuntimeError("bad signature")
        page_analyzer = PageAnalyzer(
            config=Config(),
            crawler=crawler,
            detector=detector,
            performance_analyzer=performance_analyzer,
        )

        result = await page_analyzer.analyze(URL, analysis="tech")

        assert result["technologies"] == LegacyTechnologies().to_dict()
        assert result["technologies_detailed"]["categorized"] == {}
        assert result["title"] is not None

    @pytest.mark.asyncio
    async def test_invalid_mode(self, page_analyzer, crawler):
        with pytest.raises(InvalidAnalysisModeError):
            await page_analyzer.analyze(URL, analysis="deep")
        crawler.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_url(self, page_analyzer):
        with pytest.raises(InvalidURLError):
            await page_analyzer.analyze("not a url")

    @pytest.mark.asyncio
    async def test_internal_url(self, page_analyzer, crawler):
        with pytest.raises(BlockedHostError):
            await page_analyzer.analyze("http://192.168.0.1/router")
        crawler.fetch.assert_not_called()
