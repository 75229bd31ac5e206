"""Tests for the PageSpeed Insights and Wappalyzer clients."""

import httpx
import pytest

from webanalyzer.exceptions import PerformanceAnalysisError, TechLookupError
from webanalyzer.external import PageSpeedInsightsAPI, WappalyzerAPI


class TestPageSpeedInsightsAPI:
    """Test cases for PageSpeedInsightsAPI."""

    def test_requires_api_key(self):
        with pytest.raises(PerformanceAnalysisError, match="not configured"):
            PageSpeedInsightsAPI(api_key="")

    @pytest.mark.asyncio
    async def test_analyze(self, mock_http, lighthouse_result):
        requests = mock_http(
            lambda request: httpx.Response(200, json={"lighthouseResult": lighthouse_result})
        )
        client = PageSpeedInsightsAPI(api_key="test-key", strategy="mobile")

        metrics = await client.analyze("https://example.com")

        assert metrics.source == "pagespeed"
        assert metrics.performance_score == 87
        params = requests[0].url.params
        assert params["url"] == "https://example.com"
        assert params["key"] == "test-key"
        assert params["strategy"] == "mobile"
        assert params.get_list("category") == [
            "performance", "accessibility", "best-practices", "seo"
        ]
        assert client.get_stats()["total_requests"] == 1

    @pytest.mark.asyncio
    async def test_strategy_override(self, mock_http, lighthouse_result):
        requests = mock_http(
            lambda request: httpx.Response(200, json={"lighthouseResult": lighthouse_result})
        )
        client = PageSpeedInsightsAPI(api_key="test-key")

        await client.analyze("https://example.com", strategy="mobile")

        assert requests[0].url.params["strategy"] == "mobile"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status, message", [
        (429, "rate limit exceeded"),
        (400, "Invalid URL"),
        (500, "PageSpeed API error: 500"),
    ])
    async def test_http_errors(self, mock_http, status, message):
        mock_http(lambda request: httpx.Response(status, json={}))
        client = PageSpeedInsightsAPI(api_key="test-key")

        with pytest.raises(PerformanceAnalysisError, match=message):
            await client.analyze("https://example.com")

        assert client.get_stats()["failed_requests"] == 1

    @pytest.mark.asyncio
    async def test_timeout(self, mock_http):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        mock_http(handler)
        client = PageSpeedInsightsAPI(api_key="test-key")

        with pytest.raises(PerformanceAnalysisError, match="timeout"):
            await client.analyze("https://example.com")

    @pytest.mark.asyncio
    async def test_error_payload(self, mock_http):
        mock_http(lambda request: httpx.Response(
            200, json={"error": {"code": 500, "message": "Lighthouse returned error: NO_FCP"}}
        ))
        client = PageSpeedInsightsAPI(api_key="test-key")

        with pytest.raises(PerformanceAnalysisError, match="NO_FCP"):
            await client.analyze("https://example.com")

    @pytest.mark.asyncio
    async def test_missing_lighthouse_result(self, mock_http):
        mock_http(lambda request: httpx.Response(200, json={"id": "https://example.com"}))
        client = PageSpeedInsightsAPI(api_key="test-key")

        with pytest.raises(PerformanceAnalysisError, match="no Lighthouse result"):
            await client.analyze("https://example.com")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, text="<html>proxy error</html>"),
        httpx.Response(200, json=[1, 2]),
        httpx.Response(200, json={"lighthouseResult": "pending"}),
        httpx.Response(200, json={"error": "quota exhausted"}),
    ])
    async def test_malformed_payload(self, mock_http, response):
        mock_http(lambda request: response)
        client = PageSpeedInsightsAPI(api_key="test-key")

        with pytest.raises(PerformanceAnalysisError):
            await client.analyze("https://example.com")

        assert client.get_stats()["failed_requests"] == 1

    def test_stats_without_requests(self):
        stats = PageSpeedInsightsAPI(api_key="test-key").get_stats()
        assert stats == {
            "total_requests": 0,
            "failed_requests": 0,
            "success_rate": 0,
            "requests_in_window": 0,
        }


class TestWappalyzerAPI:
    """Test cases for WappalyzerAPI."""

    URL = "https://example.com"

    def test_requires_api_key(self):
        with pytest.raises(TechLookupError) as exc_info:
            WappalyzerAPI(api_key=None)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_lookup_sorted_by_confidence(self, mock_http):
        payload = {self.URL: {"url": self.URL, "technologies": [
            {"name": "Nginx", "confidence": 50, "categories": [{"name": "Web servers"}]},
            {"name": "React", "confidence": 100, "categories": [{"name": "JavaScript frameworks"}]},
        ]}}
        requests = mock_http(lambda request: httpx.Response(200, json=payload))

        result = await WappalyzerAPI(api_key="wap-key").lookup(self.URL)

        assert [tech["name"] for tech in result.technologies] == ["React", "Nginx"]
        assert result.total_technologies == 2
        assert requests[0].headers["X-Api-Key"] == "wap-key"
        assert requests[0].url.params["urls"] == self.URL

    @pytest.mark.asyncio
    async def test_lookup_list_response(self, mock_http):
        payload = [{"url": self.URL, "technologies": [{"name": "Shopify", "confidence": 100}]}]
        mock_http(lambda request: httpx.Response(200, json=payload))

        result = await WappalyzerAPI(api_key="wap-key").lookup(self.URL)

        assert result.to_dict()["technologies"] == [{"name": "Shopify", "confidence": 100}]

    @pytest.mark.asyncio
    async def test_no_data_for_url(self, mock_http):
        mock_http(lambda request: httpx.Response(200, json={}))

        with pytest.raises(TechLookupError) as exc_info:
            await WappalyzerAPI(api_key="wap-key").lookup(self.URL)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_key(self, mock_http):
        mock_http(lambda request: httpx.Response(401, json={"message": "Unauthorized"}))

        with pytest.raises(TechLookupError, match="invalid or expired") as exc_info:
            await WappalyzerAPI(api_key="bad").lookup(self.URL)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_other_error_uses_payload_message(self, mock_http):
        mock_http(lambda request: httpx.Response(502, json={"message": "Upstream failure"}))

        with pytest.raises(TechLookupError, match="Wappalyzer API error: Upstream failure"):
            await WappalyzerAPI(api_key="wap-key").lookup(self.URL)

    @pytest.mark.asyncio
    async def test_network_error(self, mock_http):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        mock_http(handler)

        with pytest.raises(TechLookupError, match="connection refused"):
            await WappalyzerAPI(api_key="wap-key").lookup(self.URL)

    @pytest.mark.asyncio
    async def test_non_json_body(self, mock_http):
        mock_http(lambda request: httpx.Response(200, text="<html>Bad gateway</html>"))

        with pytest.raises(TechLookupError, match="invalid response") as exc_info:
            await WappalyzerAPI(api_key="wap-key").lookup(self.URL)
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"https://example.com": "queued"}, ["queued"], 42])
    async def test_unexpected_shape_has_no_data(self, mock_http, payload):
        mock_http(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(TechLookupError) as exc_info:
            await WappalyzerAPI(api_key="wap-key").lookup(self.URL)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_skips_malformed_technologies(self, mock_http):
        payload = {self.URL: {"technologies": ["React", {"name": "Vue.js", "confidence": 100}]}}
        mock_http(lambda request: httpx.Response(200, json=payload))

        result = await WappalyzerAPI(api_key="wap-key").lookup(self.URL)

        assert result.technologies == [{"name": "Vue.js", "confidence": 100}]
