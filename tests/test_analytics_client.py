"""AnalyticsClient against a mocked transport."""

import httpx
import pytest

from clients.analytics_client import AnalyticsClient

from test_schemas import PAYLOAD

BASE_URL = "http://analytics.test"


def make_client(handler) -> AnalyticsClient:
    transport = httpx.MockTransport(handler)
    return AnalyticsClient(httpx.AsyncClient(base_url=BASE_URL, transport=transport))


class TestGetAnalysis:
    """Status handling and payload validation"""

    @pytest.mark.asyncio
    async def test_success(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=PAYLOAD)

        result = await make_client(handler).get_analysis("  aapl ")

        assert result is not None
        assert result.symbol == "AAPL"
        assert len(result.to_dataset().candles) == 2
        assert seen[0].url.path == "/api/patterns/AAPL"
        assert seen[0].headers["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_empty_symbol_skips_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        assert await make_client(handler).get_analysis("   ") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 500, 503])
    async def test_error_status_returns_none(self, status):
        client = make_client(lambda request: httpx.Response(status, json={"detail": "nope"}))
        assert await client.get_analysis("AAPL") is None

    @pytest.mark.asyncio
    async def test_invalid_payload_returns_none(self):
        bad = dict(PAYLOAD, candles=[{"time": 1, "open": 10, "high": 5, "low": 9, "close": 11}])
        client = make_client(lambda request: httpx.Response(200, json=bad))
        assert await client.get_analysis("AAPL") is None

    @pytest.mark.asyncio
    async def test_non_json_body_returns_none(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        assert await client.get_analysis("AAPL") is None

    @pytest.mark.asyncio
    async def test_timeout_returns_none(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        assert await make_client(handler).get_analysis("AAPL") is None

    @pytest.mark.asyncio
    async def test_connection_error_returns_none(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert await make_client(handler).get_analysis("AAPL") is None
