import httpx
import logging
from typing import Optional, Dict, Any
from nicegui import app
from pydantic import ValidationError

from schemas.analysis import AnalysisResponse

logger = logging.getLogger(__name__)


class AnalyticsClient:
    """
    Thin async client for the analytics service.

    Uses a shared `httpx.AsyncClient` stored in `app.state.analytics_httpx`
    (or an explicitly passed client) and exposes the pattern-analysis call
    consumed by the chart page.
    """
    PATTERNS_PATH = "/api/patterns/{symbol}"

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        """
        Bind this client to a shared AsyncClient.

        Args:
            client: AsyncClient to use; defaults to `app.state.analytics_httpx`.
        """
        self.client: httpx.AsyncClient = client if client is not None else app.state.analytics_httpx
        logger.info("AnalyticsClient initialized with shared httpx.AsyncClient")

    async def _request(
        self,
        method: str,
        url: str,
        headers: Optional[dict] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response | None:
        """
        Perform an HTTP request to the analytics service.

        Args:
            method: HTTP method (e.g., "GET").
            url: Path or absolute URL. If path-like, the client's base_url is used.
            headers: Extra headers (merged into the request).
            params: Query parameters.

        Returns:
            httpx.Response on success, or None if a timeout/HTTP error/other exception occurred.
        """
        hdrs: Dict[str, str] = {"Accept": "application/json"}
        if headers:
            hdrs.update({k: str(v) for k, v in headers.items()})

        try:
            resp = await self.client.request(method, url, headers=hdrs, params=params)
        except (httpx.ConnectTimeout, httpx.ReadTimeout):
            logger.warning(f"Analytics service timeout {url}")
            return None
        except httpx.HTTPError:
            logger.error(f"Analytics service HTTP error {url}")
            return None
        except Exception:
            logger.exception(f"Analytics service unexpected error {url}")
            return None

        return resp

    async def get_analysis(self, symbol: str) -> Optional[AnalysisResponse]:
        """
        Fetch candles, band/oscillator series and detected patterns for a symbol.

        Args:
            symbol: Instrument symbol (case-insensitive, surrounding spaces ignored).

        Returns:
            - `AnalysisResponse` on 200 with a valid payload.
            - None for an empty symbol, 404, timeout, invalid payload or other errors.
        """
        symbol = (symbol or "").strip().upper()
        if not symbol:
            logger.info("get_analysis: empty symbol, skipping request")
            return None

        logger.info(f"get_analysis: symbol={symbol!r}")
        resp = await self._request("GET", self.PATTERNS_PATH.format(symbol=symbol))
        if resp is None:
            logger.warning(f"get_analysis({symbol!r}): no response from service")
            return None
        if resp.status_code == 200:
            try:
                return AnalysisResponse.model_validate(resp.json())
            except ValidationError as ex:
                logger.error(f"get_analysis({symbol!r}): invalid payload: {ex.error_count()} errors")
                return None
            except ValueError:
                logger.exception(f"Failed to decode JSON for get_analysis({symbol})")
                return None
        if resp.status_code == 404:
            logger.info(f"get_analysis({symbol!r}): received 404 Not Found")
            return None
        logger.error(f"get_analysis({symbol}) unexpected status {resp.status_code}: {resp.text}")
        return None
