import logging
from typing import Any, Dict, Optional

import httpx

from ..config import Settings, settings as default_settings
from ..core.errors import PriceFetchError
from ..types import SolPrice
from .base import PriceProvider

_logger = logging.getLogger(__name__)


class CoingeckoProvider(PriceProvider):
    """Coingecko API provider for SOL market data"""

    name = "coingecko"
    timeout_s = 15

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        cfg = settings or default_settings
        self.api_key = cfg.coingecko_api_key
        self.base_url = cfg.coingecko_base_url.rstrip("/")
        self.timeout_s = cfg.request_timeout_seconds or self.timeout_s
        self._transport = transport

    def _build_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"accept": "application/json"}
        if self.api_key:
            headers["X-CG-Demo-API-Key"] = self.api_key
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport)

    async def ready(self) -> bool:
        return True  # API key is optional for basic tier

    async def health_check(self) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.base_url}/ping",
                    headers=self._build_headers(),
                )
                response.raise_for_status()
                return {"status": "healthy", "latency_ms": int(response.elapsed.total_seconds() * 1000)}
        except Exception as e:
            return {"status": "error", "reason": str(e)}

    async def get_sol_price(self) -> SolPrice:
        """Get SOL price with 24h change, volume and market cap.

        Raises:
            PriceFetchError: on a non-success status, a network failure or an
                unexpected payload. The raw upstream error is logged only.
        """
        params = {
            "ids": "solana",
            "vs_currencies": "usd",
            "include_24hr_change": "true",
            "include_24hr_vol": "true",
            "include_market_cap": "true",
        }

        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.base_url}/simple/price",
                    headers=self._build_headers(),
                    params=params,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            _logger.error(
                "Coingecko price request failed: %s %s",
                exc.response.status_code,
                exc.response.reason_phrase,
            )
            raise PriceFetchError(cause=exc) from exc
        except (httpx.HTTPError, ValueError) as exc:
            _logger.error("Coingecko price request error: %s", exc)
            raise PriceFetchError(cause=exc) from exc

        sol_data = data.get("solana") if isinstance(data, dict) else None
        if not isinstance(sol_data, dict) or sol_data.get("usd") is None:
            _logger.error("Unexpected Coingecko payload: %r", data)
            raise PriceFetchError()

        return SolPrice(
            price=sol_data["usd"],
            change24h=sol_data.get("usd_24h_change") or 0,
            volume24h=sol_data.get("usd_24h_vol") or 0,
            marketCap=sol_data.get("usd_market_cap") or 0,
        )
