"""Solana JSON-RPC balance provider."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import httpx

from ..config import Settings, settings as default_settings
from ..core.errors import BalanceFetchError, InvalidAddress
from ..services.address import is_valid_solana_address
from ..types import WalletBalance
from .base import BalanceProvider

LAMPORTS_PER_SOL = 1_000_000_000

_logger = logging.getLogger(__name__)


class SolanaRpcError(Exception):
    """The RPC node answered with a JSON-RPC error object."""


class SolanaProvider(BalanceProvider):
    """Fetch native SOL balances from a Solana RPC node."""

    name = "solana-rpc"
    timeout_s = 20

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        cfg = settings or default_settings
        self.rpc_url = cfg.solana_rpc_url
        self.commitment = cfg.solana_commitment
        self.timeout_s = cfg.request_timeout_seconds or self.timeout_s
        self._transport = transport

    async def ready(self) -> bool:
        return bool(self.rpc_url)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "RPC URL not configured"}
        try:
            result = await self._rpc_call("getHealth", [])
            return {"status": "healthy" if result == "ok" else "degraded"}
        except Exception as exc:
            return {"status": "error", "reason": str(exc)}

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }

        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            response = await client.post(
                self.rpc_url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict):
            raise SolanaRpcError("Unexpected response from Solana RPC")
        if "error" in data:
            error = data["error"]
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise SolanaRpcError(f"RPC error: {message}")
        return data.get("result")

    async def get_native_balance(self, address: str) -> WalletBalance:
        """Return the SOL balance of ``address``.

        Raises:
            InvalidAddress: before any network call when the address is not a
                well-formed base58 public key.
            BalanceFetchError: when the RPC call fails.
        """
        if not is_valid_solana_address(address):
            raise InvalidAddress(address)

        try:
            result = await self._rpc_call("getBalance", [address, {"commitment": self.commitment}])
            lamports = int((result or {}).get("value", 0))
        except (httpx.HTTPError, SolanaRpcError, ValueError, TypeError, AttributeError) as exc:
            _logger.error("Solana balance lookup failed for %s: %s", address, exc)
            raise BalanceFetchError(cause=exc) from exc

        balance = Decimal(lamports) / Decimal(LAMPORTS_PER_SOL)
        return WalletBalance(address=address, balance=float(balance), lamports=lamports)
