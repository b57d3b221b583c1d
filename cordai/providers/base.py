from abc import ABC, abstractmethod
from typing import Any, Dict

from ..types import SolPrice, WalletBalance


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class BalanceProvider(Provider):
    """Provider for native chain balances"""

    @abstractmethod
    async def get_native_balance(self, address: str) -> WalletBalance:
        """Get the native token balance of an account"""
        pass


class PriceProvider(Provider):
    """Provider for asset price data"""

    @abstractmethod
    async def get_sol_price(self) -> SolPrice:
        """Get the current SOL price and 24h market stats"""
        pass
