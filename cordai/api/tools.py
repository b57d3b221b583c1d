from fastapi import APIRouter, Depends, Query

from ..providers.base import BalanceProvider, PriceProvider
from ..types import SolPrice, WalletBalance
from .deps import get_balance_provider, get_price_provider

router = APIRouter(prefix="/tools")


@router.get("/sol-price")
async def sol_price(provider: PriceProvider = Depends(get_price_provider)) -> SolPrice:
    """Current SOL price in USD with 24h market stats"""
    return await provider.get_sol_price()


@router.get("/wallet-balance")
async def wallet_balance(
    address: str = Query(default="", description="Solana wallet address"),
    provider: BalanceProvider = Depends(get_balance_provider),
) -> WalletBalance:
    """SOL balance of a wallet"""
    return await provider.get_native_balance(address.strip())
