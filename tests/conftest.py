"""Shared fakes for the chat, agent and API tests."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from cordai.config import Settings
from cordai.core.errors import BalanceFetchError, InvalidAddress, PriceFetchError
from cordai.providers.base import BalanceProvider, PriceProvider
from cordai.providers.llm.base import LLMMessage, LLMProvider, LLMResponse, LLMStreamChunk, ToolCall
from cordai.services.address import is_valid_solana_address
from cordai.types import SolPrice, WalletBalance

WALLET = "So11111111111111111111111111111111111111112"


class ScriptedLLMProvider(LLMProvider):
    """LLM provider that replays scripted turns.

    Each turn is a dict with ``text`` (list of deltas), optional ``tool_calls``
    and optional ``error`` (raised after the deltas are streamed).
    """

    supports_tools = True

    def __init__(self, turns: Optional[List[Dict[str, Any]]] = None, delay: float = 0.0):
        self.turns = list(turns or [])
        self.delay = delay
        self.calls: List[List[LLMMessage]] = []
        super().__init__(api_key="test-key", model="scripted-model")

    def _setup_client(self, **kwargs) -> None:
        pass

    def _next_turn(self) -> Dict[str, Any]:
        if not self.turns:
            return {"text": ["ok"]}
        return self.turns.pop(0)

    async def generate_response(self, messages, max_tokens=None, temperature=None, tools=None, **kwargs):
        self.calls.append(list(messages))
        turn = self._next_turn()
        return LLMResponse(content="".join(turn.get("text", [])), model=self.model, finish_reason="end_turn")

    async def generate_streaming_response(self, messages, max_tokens=None, temperature=None, **kwargs):
        async for chunk in self.stream_with_tools(messages, tools=None, max_tokens=max_tokens, temperature=temperature):
            if chunk.text:
                yield chunk.text

    async def stream_with_tools(self, messages, tools=None, max_tokens=None, temperature=None, **kwargs):
        self.calls.append(list(messages))
        turn = self._next_turn()
        for delta in turn.get("text", []):
            if self.delay:
                await asyncio.sleep(self.delay)
            yield LLMStreamChunk(text=delta)
        if turn.get("error"):
            raise turn["error"]
        tool_calls = [ToolCall(**tc) for tc in turn.get("tool_calls", [])] or None
        yield LLMStreamChunk(response=LLMResponse(
            content="".join(turn.get("text", [])) or None,
            tool_calls=tool_calls,
            tokens_used=turn.get("tokens", 10),
            model=self.model,
            finish_reason="tool_use" if tool_calls else "end_turn",
        ))

    def count_tokens(self, text: str) -> int:
        return len(text.split())

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy"}


class StubPriceProvider(PriceProvider):
    name = "stub-price"

    def __init__(self, price: Optional[SolPrice] = None, fail: bool = False):
        self.price = price or SolPrice(price=150.25, change24h=2.5, volume24h=1_000_000, marketCap=70_000_000_000)
        self.fail = fail
        self.calls = 0

    async def ready(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy"}

    async def get_sol_price(self) -> SolPrice:
        self.calls += 1
        if self.fail:
            raise PriceFetchError()
        return self.price


class StubBalanceProvider(BalanceProvider):
    name = "stub-balance"

    def __init__(self, lamports: int = 1_500_000_000, fail: bool = False):
        self.lamports = lamports
        self.fail = fail
        self.calls: List[str] = []

    async def ready(self) -> bool:
        return True

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy"}

    async def get_native_balance(self, address: str) -> WalletBalance:
        self.calls.append(address)
        if not is_valid_solana_address(address):
            raise InvalidAddress(address)
        if self.fail:
            raise BalanceFetchError()
        return WalletBalance(address=address, balance=self.lamports / 1_000_000_000, lamports=self.lamports)


@pytest.fixture
def wallet() -> str:
    return WALLET


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        anthropic_api_key="",
        openai_api_key="",
        coingecko_api_key="",
        solana_rpc_url="https://rpc.test",
        chat_timeout_seconds=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def llm_factory():
    return ScriptedLLMProvider


@pytest.fixture
def price_provider() -> StubPriceProvider:
    return StubPriceProvider()


@pytest.fixture
def balance_provider() -> StubBalanceProvider:
    return StubBalanceProvider()
