import pytest

from cordai.core.agent.tools import GET_SOL_PRICE, GET_WALLET_BALANCE, ToolExecutor, build_solana_tools
from cordai.providers.llm.base import ToolCall


@pytest.fixture
def executor(price_provider, balance_provider):
    return ToolExecutor(build_solana_tools(price_provider, balance_provider))


def test_registry_exposes_both_lookups(price_provider, balance_provider):
    registry = build_solana_tools(price_provider, balance_provider)
    definitions = {d.name: d for d in registry.get_definitions()}

    assert set(definitions) == {GET_SOL_PRICE, GET_WALLET_BALANCE}
    assert definitions[GET_SOL_PRICE].parameters == []
    schema = definitions[GET_WALLET_BALANCE].to_json_schema()
    assert schema["required"] == ["address"]


@pytest.mark.asyncio
async def test_sol_price_tool_returns_market_data(executor):
    result = await executor.execute_single(ToolCall(id="1", name=GET_SOL_PRICE))

    assert result.error is None
    assert result.result == {"price": 150.25, "change24h": 2.5, "volume24h": 1_000_000, "marketCap": 70_000_000_000}


@pytest.mark.asyncio
async def test_wallet_balance_tool_trims_address(executor, balance_provider, wallet):
    result = await executor.execute_single(
        ToolCall(id="2", name=GET_WALLET_BALANCE, arguments={"address": f"  {wallet} "})
    )

    assert result.error is None
    assert result.result["lamports"] == 1_500_000_000
    assert balance_provider.calls == [wallet]


@pytest.mark.asyncio
async def test_tool_failures_become_error_results(price_provider, balance_provider):
    price_provider.fail = True
    executor = ToolExecutor(build_solana_tools(price_provider, balance_provider))

    price = await executor.execute_single(ToolCall(id="1", name=GET_SOL_PRICE))
    invalid = await executor.execute_single(ToolCall(id="2", name=GET_WALLET_BALANCE, arguments={"address": "nope"}))
    missing = await executor.execute_single(ToolCall(id="3", name=GET_WALLET_BALANCE, arguments={}))
    unknown = await executor.execute_single(ToolCall(id="4", name="swap-tokens"))

    assert price.error == "Failed to fetch SOL price. Please try again."
    assert invalid.error == "Invalid Solana wallet address"
    assert missing.error == f"Invalid arguments for {GET_WALLET_BALANCE}"
    assert unknown.error == "Unknown tool: swap-tokens"


@pytest.mark.asyncio
async def test_execute_parallel_preserves_order(executor, wallet):
    results = await executor.execute_parallel([
        ToolCall(id="a", name=GET_WALLET_BALANCE, arguments={"address": wallet}),
        ToolCall(id="b", name=GET_SOL_PRICE),
    ])

    assert [r.tool_call_id for r in results] == ["a", "b"]
