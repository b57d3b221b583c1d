"""
Tool Registry and Executor for LLM-driven tool calling.

The CordAi agent is offered two lookup tools: ``get-sol-price`` and
``get-wallet-balance``. Tool failures never abort the agent turn; they are
returned to the model as error results so it can answer in natural language.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Dict, List, Optional

from ...providers.base import BalanceProvider, PriceProvider
from ...providers.llm.base import ToolDefinition, ToolParameter, ToolParameterType, ToolCall, ToolResult
from ..errors import CordAiError

GET_SOL_PRICE = "get-sol-price"
GET_WALLET_BALANCE = "get-wallet-balance"

_GENERIC_TOOL_ERROR = "The tool failed to complete. Please try again."


@dataclass
class RegisteredTool:
    """A tool registered in the registry with its definition and handler."""
    definition: ToolDefinition
    handler: Callable[..., Coroutine[Any, Any, Any]]


class ToolRegistry:
    """
    Registry of available tools that the LLM can call.

    Each tool has a definition (name, description, parameters) and a handler function.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._tools: Dict[str, RegisteredTool] = {}
        self.logger = logger or logging.getLogger(__name__)

    def register(
        self,
        name: str,
        definition: ToolDefinition,
        handler: Callable[..., Coroutine[Any, Any, Any]],
    ) -> None:
        """Register a tool with its definition and handler."""
        self._tools[name] = RegisteredTool(definition=definition, handler=handler)

    def get_definitions(self) -> List[ToolDefinition]:
        """Get all tool definitions for passing to the LLM."""
        return [tool.definition for tool in self._tools.values()]

    def get_tool(self, name: str) -> Optional[RegisteredTool]:
        return self._tools.get(name)

    def has_tool(self, name: str) -> bool:
        return name in self._tools


def build_solana_tools(
    price_provider: PriceProvider,
    balance_provider: BalanceProvider,
    logger: Optional[logging.Logger] = None,
) -> ToolRegistry:
    """Registry holding the SOL price and wallet balance lookups."""

    registry = ToolRegistry(logger=logger)

    async def get_sol_price() -> Dict[str, Any]:
        price = await price_provider.get_sol_price()
        return price.model_dump()

    async def get_wallet_balance(address: str) -> Dict[str, Any]:
        balance = await balance_provider.get_native_balance(address.strip())
        return balance.model_dump()

    registry.register(
        GET_SOL_PRICE,
        ToolDefinition(
            name=GET_SOL_PRICE,
            description=(
                "Get the current price of SOL (Solana) in USD together with the 24h price "
                "change percentage, 24h trading volume and market capitalization."
            ),
        ),
        get_sol_price,
    )

    registry.register(
        GET_WALLET_BALANCE,
        ToolDefinition(
            name=GET_WALLET_BALANCE,
            description=(
                "Get the SOL balance of a Solana wallet address. Returns the address, "
                "the balance in SOL and the balance in lamports."
            ),
            parameters=[
                ToolParameter(
                    name="address",
                    type=ToolParameterType.STRING,
                    description="Solana wallet address (base58)",
                    required=True,
                ),
            ],
        ),
        get_wallet_balance,
    )

    return registry


class ToolExecutor:
    """
    Executes tool calls requested by the LLM.

    Supports parallel execution of independent tool calls.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self.logger = logger or logging.getLogger(__name__)

    async def execute_single(self, tool_call: ToolCall) -> ToolResult:
        """Execute a single tool call and return the result."""
        tool = self.registry.get_tool(tool_call.name)

        if not tool:
            return ToolResult(
                tool_call_id=tool_call.id,
                result=None,
                error=f"Unknown tool: {tool_call.name}",
            )

        try:
            result = await tool.handler(**tool_call.arguments)
            return ToolResult(tool_call_id=tool_call.id, result=result)
        except CordAiError as e:
            self.logger.warning("Tool %s failed: %s", tool_call.name, e.cause or e)
            return ToolResult(tool_call_id=tool_call.id, result=None, error=e.public_message)
        except TypeError as e:
            self.logger.warning("Tool %s called with bad arguments %s: %s", tool_call.name, tool_call.arguments, e)
            return ToolResult(
                tool_call_id=tool_call.id,
                result=None,
                error=f"Invalid arguments for {tool_call.name}",
            )
        except Exception as e:
            self.logger.error(f"Tool execution error for {tool_call.name}: {e}", exc_info=True)
            return ToolResult(tool_call_id=tool_call.id, result=None, error=_GENERIC_TOOL_ERROR)

    async def execute_parallel(self, tool_calls: List[ToolCall]) -> List[ToolResult]:
        """Execute multiple tool calls in parallel."""
        if not tool_calls:
            return []

        return list(await asyncio.gather(*(self.execute_single(tc) for tc in tool_calls)))
