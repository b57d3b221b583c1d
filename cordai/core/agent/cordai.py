"""The CordAi Solana assistant."""

import logging
from typing import Optional

from ...config import Settings
from ...providers.base import BalanceProvider, PriceProvider
from ...providers.llm.base import LLMProvider
from .base import Agent
from .memory import ThreadMemory
from .tools import build_solana_tools

CORDAI_AGENT_NAME = "CordAi Agent"

CORDAI_DESCRIPTION = "An AI agent specialized in Solana blockchain operations and information."

CORDAI_INSTRUCTIONS = """You are CordAi, a helpful AI assistant specialized in Solana blockchain.

Your capabilities:
- Get current SOL price and market data
- Check wallet balances for any Solana address
- Provide information about Solana blockchain
- Help users understand crypto concepts

Guidelines:
- Be concise and helpful
- Use tools when users ask about prices or balances
- Format numbers clearly (e.g., "$123.45" for prices, "1.234 SOL" for balances)
- When you see "[Context: User's connected wallet address is <address>]" in a message, extract that address and use it with the get-wallet-balance tool
- If a user provides a specific wallet address in their message, use that address instead
- If a user asks about SOL price, use the get-sol-price tool
- If a tool returns an error, explain briefly that the data is unavailable right now and suggest trying again
- Be friendly and conversational
- Don't mention the [Context: ...] part in your response, just use the address

Example interactions:
- "What's the price of SOL?" -> Use get-sol-price tool
- "Check balance of 7Abc..." -> Use get-wallet-balance tool with "7Abc..."
- "What's my balance?\\n[Context: User's connected wallet address is ABC123]" -> Use get-wallet-balance tool with "ABC123\""""


def build_cordai_agent(
    settings: Settings,
    llm_provider: LLMProvider,
    price_provider: PriceProvider,
    balance_provider: BalanceProvider,
    memory: Optional[ThreadMemory] = None,
    logger: Optional[logging.Logger] = None,
) -> Agent:
    logger = logger or logging.getLogger(__name__)
    return Agent(
        name=CORDAI_AGENT_NAME,
        description=CORDAI_DESCRIPTION,
        instructions=CORDAI_INSTRUCTIONS,
        llm_provider=llm_provider,
        tools=build_solana_tools(price_provider, balance_provider, logger=logger),
        memory=memory,
        max_steps=settings.agent_max_steps,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        logger=logger,
    )
