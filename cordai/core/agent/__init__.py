from .base import Agent, normalize_finish_reason
from .cordai import CORDAI_INSTRUCTIONS, build_cordai_agent
from .memory import ThreadMemory, ThreadMessage
from .registry import AgentRegistry
from .tools import GET_SOL_PRICE, GET_WALLET_BALANCE, ToolExecutor, ToolRegistry, build_solana_tools

__all__ = [
    "Agent",
    "AgentRegistry",
    "CORDAI_INSTRUCTIONS",
    "GET_SOL_PRICE",
    "GET_WALLET_BALANCE",
    "ThreadMemory",
    "ThreadMessage",
    "ToolExecutor",
    "ToolRegistry",
    "build_cordai_agent",
    "build_solana_tools",
    "normalize_finish_reason",
]
