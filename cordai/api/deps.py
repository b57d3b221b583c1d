"""Accessors for the collaborators ``create_app`` puts on ``app.state``."""

from fastapi import Request

from ..core.agent import ThreadMemory
from ..core.conversations import ConversationStore
from ..core.relay import ChatRelay
from ..providers.base import BalanceProvider, PriceProvider


def get_relay(request: Request) -> ChatRelay:
    return request.app.state.relay


def get_conversation_store(request: Request) -> ConversationStore:
    return request.app.state.conversations


def get_thread_memory(request: Request) -> ThreadMemory:
    return request.app.state.memory


def get_price_provider(request: Request) -> PriceProvider:
    return request.app.state.price_provider


def get_balance_provider(request: Request) -> BalanceProvider:
    return request.app.state.balance_provider
