from .requests import Attachment, ChatMessage, ChatRequest, MessageRole
from .conversations import Conversation, UpsertConversationRequest, DeleteConversationRequest
from .market import SolPrice, WalletBalance

__all__ = [
    "Attachment",
    "ChatMessage",
    "ChatRequest",
    "MessageRole",
    "Conversation",
    "UpsertConversationRequest",
    "DeleteConversationRequest",
    "SolPrice",
    "WalletBalance",
]
