"""
Conversation registry.

Holds the sidebar summaries of each user's conversations in process memory.
New conversations go to the front of the list; updates keep their position.
There is no locking: concurrent upserts for the same user resolve as last
writer wins.
"""

from datetime import datetime, timezone
import logging
from typing import Dict, List, Optional

from ..types import Conversation
from .errors import MissingFields, MissingUserId


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationStore:
    """Per-user ordered conversation summaries."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._by_user: Dict[str, List[Conversation]] = {}

    def list(self, user_id: Optional[str]) -> List[Conversation]:
        if not user_id:
            raise MissingUserId()
        return list(self._by_user.get(user_id, []))

    def upsert(self, user_id: Optional[str], conversation: Optional[Conversation]) -> Conversation:
        """Insert a new summary at the front, or merge into the existing one.

        Only fields the caller actually provided overwrite stored values.
        ``lastMessageAt`` is refreshed on every upsert.
        """
        if not user_id or conversation is None:
            raise MissingFields("User ID and conversation required")

        now = _utcnow()
        conversations = self._by_user.setdefault(user_id, [])

        for index, existing in enumerate(conversations):
            if existing.id == conversation.id:
                updates = conversation.model_dump(exclude_unset=True)
                updates["last_message_at"] = now
                merged = existing.model_copy(update=updates)
                conversations[index] = merged
                self.logger.debug("Updated conversation %s for user %s", conversation.id, user_id)
                return merged

        created = conversation.model_copy(update={"last_message_at": now, "last_read_at": now})
        conversations.insert(0, created)
        self.logger.debug("Created conversation %s for user %s", conversation.id, user_id)
        return created

    def remove(self, user_id: Optional[str], conversation_id: Optional[str]) -> None:
        if not user_id or not conversation_id:
            raise MissingFields("User ID and conversation ID required")

        conversations = self._by_user.get(user_id)
        if not conversations:
            return
        self._by_user[user_id] = [c for c in conversations if c.id != conversation_id]
