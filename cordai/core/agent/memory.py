"""
Thread Memory

Per-thread message history replayed to the model on every turn. Threads are
scoped to a resource id (the caller's wallet address). Storage is an
in-process dict: history does not survive a restart.
"""

from datetime import datetime, timezone
import logging
import uuid
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ...types import Attachment, MessageRole


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ThreadMessage(BaseModel):
    """One persisted turn of a thread"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: MessageRole
    content: str
    attachments: List[Attachment] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)


class ThreadContext(BaseModel):
    thread_id: str
    resource_id: Optional[str] = None
    messages: List[ThreadMessage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


ThreadKey = Tuple[str, str]


class ThreadMemory:
    """Volatile store of thread histories.

    Threads are keyed by ``(resource_id, thread_id)``: the same thread id used
    by another wallet is a different thread and never sees this history.
    Once ``max_threads`` is reached the least recently updated thread is
    evicted.
    """

    def __init__(
        self,
        max_history_messages: int = 40,
        max_threads: int = 1000,
        logger: Optional[logging.Logger] = None,
    ):
        if max_history_messages < 1:
            raise ValueError("max_history_messages must be at least 1")
        if max_threads < 1:
            raise ValueError("max_threads must be at least 1")
        self.max_history_messages = max_history_messages
        self.max_threads = max_threads
        self.logger = logger or logging.getLogger(__name__)
        self._threads: Dict[ThreadKey, ThreadContext] = {}

    @staticmethod
    def _key(thread_id: str, resource_id: Optional[str]) -> ThreadKey:
        return (resource_id or "", thread_id)

    def get(self, thread_id: str, resource_id: Optional[str] = None) -> Optional[ThreadContext]:
        return self._threads.get(self._key(thread_id, resource_id))

    def messages(self, thread_id: str, resource_id: Optional[str] = None) -> List[ThreadMessage]:
        """Full stored history of a thread, oldest first."""
        context = self.get(thread_id, resource_id)
        return list(context.messages) if context else []

    def history(self, thread_id: str, resource_id: Optional[str] = None) -> List[ThreadMessage]:
        """The most recent messages, bounded for replay to the model."""
        return self.messages(thread_id, resource_id)[-self.max_history_messages:]

    async def add_message(
        self,
        thread_id: str,
        resource_id: Optional[str],
        role: MessageRole,
        content: str,
        attachments: Optional[List[Attachment]] = None,
    ) -> ThreadMessage:
        key = self._key(thread_id, resource_id)
        context = self._threads.pop(key, None)
        if context is None:
            context = ThreadContext(thread_id=thread_id, resource_id=resource_id)
            self._evict_if_full()

        message = ThreadMessage(role=role, content=content, attachments=list(attachments or []))
        context.messages.append(message)
        context.updated_at = message.created_at
        # Re-insert so dict order tracks recency
        self._threads[key] = context
        return message

    def _evict_if_full(self) -> None:
        while len(self._threads) >= self.max_threads:
            oldest = next(iter(self._threads))
            del self._threads[oldest]
            self.logger.info("Evicted thread %s of resource %s", oldest[1], oldest[0] or "-")
