"""
Chat invocation strategies.

Both strategies return an async iterator of stream frames for one message.
The iterator is primed before it is handed back: a failure that happens
before the first frame is raised from ``invoke`` as ``AgentExecutionError``
instead of surfacing later inside the stream.
"""

import logging
from abc import ABC, abstractmethod
from typing import AsyncGenerator, AsyncIterator, List, Optional

from ..providers.llm.base import LLMMessage, LLMProvider
from ..types import Attachment
from .agent import Agent, AgentRegistry
from .errors import AgentExecutionError, AgentUnavailable, ConfigurationError, CordAiError
from .frames import FinishFrame, StreamFrame, TextDeltaFrame


async def _replay(first: StreamFrame, rest: AsyncGenerator[StreamFrame, None]) -> AsyncGenerator[StreamFrame, None]:
    try:
        yield first
        async for frame in rest:
            yield frame
    finally:
        await rest.aclose()


async def _empty() -> AsyncGenerator[StreamFrame, None]:
    return
    yield  # pragma: no cover


class ChatInvoker(ABC):
    """Base class for invocation strategies."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    def ensure_ready(self) -> None:
        """Raise a ``ConfigurationError`` when the strategy cannot serve requests."""
        pass

    @abstractmethod
    def _open_stream(
        self,
        content: str,
        thread_id: str,
        resource_id: Optional[str],
        attachments: List[Attachment],
    ) -> AsyncGenerator[StreamFrame, None]:
        """Start the frame stream for one message."""
        pass

    async def invoke(
        self,
        content: str,
        thread_id: str,
        resource_id: Optional[str] = None,
        attachments: Optional[List[Attachment]] = None,
    ) -> AsyncIterator[StreamFrame]:
        stream = self._open_stream(content, thread_id, resource_id, list(attachments or []))
        try:
            first = await stream.__anext__()
        except StopAsyncIteration:
            return _empty()
        except CordAiError:
            raise
        except Exception as exc:
            self.logger.error("Invocation failed before streaming on thread %s: %s", thread_id, exc, exc_info=True)
            raise AgentExecutionError(cause=exc) from exc
        return _replay(first, stream)


class AgentInvocationAdapter(ChatInvoker):
    """Invoke a registered, tool-enabled agent by logical name."""

    def __init__(self, registry: AgentRegistry, agent_name: str, logger: Optional[logging.Logger] = None):
        super().__init__(logger)
        self.registry = registry
        self.agent_name = agent_name

    def resolve(self) -> Agent:
        agent = self.registry.get(self.agent_name)
        if agent is None:
            raise AgentUnavailable(self.agent_name)
        return agent

    def ensure_ready(self) -> None:
        self.resolve()

    def _open_stream(self, content, thread_id, resource_id, attachments):
        agent = self.resolve()
        return agent.stream(content, thread_id=thread_id, resource_id=resource_id, attachments=attachments)


class DirectModelInvoker(ChatInvoker):
    """Stream a plain model completion with the system instruction and no tools."""

    def __init__(
        self,
        llm_provider: Optional[LLMProvider],
        instructions: str,
        max_tokens: int = 4000,
        temperature: Optional[float] = 0.7,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(logger)
        self.llm_provider = llm_provider
        self.instructions = instructions
        self.max_tokens = max_tokens
        self.temperature = temperature

    def ensure_ready(self) -> None:
        if self.llm_provider is None:
            raise ConfigurationError("Model not configured")

    async def _open_stream(self, content, thread_id, resource_id, attachments):
        self.ensure_ready()
        messages = [
            LLMMessage(role="system", content=self.instructions),
            LLMMessage(role="user", content=Agent._render_user_content(content, attachments)),
        ]
        async for delta in self.llm_provider.generate_streaming_response(
            messages,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        ):
            if delta:
                yield TextDeltaFrame(delta=delta)
        yield FinishFrame()
