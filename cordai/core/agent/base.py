"""
Core Agent System

An ``Agent`` couples an LLM provider with a system instruction, a tool
registry and thread memory. ``Agent.stream`` runs the tool loop for one user
message and yields stream frames as the model produces them.
"""

import logging
from typing import AsyncGenerator, Dict, List, Optional

from ...providers.llm.base import LLMMessage, LLMProvider, LLMProviderError, LLMResponse
from ...types import Attachment, MessageRole
from ..frames import FinishFrame, StreamFrame, TextDeltaFrame
from .memory import ThreadMemory
from .tools import ToolExecutor, ToolRegistry

_FINISH_REASONS = {
    "end_turn": "stop",
    "stop": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
    "length": "length",
    "tool_use": "tool-calls",
    "tool_calls": "tool-calls",
}


def normalize_finish_reason(reason: Optional[str]) -> str:
    return _FINISH_REASONS.get((reason or "stop").lower(), "other")


class Agent:
    """
    LLM-backed agent with tool calling and per-thread memory.
    """

    def __init__(
        self,
        name: str,
        instructions: str,
        llm_provider: LLMProvider,
        tools: Optional[ToolRegistry] = None,
        memory: Optional[ThreadMemory] = None,
        description: Optional[str] = None,
        max_steps: int = 5,
        max_tokens: int = 4000,
        temperature: Optional[float] = 0.7,
        logger: Optional[logging.Logger] = None,
    ):
        self.name = name
        self.instructions = instructions
        self.description = description
        self.llm_provider = llm_provider
        self.tools = tools
        self.memory = memory
        self.max_steps = max_steps
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.logger = logger or logging.getLogger(__name__)
        self.tool_executor = ToolExecutor(tools, logger=self.logger) if tools else None

    def _build_llm_messages(
        self,
        thread_id: str,
        resource_id: Optional[str],
        content: str,
        attachments: List[Attachment],
    ) -> List[LLMMessage]:
        """Compose system instruction, replayed history and the new user turn."""

        messages: List[LLMMessage] = [LLMMessage(role="system", content=self.instructions)]

        if self.memory:
            for stored in self.memory.history(thread_id, resource_id):
                if stored.role == MessageRole.SYSTEM:
                    continue
                messages.append(LLMMessage(role=stored.role.value, content=stored.content))

        messages.append(LLMMessage(role="user", content=self._render_user_content(content, attachments)))
        return messages

    @staticmethod
    def _render_user_content(content: str, attachments: List[Attachment]) -> str:
        if not attachments:
            return content
        lines = [f"- {a.name or 'attachment'} ({a.content_type or 'unknown type'}): {a.url}" for a in attachments]
        return content + "\n\nAttachments:\n" + "\n".join(lines)

    async def stream(
        self,
        content: str,
        thread_id: str,
        resource_id: Optional[str] = None,
        attachments: Optional[List[Attachment]] = None,
    ) -> AsyncGenerator[StreamFrame, None]:
        """Run the tool loop for one user message.

        Text deltas are yielded in the order the model produces them; a single
        finish frame closes the turn. Provider errors propagate to the caller.
        """
        attachments = list(attachments or [])
        messages = self._build_llm_messages(thread_id, resource_id, content, attachments)
        tool_definitions = self.tools.get_definitions() if self.tools else None

        reply_parts: List[str] = []
        last_response: Optional[LLMResponse] = None
        tokens_used = 0

        for step in range(1, self.max_steps + 1):
            turn: Optional[LLMResponse] = None
            async for chunk in self.llm_provider.stream_with_tools(
                messages,
                tools=tool_definitions,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            ):
                if chunk.text:
                    reply_parts.append(chunk.text)
                    yield TextDeltaFrame(delta=chunk.text)
                if chunk.response is not None:
                    turn = chunk.response

            if turn is None:
                raise LLMProviderError("Model stream ended without a completed response")

            last_response = turn
            tokens_used += turn.tokens_used or 0

            if not turn.tool_calls or not self.tool_executor:
                break

            self.logger.info(
                "Agent %s step %d requested tools: %s",
                self.name,
                step,
                ", ".join(tc.name for tc in turn.tool_calls),
            )
            messages.append(LLMMessage(role="assistant", content=turn.content, tool_calls=turn.tool_calls))
            for result in await self.tool_executor.execute_parallel(turn.tool_calls):
                messages.append(LLMMessage(role="tool_result", tool_result=result))
        else:
            self.logger.warning("Agent %s reached max_steps=%d on thread %s", self.name, self.max_steps, thread_id)

        if self.memory:
            await self.memory.add_message(thread_id, resource_id, MessageRole.USER, content, attachments)
            await self.memory.add_message(thread_id, resource_id, MessageRole.ASSISTANT, "".join(reply_parts))

        usage: Optional[Dict[str, int]] = {"completionTokens": tokens_used} if tokens_used else None
        yield FinishFrame(
            finishReason=normalize_finish_reason(last_response.finish_reason if last_response else None),
            usage=usage,
        )
