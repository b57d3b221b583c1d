from typing import List, Dict, Any, Optional, AsyncGenerator
import time

import anthropic
from anthropic import AsyncAnthropic

from .base import (
    LLMProvider, LLMMessage, LLMResponse, LLMStreamChunk,
    LLMProviderError, LLMProviderAPIError, LLMProviderAuthError, LLMProviderRateLimitError,
    ToolDefinition, ToolCall,
)


class AnthropicProvider(LLMProvider):
    """Anthropic Claude LLM Provider implementation with native tool calling support"""

    supports_tools: bool = True

    def __init__(self, api_key: str, model: Optional[str] = None, **kwargs):
        if not model:
            raise ValueError("AnthropicProvider requires a model to be specified")

        super().__init__(api_key, model, **kwargs)

    def _setup_client(self, **kwargs) -> None:
        """Initialize the Anthropic client"""
        try:
            self.client = AsyncAnthropic(api_key=self.api_key)
        except Exception as e:
            self.logger.error(f"Failed to initialize Anthropic client: {e}")
            raise LLMProviderAuthError(f"Failed to initialize Anthropic client: {e}")

    def _convert_message_to_anthropic(self, msg: LLMMessage) -> Optional[Dict[str, Any]]:
        """Convert a single LLMMessage to Anthropic format"""
        if msg.role == "system":
            return None  # System messages handled separately

        if msg.role == "tool_result" and msg.tool_result:
            return {
                "role": "user",
                "content": [msg.tool_result.to_anthropic_format()]
            }

        if msg.role == "assistant" and msg.tool_calls:
            content = []
            if msg.content:
                content.append({"type": "text", "text": msg.content})
            for tc in msg.tool_calls:
                content.append({
                    "type": "tool_use",
                    "id": tc.id,
                    "name": tc.name,
                    "input": tc.arguments
                })
            return {"role": "assistant", "content": content}

        return {
            "role": msg.role,
            "content": msg.content or ""
        }

    def _build_request_params(
        self,
        messages: List[LLMMessage],
        max_tokens: Optional[int],
        temperature: Optional[float],
        tools: Optional[List[ToolDefinition]],
        extra: Dict[str, Any],
    ) -> Dict[str, Any]:
        anthropic_messages: List[Dict[str, Any]] = []
        system_parts: List[str] = []

        for msg in messages:
            if msg.role == "system":
                if msg.content:
                    system_parts.append(msg.content)
                continue
            converted = self._convert_message_to_anthropic(msg)
            if not converted:
                continue
            # Results for one assistant turn must share a single user message
            previous = anthropic_messages[-1] if anthropic_messages else None
            if (
                msg.role == "tool_result"
                and previous is not None
                and previous["role"] == "user"
                and isinstance(previous["content"], list)
                and all(block.get("type") == "tool_result" for block in previous["content"])
            ):
                previous["content"].extend(converted["content"])
            else:
                anthropic_messages.append(converted)

        request_params: Dict[str, Any] = {
            "model": self.model,
            "messages": anthropic_messages,
            "max_tokens": max_tokens or 4000,
        }

        if system_parts:
            request_params["system"] = "\n\n".join(system_parts)

        if temperature is not None:
            request_params["temperature"] = temperature

        if tools:
            request_params["tools"] = [t.to_anthropic_format() for t in tools]

        extra.pop('tools', None)
        request_params.update(extra)
        return request_params

    def _to_llm_response(self, response: Any, start_time: float) -> LLMResponse:
        content = ""
        tool_calls = []

        for block in getattr(response, "content", None) or []:
            block_type = getattr(block, "type", None)
            if block_type == "text":
                content += block.text
            elif block_type == "tool_use":
                tool_calls.append(ToolCall(
                    id=block.id,
                    name=block.name,
                    arguments=block.input if isinstance(getattr(block, "input", None), dict) else {}
                ))

        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=content if content else None,
            tool_calls=tool_calls if tool_calls else None,
            tokens_used=usage.output_tokens if usage is not None else None,
            model=self.model,
            finish_reason=getattr(response, "stop_reason", None),
            response_time_ms=self._measure_time(start_time)
        )

    async def generate_response(
        self,
        messages: List[LLMMessage],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        tools: Optional[List[ToolDefinition]] = None,
        **kwargs
    ) -> LLMResponse:
        """Generate a response from Claude with optional tool calling"""
        start_time = time.time()

        try:
            request_params = self._build_request_params(messages, max_tokens, temperature, tools, kwargs)
            response = await self.client.messages.create(**request_params)
            return self._to_llm_response(response, start_time)

        except anthropic.AuthenticationError as e:
            await self._handle_error(LLMProviderAuthError(f"Authentication failed: {e}"), "generate_response")
        except anthropic.RateLimitError as e:
            await self._handle_error(LLMProviderRateLimitError(f"Rate limit exceeded: {e}"), "generate_response")
        except anthropic.APIError as e:
            await self._handle_error(LLMProviderAPIError(f"API error: {e}"), "generate_response")
        except Exception as e:
            await self._handle_error(LLMProviderError(f"Unexpected error: {e}"), "generate_response")

    async def generate_streaming_response(
        self,
        messages: List[LLMMessage],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        **kwargs
    ) -> AsyncGenerator[str, None]:
        """Generate a streaming text response from Claude"""
        async for chunk in self.stream_with_tools(
            messages,
            tools=None,
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs,
        ):
            if chunk.text:
                yield chunk.text

    async def stream_with_tools(
        self,
        messages: List[LLMMessage],
        tools: Optional[List[ToolDefinition]] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        **kwargs
    ) -> AsyncGenerator[LLMStreamChunk, None]:
        """Stream text deltas as they arrive, then the final message with tool calls."""
        start_time = time.time()

        try:
            request_params = self._build_request_params(messages, max_tokens, temperature, tools, kwargs)

            async with self.client.messages.stream(**request_params) as stream:
                async for event in stream:
                    if getattr(event, "type", None) != "content_block_delta":
                        continue
                    text = getattr(event.delta, "text", None)
                    if text:
                        yield LLMStreamChunk(text=text)
                final_message = await stream.get_final_message()

            yield LLMStreamChunk(response=self._to_llm_response(final_message, start_time))

        except anthropic.AuthenticationError as e:
            await self._handle_error(LLMProviderAuthError(f"Authentication failed: {e}"), "stream_with_tools")
        except anthropic.RateLimitError as e:
            await self._handle_error(LLMProviderRateLimitError(f"Rate limit exceeded: {e}"), "stream_with_tools")
        except anthropic.APIError as e:
            await self._handle_error(LLMProviderAPIError(f"API error: {e}"), "stream_with_tools")
        except LLMProviderError:
            raise
        except Exception as e:
            await self._handle_error(LLMProviderError(f"Unexpected error: {e}"), "stream_with_tools")

    def count_tokens(self, text: str) -> int:
        """Estimate token count for text"""
        # Rough approximation: ~4 characters per token
        return len(text) // 4

    async def health_check(self) -> Dict[str, Any]:
        """Check if Anthropic API is healthy"""
        try:
            start_time = time.time()

            response = await self.generate_response(
                messages=[LLMMessage(role="user", content="Hello")],
                max_tokens=10,
                temperature=0
            )

            return {
                "status": "healthy",
                "provider": "anthropic",
                "model": self.model,
                "response_time_ms": self._measure_time(start_time),
                "test_response_length": len(response.content or ""),
            }

        except LLMProviderAuthError:
            return {
                "status": "error",
                "provider": "anthropic",
                "model": self.model,
                "error": "Authentication failed"
            }
        except LLMProviderRateLimitError:
            return {
                "status": "error",
                "provider": "anthropic",
                "model": self.model,
                "error": "Rate limit exceeded"
            }
        except Exception as e:
            return {
                "status": "error",
                "provider": "anthropic",
                "model": self.model,
                "error": str(e)
            }
