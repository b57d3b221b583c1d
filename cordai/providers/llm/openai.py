"""Async LLM provider for OpenAI-compatible chat completion APIs."""

from __future__ import annotations

import json
import time
from typing import Any, AsyncGenerator, Dict, Iterable, List, Optional

import httpx

from .base import (
    LLMMessage,
    LLMProvider,
    LLMProviderAPIError,
    LLMProviderAuthError,
    LLMProviderError,
    LLMProviderRateLimitError,
    LLMResponse,
    LLMStreamChunk,
    ToolCall,
    ToolDefinition,
)


class OpenAIProvider(LLMProvider):
    """Chat completions provider with function calling over plain httpx."""

    supports_tools: bool = True

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        base_url: str | None = None,
        timeout: float = 40.0,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        self.base_url = (base_url or "https://api.openai.com/v1").rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._chat_completions_path = "/chat/completions"
        super().__init__(api_key, model, **kwargs)

    def _setup_client(self, **kwargs: Any) -> None:
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json, text/event-stream",
            },
        )

    def _raise_for_status(self, status: int, message: str, exc: Exception) -> None:
        if status in (401, 403):
            raise LLMProviderAuthError(f"Chat completions authentication failed: {message}") from exc
        if status == 429:
            raise LLMProviderRateLimitError("Chat completions rate limit exceeded") from exc
        raise LLMProviderAPIError(f"Chat completions API error ({status}): {message}") from exc

    async def _post(self, path: str, json: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(path, json=json)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            self._raise_for_status(exc.response.status_code, exc.response.text, exc)
        except httpx.RequestError as exc:
            raise LLMProviderAPIError(f"Chat completions request error: {exc}") from exc

    async def generate_response(
        self,
        messages: List[LLMMessage],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        tools: Optional[List[ToolDefinition]] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        start_time = time.time()

        payload = self._build_payload(
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            tools=tools,
            extra=kwargs,
        )

        data = await self._post(self._chat_completions_path, json=payload)

        choices = data.get("choices", [])
        if not choices:
            raise LLMProviderError("Chat completions response missing choices")

        choice = choices[0]
        message = choice.get("message") or {}
        content = self._normalize_content(message.get("content"))
        tool_calls = [
            self._parse_tool_call(raw.get("id"), raw.get("function") or {})
            for raw in message.get("tool_calls") or []
        ]

        usage = data.get("usage", {})
        return LLMResponse(
            content=content or None,
            tool_calls=tool_calls or None,
            tokens_used=usage.get("total_tokens"),
            model=self.model,
            finish_reason=choice.get("finish_reason"),
            response_time_ms=self._measure_time(start_time),
        )

    async def generate_streaming_response(
        self,
        messages: List[LLMMessage],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        **kwargs: Any,
    ) -> AsyncGenerator[str, None]:
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
        **kwargs: Any,
    ) -> AsyncGenerator[LLMStreamChunk, None]:
        start_time = time.time()
        payload = self._build_payload(
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            tools=tools,
            extra=kwargs,
            stream=True,
        )

        content_parts: List[str] = []
        # Tool call fragments arrive keyed by index and are concatenated
        pending_calls: Dict[int, Dict[str, Any]] = {}
        finish_reason: Optional[str] = None

        try:
            async with self._client.stream("POST", self._chat_completions_path, json=payload) as response:
                if response.status_code >= 400:
                    await response.aread()
                    try:
                        response.raise_for_status()
                    except httpx.HTTPStatusError as exc:
                        self._raise_for_status(exc.response.status_code, exc.response.text, exc)

                async for payload_json in self._iter_sse_payloads(response):
                    for choice in payload_json.get("choices") or []:
                        delta = choice.get("delta") or {}
                        text = self._normalize_content(delta.get("content"))
                        if text:
                            content_parts.append(text)
                            yield LLMStreamChunk(text=text)

                        for fragment in delta.get("tool_calls") or []:
                            slot = pending_calls.setdefault(
                                fragment.get("index", 0),
                                {"id": None, "name": "", "arguments": ""},
                            )
                            if fragment.get("id"):
                                slot["id"] = fragment["id"]
                            function = fragment.get("function") or {}
                            slot["name"] += function.get("name") or ""
                            slot["arguments"] += function.get("arguments") or ""

                        if choice.get("finish_reason"):
                            finish_reason = choice["finish_reason"]
        except httpx.RequestError as exc:
            raise LLMProviderAPIError(f"Chat completions request error: {exc}") from exc

        tool_calls = [
            self._parse_tool_call(slot["id"], {"name": slot["name"], "arguments": slot["arguments"]})
            for _, slot in sorted(pending_calls.items())
        ]
        yield LLMStreamChunk(response=LLMResponse(
            content="".join(content_parts) or None,
            tool_calls=tool_calls or None,
            model=self.model,
            finish_reason=finish_reason or "stop",
            response_time_ms=self._measure_time(start_time),
        ))

    async def _iter_sse_payloads(self, response: httpx.Response) -> AsyncGenerator[Dict[str, Any], None]:
        buffer = ""
        async for raw_line in response.aiter_lines():
            line = raw_line.strip()
            if not line or line.startswith(":") or line.startswith("event:"):
                continue

            data_line = line
            if line.startswith("data:"):
                data_line = line[len("data:"):].strip()
            if not data_line:
                continue
            if data_line == "[DONE]":
                break

            buffer += data_line
            try:
                payload_json = json.loads(buffer)
            except json.JSONDecodeError:
                # Wait for the rest of the chunk
                continue
            buffer = ""
            if isinstance(payload_json, dict):
                yield payload_json

    def count_tokens(self, text: str) -> int:
        # Approximate: 4 characters per token
        return max(1, len(text) // 4)

    async def health_check(self) -> Dict[str, Any]:
        try:
            response = await self.generate_response(
                messages=[LLMMessage(role="user", content="ping")],
                max_tokens=4,
                temperature=0.0,
            )
            return {
                "status": "healthy",
                "provider": "openai",
                "model": self.model,
                "response_preview": (response.content or "")[:32],
            }
        except LLMProviderRateLimitError:
            return {
                "status": "degraded",
                "provider": "openai",
                "model": self.model,
                "error": "rate_limited",
            }
        except Exception as exc:
            return {
                "status": "error",
                "provider": "openai",
                "model": self.model,
                "error": str(exc),
            }

    async def close(self) -> None:
        await self._client.aclose()

    def _build_payload(
        self,
        *,
        messages: List[LLMMessage],
        max_tokens: Optional[int],
        temperature: Optional[float],
        tools: Optional[List[ToolDefinition]] = None,
        extra: Optional[Dict[str, Any]] = None,
        stream: bool = False,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": list(self._convert_messages(messages)),
        }

        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if temperature is not None:
            payload["temperature"] = temperature
        if tools:
            payload["tools"] = [tool.to_openai_format() for tool in tools]

        if extra:
            for key, value in extra.items():
                if value is not None:
                    payload[key] = value

        if stream:
            payload["stream"] = True

        return payload

    def _convert_messages(self, messages: List[LLMMessage]) -> Iterable[Dict[str, Any]]:
        for msg in messages:
            if msg.role == "tool_result" and msg.tool_result:
                yield {
                    "role": "tool",
                    "tool_call_id": msg.tool_result.tool_call_id,
                    "content": msg.tool_result.content_text(),
                }
            elif msg.role == "assistant" and msg.tool_calls:
                yield {
                    "role": "assistant",
                    "content": msg.content,
                    "tool_calls": [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {"name": tc.name, "arguments": json.dumps(tc.arguments)},
                        }
                        for tc in msg.tool_calls
                    ],
                }
            else:
                yield {"role": msg.role, "content": msg.content or ""}

    def _parse_tool_call(self, call_id: Optional[str], function: Dict[str, Any]) -> ToolCall:
        raw_arguments = function.get("arguments") or "{}"
        try:
            arguments = json.loads(raw_arguments) if isinstance(raw_arguments, str) else dict(raw_arguments)
        except (json.JSONDecodeError, TypeError, ValueError):
            self.logger.warning("Discarding malformed tool arguments for %s", function.get("name"))
            arguments = {}
        if not isinstance(arguments, dict):
            arguments = {}
        return ToolCall(
            id=call_id or f"call_{function.get('name', 'tool')}",
            name=function.get("name") or "",
            arguments=arguments,
        )

    def _normalize_content(self, content: Any) -> str:
        if content is None:
            return ""
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts: List[str] = []
            for item in content:
                if isinstance(item, str):
                    parts.append(item)
                elif isinstance(item, dict) and item.get("text") is not None:
                    parts.append(str(item["text"]))
            return "".join(parts)
        return str(content)
