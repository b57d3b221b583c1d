"""
Streaming chat relay.

Validates an incoming chat request, then pumps frames from the configured
invocation strategy to the HTTP response. Once the stream is open every
failure is logged and downgraded to a single generic error frame, so the
client always receives a terminated stream.
"""

import asyncio
import contextlib
import logging
import time
import uuid
from typing import Any, AsyncGenerator, AsyncIterator, Awaitable, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ..types import ChatMessage, ChatRequest
from .enricher import enrich_message
from .errors import MissingUserId, RelayTimeout, ValidationError
from .frames import ErrorFrame, FinishFrame, FrameEncoder, StreamFrame
from .invocation import ChatInvoker

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request. Please try again."

T = TypeVar("T")


class ChatRelay:
    """Relay one chat message from the HTTP layer to an invocation strategy."""

    def __init__(
        self,
        invoker: ChatInvoker,
        encoder: FrameEncoder,
        timeout_seconds: float = 120.0,
        require_user_id: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self.invoker = invoker
        self.encoder = encoder
        self.timeout_seconds = timeout_seconds
        self.require_user_id = require_user_id
        self.logger = logger or logging.getLogger(__name__)

    def validate(self, body: Any) -> ChatRequest:
        """Build a ``ChatRequest`` from a decoded JSON body.

        Checks run in order: message present, message well formed, user id
        present (when required). A missing conversation id gets a fresh one.
        """
        if not isinstance(body, dict) or not body.get("message"):
            raise ValidationError("No message found")

        try:
            message = ChatMessage.model_validate(body["message"])
        except PydanticValidationError as exc:
            self.logger.info("Rejected malformed chat message: %s", exc.errors(include_url=False))
            raise ValidationError("Invalid message") from exc

        user_id = body.get("userId")
        if user_id is not None and not isinstance(user_id, str):
            raise ValidationError("Invalid userId")
        if self.require_user_id and not user_id:
            raise MissingUserId()

        conversation_id = body.get("id")
        if not isinstance(conversation_id, str) or not conversation_id:
            conversation_id = str(uuid.uuid4())

        return ChatRequest(id=conversation_id, message=message, user_id=user_id or None)

    def ensure_ready(self) -> None:
        self.invoker.ensure_ready()

    async def _before_deadline(self, awaitable: Awaitable[T], deadline: float) -> T:
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise RelayTimeout()
        try:
            return await asyncio.wait_for(awaitable, timeout=remaining)
        except asyncio.TimeoutError as exc:
            raise RelayTimeout(cause=exc) from exc

    async def relay_frames(self, request: ChatRequest) -> AsyncGenerator[StreamFrame, None]:
        """Frames for one request, in upstream order, ending in a terminal frame."""

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_seconds
        started = time.perf_counter()
        thread_id = request.id
        upstream: Optional[AsyncIterator[StreamFrame]] = None
        frame_count = 0
        finished = False

        try:
            content = enrich_message(request.message.content, request.user_id)
            upstream = await self._before_deadline(
                self.invoker.invoke(
                    content,
                    thread_id=thread_id,
                    resource_id=request.user_id,
                    attachments=request.message.attachments,
                ),
                deadline,
            )

            while True:
                try:
                    frame = await self._before_deadline(upstream.__anext__(), deadline)
                except StopAsyncIteration:
                    break
                frame_count += 1
                if isinstance(frame, FinishFrame):
                    finished = True
                yield frame

            if not finished:
                finished = True
                yield FinishFrame()

        except Exception as exc:
            self.logger.error(
                "Chat stream failed on thread %s after %d frames: %s",
                thread_id,
                frame_count,
                exc,
                exc_info=True,
            )
            yield ErrorFrame(message=GENERIC_ERROR_MESSAGE)
        finally:
            if upstream is not None and hasattr(upstream, "aclose"):
                await upstream.aclose()
            self.logger.info(
                "Chat stream closed on thread %s: frames=%d finished=%s duration_ms=%.1f",
                thread_id,
                frame_count,
                finished,
                (time.perf_counter() - started) * 1000,
            )

    async def stream_body(self, request: ChatRequest) -> AsyncGenerator[str, None]:
        """Encoded response body for one request."""
        async with contextlib.aclosing(self.relay_frames(request)) as frames:
            async for frame in frames:
                yield self.encoder.encode(frame)
        trailer = self.encoder.close()
        if trailer:
            yield trailer
