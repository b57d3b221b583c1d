"""
Stream frames and their wire encodings.

Agents and model strategies produce a sequence of typed frames; the relay
only pumps frames and hands each one to an encoder for the HTTP body.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Literal, Optional, Union

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field


class TextDeltaFrame(BaseModel):
    type: Literal["text-delta"] = "text-delta"
    delta: str


class FinishFrame(BaseModel):
    type: Literal["finish"] = "finish"
    finishReason: str = "stop"
    usage: Optional[Dict[str, Any]] = None


class ErrorFrame(BaseModel):
    type: Literal["error"] = "error"
    message: str


StreamFrame = Union[TextDeltaFrame, FinishFrame, ErrorFrame]


class FrameEncoder(ABC):
    """Serialise frames into response body chunks."""

    media_type: str = "text/plain"
    headers: Dict[str, str] = {}

    @abstractmethod
    def encode(self, frame: StreamFrame) -> str:
        pass

    def close(self) -> Optional[str]:
        """Trailer written after the last frame, if the protocol has one."""
        return None


class SSEFrameEncoder(FrameEncoder):
    """Server-Sent Events: one ``data:`` event per frame, then ``[DONE]``."""

    media_type = "text/event-stream"
    headers = {"Cache-Control": "no-cache"}

    def encode(self, frame: StreamFrame) -> str:
        encoded = jsonable_encoder(frame.model_dump(exclude_none=True))
        return f"data: {json.dumps(encoded, ensure_ascii=False)}\n\n"

    def close(self) -> Optional[str]:
        return "data: [DONE]\n\n"


class DataStreamFrameEncoder(FrameEncoder):
    """Line protocol understood by the web client's chat hook.

    ``0:`` carries a JSON string text part, ``3:`` a JSON string error and
    ``d:`` the finish message object.
    """

    media_type = "text/plain; charset=utf-8"
    headers = {"Cache-Control": "no-cache", "x-vercel-ai-data-stream": "v1"}

    def encode(self, frame: StreamFrame) -> str:
        if isinstance(frame, TextDeltaFrame):
            return f"0:{json.dumps(frame.delta, ensure_ascii=False)}\n"
        if isinstance(frame, ErrorFrame):
            return f"3:{json.dumps(frame.message, ensure_ascii=False)}\n"
        finish: Dict[str, Any] = {"finishReason": frame.finishReason}
        usage = frame.usage or {}
        finish["usage"] = {
            "promptTokens": usage.get("promptTokens"),
            "completionTokens": usage.get("completionTokens"),
        }
        return f"d:{json.dumps(finish)}\n"


_ENCODERS = {
    "sse": SSEFrameEncoder,
    "data-stream": DataStreamFrameEncoder,
}


def get_frame_encoder(protocol: str) -> FrameEncoder:
    try:
        return _ENCODERS[protocol.lower()]()
    except KeyError:
        raise ValueError(
            f"Unsupported stream protocol '{protocol}'. Available: {', '.join(_ENCODERS)}"
        )


__all__ = [
    "TextDeltaFrame",
    "FinishFrame",
    "ErrorFrame",
    "StreamFrame",
    "FrameEncoder",
    "SSEFrameEncoder",
    "DataStreamFrameEncoder",
    "get_frame_encoder",
]
