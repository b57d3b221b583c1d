import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, StreamingResponse, Response

from ..core.agent import ThreadMemory
from ..core.errors import CordAiError
from ..core.relay import ChatRelay
from .deps import get_relay, get_thread_memory

router = APIRouter()
_logger = logging.getLogger(__name__)


@router.post("/chat")
async def chat_endpoint(request: Request, relay: ChatRelay = Depends(get_relay)) -> Response:
    """Stream the assistant reply to one chat message.

    Rejections happen before the stream opens and are plain-text bodies.
    Once the stream is open the status stays 200 and failures arrive as an
    error frame.
    """

    try:
        body = await request.json()
    except ValueError:
        return PlainTextResponse("Malformed request body", status_code=400)

    try:
        chat_request = relay.validate(body)
        relay.ensure_ready()
    except CordAiError as e:
        if e.status_code >= 500:
            _logger.error("Chat request rejected: %s", e)
        return PlainTextResponse(e.public_message, status_code=e.status_code)
    except Exception as e:
        _logger.error("Chat request failed before streaming: %s", e, exc_info=True)
        return PlainTextResponse("Internal Server Error", status_code=500)

    return StreamingResponse(
        relay.stream_body(chat_request),
        media_type=relay.encoder.media_type,
        headers=dict(relay.encoder.headers),
    )


@router.get("/chat/{thread_id}")
async def chat_history(
    thread_id: str,
    user_id: Optional[str] = Query(default=None, alias="userId", description="Wallet that owns the thread"),
    memory: ThreadMemory = Depends(get_thread_memory),
) -> List[Dict[str, Any]]:
    """Persisted turns of one thread, oldest first.

    Only the caller's own thread is visible; another wallet's thread with the
    same id reads as empty.
    """
    return [m.model_dump(mode="json", by_alias=True) for m in memory.messages(thread_id, user_id)]
