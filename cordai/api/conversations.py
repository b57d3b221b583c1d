from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from ..core.conversations import ConversationStore
from ..types import DeleteConversationRequest, UpsertConversationRequest
from .deps import get_conversation_store

router = APIRouter()


@router.get("/conversations")
async def list_conversations(
    user_id: Optional[str] = Query(default=None, alias="userId", description="Owner of the conversations"),
    store: ConversationStore = Depends(get_conversation_store),
) -> List[Dict[str, Any]]:
    return [c.model_dump(mode="json", by_alias=True) for c in store.list(user_id)]


@router.post("/conversations")
async def upsert_conversation(
    req: UpsertConversationRequest,
    store: ConversationStore = Depends(get_conversation_store),
) -> Dict[str, Any]:
    """Create a conversation summary or merge the provided fields into it."""
    stored = store.upsert(req.user_id, req.conversation)
    return {"success": True, "conversation": stored.model_dump(mode="json", by_alias=True)}


@router.delete("/conversations")
async def delete_conversation(
    req: DeleteConversationRequest,
    store: ConversationStore = Depends(get_conversation_store),
) -> Dict[str, Any]:
    store.remove(req.user_id, req.conversation_id)
    return {"success": True}
