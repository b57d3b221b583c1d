from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Conversation(BaseModel):
    """Summary entry of one conversation in a user's sidebar."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    id: str = Field(min_length=1, description="Opaque conversation identifier (generated client-side)")
    title: Optional[str] = Field(default=None, description="Conversation title")
    last_message_at: Optional[datetime] = Field(default=None, description="When the last message was sent")
    last_read_at: Optional[datetime] = Field(default=None, description="When the user last read the conversation")


class UpsertConversationRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: Optional[str] = None
    conversation: Optional[Conversation] = None


class DeleteConversationRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: Optional[str] = None
    conversation_id: Optional[str] = None
