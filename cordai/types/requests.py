from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Attachment(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    url: str = Field(description="Attachment URL")
    name: Optional[str] = Field(default=None, description="Display name")
    content_type: Optional[str] = Field(default=None, description="MIME type of the attachment")


class ChatMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: Optional[str] = Field(default=None, description="Client-side message identifier")
    role: MessageRole = Field(description="Message role: user, assistant or system")
    content: str = Field(description="Message content")
    attachments: List[Attachment] = Field(
        default_factory=list,
        validation_alias=AliasChoices("attachments", "experimental_attachments"),
        description="Optional attachments sent with the message",
    )


class ChatRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = Field(default=None, description="Conversation identifier used as the agent thread id")
    message: ChatMessage = Field(description="The new user message")
    user_id: Optional[str] = Field(default=None, description="Connected wallet address of the caller")
