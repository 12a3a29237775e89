"""Pydantic models for the resource catalog."""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Resource type assigned to everything built from a chat message embed.
# Other values are reserved for future resource kinds.
EMBED_RESOURCE_TYPE_ID = 10


def _id_to_str(value: Union[int, str, None]) -> str:
    if value is None:
        return ""
    return str(value)


class Embed(BaseModel):
    """Link preview attached to a chat message."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(None, description="Embed title")
    description: Optional[str] = Field(None, description="Embed body text")
    url: Optional[str] = Field(None, description="Link the embed points at")

    def missing_fields(self) -> list[str]:
        """Names of the fields normalization needs but this embed lacks."""
        return [
            name for name in ("title", "description", "url")
            if getattr(self, name) is None
        ]


class MessageAuthor(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field("", description="Author identifier")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value):
        return _id_to_str(value)


class ChatMessage(BaseModel):
    """Raw chat message as handed over by the chat platform client."""

    model_config = ConfigDict(extra="ignore")

    author: MessageAuthor = Field(default_factory=MessageAuthor)
    channel_id: str = Field("", description="Channel the message was posted in")
    embeds: list[Embed] = Field(default_factory=list, description="Attached embeds")

    @field_validator("channel_id", mode="before")
    @classmethod
    def coerce_channel_id(cls, value):
        return _id_to_str(value)


class Resource(BaseModel):
    """A piece of shared content, as stored in the catalog.

    Rows read back from the store only carry user_id, channel_id, url and
    description; shash and type_id stay at their defaults there.
    """

    user_id: str = Field("", description="Author of the source message")
    channel_id: str = Field("", description="Channel of the source message")
    url: str = Field("", description="Normalized link of the last embed")
    description: str = Field("", description="Normalized text of all embeds")
    shash: str = Field("", description="Fingerprint of the description")
    type_id: int = Field(0, description="Resource category tag")

    def is_insertable(self) -> bool:
        return bool(self.url) and bool(self.description)


class ResourcePage(BaseModel):
    """One page of search results plus what is needed to ask for the next."""

    items: list[Resource] = Field(default_factory=list)
    page: int = Field(..., ge=0)
    limit: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    has_more: bool = False
