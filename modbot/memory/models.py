"""Pydantic models for conversation memory."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Annotated, Any, Callable, Dict, List, Literal, Optional, Sequence, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
)
from pydantic.alias_generators import to_camel
from typing_extensions import TypeAliasType

Role = Literal["user", "assistant", "system"]

# Allowed metadata values: scalars or nested string-keyed maps of them.
MetadataValue = TypeAliasType(
    "MetadataValue",
    "Union[StrictBool, StrictInt, StrictFloat, StrictStr, Dict[str, MetadataValue]]",
)

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]

TITLE_MAX_LENGTH = 50
TITLE_ELLIPSIS = "…"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_id(prefix: str) -> str:
    """Return a unique id such as ``conv-3f2a9c...``."""
    return f"{prefix}-{uuid.uuid4().hex}"


def _as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so stored instants stay comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class _Record(BaseModel):
    """Persisted record: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Attachment(_Record):
    """A file attached to a message."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    mime_type: str
    size_bytes: int = Field(ge=0)
    url: Optional[str] = None
    content: Optional[str] = None


class Message(_Record):
    """A single chat message. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    content: str
    timestamp: UtcDatetime
    attachments: List[Attachment] = Field(default_factory=list)
    metadata: Dict[str, MetadataValue] = Field(default_factory=dict)

    @classmethod
    def create(
        cls,
        role: Role,
        content: str,
        id_factory: Optional[IdFactory] = None,
        clock: Optional[Clock] = None,
        **kwargs: Any,
    ) -> "Message":
        """Build a message with a fresh id and timestamp."""
        return cls(
            id=id_factory() if id_factory else generate_id("msg"),
            role=role,
            content=content,
            timestamp=clock() if clock else utc_now(),
            **kwargs,
        )


class Conversation(_Record):
    """A stored conversation in the durable archive."""

    id: str
    title: str
    messages: List[Message] = Field(default_factory=list)
    created_at: UtcDatetime
    updated_at: UtcDatetime
    is_pinned: bool = False


MessageList = TypeAdapter(List[Message])
ConversationList = TypeAdapter(List[Conversation])


def derive_title(messages: Sequence[Message], now: datetime) -> str:
    """Title from the first user message, or a dated placeholder."""
    first_user = next((m for m in messages if m.role == "user"), None)
    if first_user is not None:
        content = first_user.content
        if len(content) > TITLE_MAX_LENGTH:
            return content[:TITLE_MAX_LENGTH] + TITLE_ELLIPSIS
        return content
    return f"Conversation {now.date().isoformat()}"


@dataclass
class ArchiveStatistics:
    """Aggregate figures over the durable archive."""

    total_conversations: int = 0
    pinned_conversations: int = 0
    total_messages: int = 0
    average_messages_per_conversation: int = 0
    oldest_updated_at: Optional[datetime] = None
    newest_updated_at: Optional[datetime] = None
