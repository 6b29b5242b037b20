"""
Boundary schemas for the remote agent platform.
Content blocks are narrowed to a tagged variant before the core sees them.
"""

from typing import Annotated, Any, Literal, Union
from pydantic import BaseModel, ConfigDict, Field


USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"

RUN_QUEUED = "queued"
RUN_IN_PROGRESS = "in_progress"
RUN_COMPLETED = "completed"
PENDING_RUN_STATUSES = frozenset({RUN_QUEUED, RUN_IN_PROGRESS})


class TextContent(BaseModel):
    """A content block carrying text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str


class OtherContent(BaseModel):
    """Any content block the core does not consume (images, files, ...)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["other"] = "other"
    type: str = "unknown"


ContentBlock = Annotated[Union[TextContent, OtherContent], Field(discriminator="kind")]


class PlatformMessage(BaseModel):
    """A thread message as seen by the orchestration core."""

    model_config = ConfigDict(frozen=True)

    role: str
    content: tuple[ContentBlock, ...] = ()
    # Run that wrote the message; None for user turns
    run_id: str | None = None

    def first_text(self) -> str | None:
        for block in self.content:
            if isinstance(block, TextContent):
                return block.value
        return None


class RunState(BaseModel):
    """Snapshot of a remote agent run."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    status: str
    last_error: str | None = None

    @property
    def pending(self) -> bool:
        return self.status in PENDING_RUN_STATUSES


def _field(raw: Any, name: str) -> Any:
    if isinstance(raw, dict):
        return raw.get(name)
    return getattr(raw, name, None)


def enum_value(value: Any) -> Any:
    """Unwraps SDK string enums to their plain value."""
    return getattr(value, "value", value)


def narrow_content(raw: Any) -> TextContent | OtherContent:
    """
    Narrows a raw SDK content block (object or dict) to a ContentBlock.

    Only blocks of type "text" whose text value is a string become
    TextContent; everything else is OtherContent.

    Args:
        raw: Content block as returned by the platform SDK

    Returns:
        TextContent or OtherContent
    """
    block_type = enum_value(_field(raw, "type"))
    if block_type != "text":
        return OtherContent(type=str(block_type or "unknown"))

    text = _field(raw, "text")
    value = text if isinstance(text, str) else _field(text, "value")
    if isinstance(value, str):
        return TextContent(value=value)
    return OtherContent(type="text")
