"""Canonical message model.

Every record fetched from the mail API is mapped onto this single shape at
the boundary (see ``mail_threading.mailapi.parsing``), so the threading code
never has to guess between alternative field names.
"""

from __future__ import annotations

import mimetypes
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class Folder(str, Enum):
    """Mailbox folder a message was fetched from."""

    INBOX = "inbox"
    SENT = "sent"
    OTHER = "other"


def guess_content_type(filename: str | None) -> str:
    """Sniff a MIME type from an attachment filename."""
    if not filename:
        return DEFAULT_CONTENT_TYPE
    content_type, _ = mimetypes.guess_type(filename, strict=False)
    return content_type or DEFAULT_CONTENT_TYPE


class Attachment(BaseModel):
    """Attachment descriptor; content is never carried."""

    filename: str = Field(default="", description="Attachment file name")
    size: int | None = Field(default=None, ge=0, description="Size in bytes, if known")
    content_type: str = Field(default="", description="MIME type")

    @model_validator(mode="after")
    def _sniff_content_type(self) -> Attachment:
        if not self.content_type:
            self.content_type = guess_content_type(self.filename)
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")


class Message(BaseModel):
    """A single mail message as listed by the mail API (body optional)."""

    identifier: str = Field(
        default="",
        description="Opaque id, unique within one fetched page. Empty when unknown.",
    )
    folder: Folder = Field(default=Folder.INBOX, description="Folder the message came from")
    subject: str = Field(default="", description="Subject header")

    # Raw header strings; "Name <address>" forms are accepted.
    sender: str = Field(default="", description="Raw From header")
    sender_name: str | None = Field(default=None, description="Sender display name")
    recipient: str = Field(default="", description="Raw To header")
    recipient_name: str | None = Field(default=None, description="Recipient display name")

    message_id: str | None = Field(default=None, description="Message-ID header")
    in_reply_to: str | None = Field(default=None, description="In-Reply-To header")
    references: str | None = Field(default=None, description="References header")
    thread_id: str | None = Field(default=None, description="Pre-assigned thread id")

    timestamp: datetime | None = Field(
        default=None,
        description="Message date. None when missing or unparseable.",
    )
    attachments: list[Attachment] = Field(default_factory=list)
    body: str = Field(default="", description="Body text or preview")

    is_read: bool = Field(default=False, description="Whether message is read")
    is_starred: bool = Field(default=False, description="Whether message is starred")

    @field_validator("identifier", mode="before")
    @classmethod
    def _identifier_as_text(cls, value: Any) -> Any:
        # Server UIDs arrive as numbers.
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("references", mode="before")
    @classmethod
    def _join_references(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return " ".join(str(ref) for ref in value if ref)
        return value

    @field_validator("timestamp")
    @classmethod
    def _aware_timestamp(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
