"""Conversation thread model.

A thread only stores its key and its messages; every display field is
derived from the (sorted) message list on access, so a thread can never
disagree with its own messages after a merge.
"""

from __future__ import annotations

import re
from datetime import datetime
from email.utils import parseaddr

from pydantic import BaseModel, Field, computed_field

from mail_threading.models.message import Attachment, Folder, Message

NO_SUBJECT = "No Subject"

_REPLY_PREFIX_RE = re.compile(r"^(?:(?:re|fwd?)\b\s*:?\s*)+", re.IGNORECASE)


def strip_reply_prefix(subject: str | None) -> str:
    """Strip leading Re:/Fwd:/Fw: markers (any number, colon optional)."""
    if not subject:
        return ""
    return _REPLY_PREFIX_RE.sub("", subject.strip()).strip()


def _unquote(value: str) -> str:
    return value.strip().strip("\"'").strip()


def display_label(raw: str | None, name: str | None = None) -> str:
    """Return the name for a party, falling back to its address.

    Args:
        raw: Raw header value, e.g. ``"Jane Doe" <jane@example.com>``.
        name: Separately supplied display name, preferred when present.
    """
    raw = raw or ""
    parsed_name, address = "", ""
    if "<" in raw or "@" in raw:
        parsed_name, address = parseaddr(raw)
    else:
        parsed_name = raw

    label = _unquote(name or "") or _unquote(parsed_name)
    if label and label.lower() != address.lower():
        return label
    return address or _unquote(raw)


class Thread(BaseModel):
    """A conversation: messages sorted oldest to newest, unique by identifier."""

    thread_key: str = Field(description="Key shared by every message in the thread")
    messages: list[Message] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def latest_message(self) -> Message | None:
        return self.messages[-1] if self.messages else None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def message_count(self) -> int:
        return len(self.messages)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def participants(self) -> list[str]:
        """Senders, plus recipients of sent messages, in order of first appearance."""
        seen: set[str] = set()
        names: list[str] = []

        def add(label: str) -> None:
            if label and label.lower() not in seen:
                seen.add(label.lower())
                names.append(label)

        for message in self.messages:
            add(display_label(message.sender, message.sender_name))
            if message.folder == Folder.SENT and (message.recipient or message.recipient_name):
                add(display_label(message.recipient, message.recipient_name))
        return names

    @computed_field  # type: ignore[prop-decorator]
    @property
    def attachments(self) -> list[Attachment]:
        return [a for m in self.messages for a in m.attachments]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_attachments(self) -> bool:
        return any(m.attachments for m in self.messages)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def attachment_count(self) -> int:
        return sum(len(m.attachments) for m in self.messages)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def topic(self) -> str:
        """Subject of the thread root without reply/forward markers."""
        if not self.messages:
            return NO_SUBJECT
        return strip_reply_prefix(self.messages[0].subject) or NO_SUBJECT

    # Display fields mirror the latest message.

    @computed_field  # type: ignore[prop-decorator]
    @property
    def subject(self) -> str:
        latest = self.latest_message
        return latest.subject if latest else ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def timestamp(self) -> datetime | None:
        latest = self.latest_message
        return latest.timestamp if latest else None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_read(self) -> bool:
        latest = self.latest_message
        return latest.is_read if latest else True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_starred(self) -> bool:
        latest = self.latest_message
        return latest.is_starred if latest else False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def folder(self) -> Folder:
        latest = self.latest_message
        return latest.folder if latest else Folder.OTHER

    def identifiers(self) -> list[str]:
        """Message identifiers in thread order."""
        return [m.identifier for m in self.messages]
