"""Data models for Mail Threading.

This module contains Pydantic models for messages and the threads derived
from them.
"""

from mail_threading.models.message import (
    DEFAULT_CONTENT_TYPE,
    Attachment,
    Folder,
    Message,
    guess_content_type,
)
from mail_threading.models.thread import NO_SUBJECT, Thread, display_label, strip_reply_prefix

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "NO_SUBJECT",
    "Attachment",
    "Folder",
    "Message",
    "Thread",
    "display_label",
    "guess_content_type",
    "strip_reply_prefix",
]
