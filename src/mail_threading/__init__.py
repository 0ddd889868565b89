"""Mail Threading - conversation threading for paginated webmail listings.

This package groups flat pages of messages fetched from a remote mail API
into conversation threads and merges successive, possibly overlapping,
pages into a running thread collection owned by the caller.
"""

__version__ = "0.1.0"
__author__ = "Trickl"

from mail_threading.config import Settings, get_settings
from mail_threading.mailapi import page_payloads, parse_page, payload_to_message
from mail_threading.models import Attachment, Folder, Message, Thread
from mail_threading.session import MailboxSession
from mail_threading.threads import (
    MergeResult,
    aggregate_threads,
    merge_page,
    normalize_subject,
    reconcile,
    resolve_thread_key,
    same_thread,
)

__all__ = [
    "Attachment",
    "Folder",
    "MailboxSession",
    "MergeResult",
    "Message",
    "Settings",
    "Thread",
    "aggregate_threads",
    "get_settings",
    "merge_page",
    "normalize_subject",
    "page_payloads",
    "parse_page",
    "payload_to_message",
    "reconcile",
    "resolve_thread_key",
    "same_thread",
    "__version__",
    "__author__",
]
