"""Conversation threading.

Key resolution, aggregation of a message batch into threads, and merging
of successive pages into an accumulated collection.
"""

from .aggregator import aggregate_threads, ensure_identifiers, sort_messages, sort_threads
from .filters import filter_threads, message_count, unread_count
from .keys import clean_header_token, normalize_subject, resolve_thread_key, same_thread
from .merge import MergeResult, merge_page, reconcile

__all__ = [
    "MergeResult",
    "aggregate_threads",
    "clean_header_token",
    "ensure_identifiers",
    "filter_threads",
    "merge_page",
    "message_count",
    "normalize_subject",
    "reconcile",
    "resolve_thread_key",
    "same_thread",
    "sort_messages",
    "sort_threads",
    "unread_count",
]
