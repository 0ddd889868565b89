"""Pagination state for one mailbox folder view.

The threading functions are stateless; this class is the caller-side owner
of the accumulated thread collection, the page counter and the "more pages
available" flag for a folder being scrolled through.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog

from mail_threading.config import Settings
from mail_threading.mailapi import parse_page
from mail_threading.models import Folder, Message, Thread
from mail_threading.threads import (
    MergeResult,
    aggregate_threads,
    filter_threads,
    message_count,
    reconcile,
    unread_count,
)

logger = structlog.get_logger()


class MailboxSession:
    """Accumulates threads across the pages of one folder.

    Not safe for concurrent use; load pages one at a time.
    """

    def __init__(self, folder: Folder = Folder.INBOX, settings: Settings | None = None) -> None:
        """Initialize an empty session.

        Args:
            folder: Folder whose pages will be loaded.
            settings: Application settings. If None, uses default settings.
        """
        from mail_threading.config import get_settings

        self.settings = settings or get_settings()
        self.folder = folder
        self.threads: list[Thread] = []
        self.current_page = 0
        self.has_more = True
        self.skipped_threads = 0

    @property
    def next_page(self) -> int:
        return self.current_page + 1

    def reset(self) -> None:
        """Forget every loaded page."""
        self.threads = []
        self.current_page = 0
        self.has_more = True
        self.skipped_threads = 0

    def load_page(self, response: Any, page: int | None = None) -> MergeResult:
        """Parse a list response from the mail API and merge it.

        Args:
            response: Decoded JSON list response for one page.
            page: 1-based page number; defaults to the next page.

        Returns:
            MergeResult: What the merge inserted, merged and skipped.
        """
        messages = parse_page(response, folder=self.folder, settings=self.settings)
        return self.load_messages(messages, page)

    def load_messages(self, messages: Iterable[Message], page: int | None = None) -> MergeResult:
        """Merge an already parsed page of messages.

        Page 1 replaces whatever was loaded before. A page shorter than
        ``settings.page_size`` marks the end of the folder.
        """
        page = page or self.next_page
        batch = list(messages)

        if page <= 1:
            self.reset()

        result = reconcile(self.threads, aggregate_threads(batch))
        self.threads = result.threads
        self.current_page = max(self.current_page, page)
        self.has_more = len(batch) == self.settings.page_size
        self.skipped_threads += len(result.skipped)

        logger.info(
            "session_page_loaded",
            folder=self.folder.value,
            page=page,
            fetched=len(batch),
            thread_count=len(self.threads),
            inserted=len(result.inserted),
            merged=len(result.merged),
            skipped=len(result.skipped),
            has_more=self.has_more,
        )
        return result

    def visible_threads(self, query: str | None = None) -> list[Thread]:
        """Threads of this folder matching an optional search query."""
        return filter_threads(self.threads, folder=self.folder, query=query)

    @property
    def message_count(self) -> int:
        return message_count(self.threads)

    @property
    def unread_count(self) -> int:
        return unread_count(self.threads, self.folder)
