"""Folder and text filtering over a thread collection."""

from __future__ import annotations

from collections.abc import Iterable

from mail_threading.models import Folder, Thread


def _matches(thread: Thread, needle: str) -> bool:
    haystacks = [thread.topic, thread.subject, *thread.participants]
    for message in thread.messages:
        haystacks.extend((message.subject, message.sender_name or "", message.sender, message.body))
    return any(needle in text.lower() for text in haystacks if text)


def filter_threads(
    threads: Iterable[Thread],
    folder: Folder | None = None,
    query: str | None = None,
) -> list[Thread]:
    """Select threads for a folder tab and an optional search query.

    Args:
        threads: Threads in display order.
        folder: Keep threads holding at least one message from this folder.
        query: Case-insensitive text matched against subjects, participants,
            senders and bodies.

    Returns:
        Matching threads, order preserved.
    """
    needle = (query or "").strip().lower()
    selected: list[Thread] = []
    for thread in threads:
        if folder is not None and not any(m.folder == folder for m in thread.messages):
            continue
        if needle and not _matches(thread, needle):
            continue
        selected.append(thread)
    return selected


def message_count(threads: Iterable[Thread], folder: Folder | None = None) -> int:
    """Count messages, optionally only those in one folder."""
    return sum(
        1 for t in threads for m in t.messages if folder is None or m.folder == folder
    )


def unread_count(threads: Iterable[Thread], folder: Folder = Folder.INBOX) -> int:
    """Count unread messages in a folder."""
    return sum(1 for t in threads for m in t.messages if m.folder == folder and not m.is_read)
