"""Merging freshly fetched pages into an accumulated thread collection.

Pagination against the mail API can return overlapping pages, and the
list view may request the same page more than once. Merging is therefore
idempotent: a message identifier is only ever held by one thread, and a
page whose threads are already fully known changes nothing.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog

from mail_threading.models import Message, Thread
from mail_threading.threads.aggregator import aggregate_threads, sort_messages, sort_threads

logger = structlog.get_logger()


@dataclass(frozen=True)
class MergeResult:
    """Outcome of reconciling incoming threads with an existing collection."""

    threads: list[Thread]
    inserted: tuple[str, ...] = ()
    merged: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()


def _union(targets: Sequence[Thread], incoming: Thread | None = None) -> list[Message]:
    by_identifier: dict[str, Message] = {}
    for thread in targets:
        for message in thread.messages:
            by_identifier[message.identifier] = message
    if incoming is not None:
        # The latest fetch may carry richer data (e.g. resolved attachments).
        for message in incoming.messages:
            by_identifier[message.identifier] = message
    return sort_messages(by_identifier.values())


def _collect(existing: Iterable[Thread]) -> dict[str, Thread]:
    collection: dict[str, Thread] = {}
    for thread in existing:
        held = collection.get(thread.thread_key)
        if held is None:
            collection[thread.thread_key] = thread
        else:
            collection[thread.thread_key] = Thread(
                thread_key=thread.thread_key, messages=_union([held, thread])
            )
    return collection


def reconcile(existing: Iterable[Thread], incoming: Iterable[Thread]) -> MergeResult:
    """Fold incoming threads into an existing collection.

    Neither argument is modified; threads that change are rebuilt.

    Args:
        existing: Threads accumulated so far.
        incoming: Threads aggregated from a newly fetched page.

    Returns:
        MergeResult with the new collection, sorted most recently active
        first, and the keys that were inserted, merged or skipped.
    """
    collection = _collect(existing)
    owners: dict[str, str] = {
        message.identifier: key
        for key, thread in collection.items()
        for message in thread.messages
    }

    inserted: list[str] = []
    merged: list[str] = []
    skipped: list[str] = []

    for thread in incoming:
        identifiers = thread.identifiers()
        if not identifiers or all(i in owners for i in identifiers):
            logger.debug(
                "page_thread_skipped",
                thread_key=thread.thread_key,
                message_count=len(identifiers),
            )
            skipped.append(thread.thread_key)
            continue

        targets: list[str] = []
        if thread.thread_key in collection:
            targets.append(thread.thread_key)
        for identifier in identifiers:
            owner = owners.get(identifier)
            if owner is not None and owner not in targets:
                targets.append(owner)

        if targets:
            key = targets[0]
            held = [collection.pop(k) for k in targets]
            collection[key] = Thread(thread_key=key, messages=_union(held, thread))
            merged.append(key)
            if len(targets) > 1:
                logger.debug("threads_coalesced", thread_key=key, absorbed=targets[1:])
        else:
            key = thread.thread_key
            collection[key] = thread
            inserted.append(key)

        for message in collection[key].messages:
            owners[message.identifier] = key

    return MergeResult(
        threads=sort_threads(collection.values()),
        inserted=tuple(inserted),
        merged=tuple(merged),
        skipped=tuple(skipped),
    )


def merge_page(existing: Iterable[Thread], page: Iterable[Message]) -> list[Thread]:
    """Merge one fetched page of messages into an existing thread collection.

    Args:
        existing: Threads accumulated from earlier pages.
        page: Messages of the newly fetched page.

    Returns:
        The updated collection. Merging the same page again returns an
        equal collection.
    """
    result = reconcile(existing, aggregate_threads(page))
    logger.debug(
        "page_merged",
        thread_count=len(result.threads),
        inserted=len(result.inserted),
        merged=len(result.merged),
        skipped=len(result.skipped),
    )
    return result.threads
