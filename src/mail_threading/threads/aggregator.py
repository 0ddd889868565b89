"""Folding a batch of messages into threads."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from datetime import datetime

import structlog

from mail_threading.models import Message, Thread
from mail_threading.threads.keys import header_thread_root, normalize_subject, resolve_thread_key

logger = structlog.get_logger()


def _chronological(timestamp: datetime | None) -> tuple[bool, float]:
    # Unknown dates sort after every known one.
    return (timestamp is None, timestamp.timestamp() if timestamp is not None else 0.0)


def sort_messages(messages: Iterable[Message]) -> list[Message]:
    """Return messages oldest first; undated messages last, in input order."""
    return sorted(messages, key=lambda m: _chronological(m.timestamp))


def sort_threads(threads: Iterable[Thread]) -> list[Thread]:
    """Return threads most recently active first; undated threads last."""
    dated: list[Thread] = []
    undated: list[Thread] = []
    for thread in threads:
        (undated if thread.timestamp is None else dated).append(thread)
    dated.sort(key=lambda t: t.timestamp.timestamp(), reverse=True)  # type: ignore[union-attr]
    return dated + undated


def _fingerprint(message: Message) -> str:
    digest = hashlib.sha1(usedforsecurity=False)
    parts = [
        message.sender,
        message.sender_name or "",
        message.recipient,
        message.recipient_name or "",
        message.body,
        *(f"{a.filename}:{a.size}:{a.content_type}" for a in message.attachments),
    ]
    for part in parts:
        digest.update(part.encode("utf-8"))
        digest.update(b"\0")
    return digest.hexdigest()[:12]


def synthesize_identifier(message: Message, ordinal: int) -> str:
    """Build a stand-in identifier for a message that arrived without one.

    Parties, body and attachments are folded into a short digest so that
    different messages sharing a subject, date and page position stay
    distinct. The ordinal is the message's position in its batch, so the
    same page always yields the same identifiers.
    """
    when = message.timestamp.isoformat() if message.timestamp else "undated"
    subject = normalize_subject(message.subject)
    return f"anon-{subject}-{when}-{_fingerprint(message)}-{ordinal}"


def ensure_identifiers(messages: Iterable[Message]) -> list[Message]:
    """Give every message an identifier without dropping any of them.

    Messages with neither an identifier nor anything to group them by
    (no thread id, no usable headers, no sender) also get a thread id of
    their own so they form singleton threads.
    """
    result: list[Message] = []
    for ordinal, message in enumerate(messages):
        if message.identifier.strip():
            result.append(message)
            continue

        identifier = synthesize_identifier(message, ordinal)
        update: dict[str, str] = {"identifier": identifier}
        ungroupable = (
            not (message.thread_id and message.thread_id.strip())
            and header_thread_root(message) is None
            and not (message.sender or message.sender_name)
        )
        if ungroupable:
            update["thread_id"] = f"thread-{identifier}"

        logger.debug(
            "message_identifier_synthesized",
            identifier=identifier,
            singleton=ungroupable,
        )
        result.append(message.model_copy(update=update))
    return result


def aggregate_threads(messages: Iterable[Message]) -> list[Thread]:
    """Group a flat batch of messages into threads.

    Args:
        messages: Messages in fetch order.

    Returns:
        Threads sorted most recently active first, each holding its
        messages oldest first. A repeated identifier keeps only its last
        occurrence.
    """
    buckets: dict[str, dict[str, Message]] = {}
    owner: dict[str, str] = {}

    for message in ensure_identifiers(messages):
        key = resolve_thread_key(message)

        previous_key = owner.get(message.identifier)
        if previous_key is not None:
            previous = buckets[previous_key]
            previous.pop(message.identifier, None)
            if not previous:
                del buckets[previous_key]

        buckets.setdefault(key, {})[message.identifier] = message
        owner[message.identifier] = key

    threads = [
        Thread(thread_key=key, messages=sort_messages(bucket.values()))
        for key, bucket in buckets.items()
    ]
    return sort_threads(threads)
