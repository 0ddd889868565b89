"""Thread key resolution.

A message's thread key is derived from, in order of preference: a thread id
already assigned upstream, the root of its References chain, its
In-Reply-To parent, its own Message-ID, and finally subject plus sender.
Header-derived keys are prefixed with the normalized subject so that
replies only join their root when the conversation topic also matches.
"""

from __future__ import annotations

import re

from mail_threading.models import Message, strip_reply_prefix

_ANGLE_ADDR_RE = re.compile(r"<([^>]+)>")


def normalize_subject(subject: str | None) -> str:
    """Strip leading reply/forward markers, trim and lower-case a subject.

    Idempotent: ``normalize_subject(normalize_subject(s)) == normalize_subject(s)``.
    """
    return strip_reply_prefix(subject).lower()


def clean_header_token(value: str | None) -> str:
    """Reduce a Message-ID style header token to its bare id.

    Removes enclosing angle brackets, quotes and whitespace. Returns an
    empty string when nothing usable is left.
    """
    if not value:
        return ""
    token = value.strip().strip("\"'").strip()
    match = _ANGLE_ADDR_RE.search(token)
    if match:
        token = match.group(1)
    return token.replace("<", "").replace(">", "").strip().strip("\"'").strip()


def header_thread_root(message: Message) -> str | None:
    """Return the Message-ID the thread key is anchored on, if any header gives one."""
    if message.references:
        refs = message.references.split()
        if refs:
            root = clean_header_token(refs[0])
            if root:
                return root

    parent = clean_header_token(message.in_reply_to)
    if parent:
        return parent

    own = clean_header_token(message.message_id)
    if own:
        return own

    return None


def resolve_thread_key(message: Message) -> str:
    """Compute the grouping key for a message.

    Args:
        message: Message to resolve.

    Returns:
        The upstream thread id verbatim when present, otherwise
        ``thread-<normalized subject>-<anchor>``.
    """
    if message.thread_id and message.thread_id.strip():
        return message.thread_id

    subject = normalize_subject(message.subject)
    root = header_thread_root(message)
    if root:
        return f"thread-{subject}-{root}"

    # No usable headers: group by subject and sender.
    return f"thread-{subject}-{message.sender or message.sender_name or ''}"


def same_thread(first: Message, second: Message) -> bool:
    """Whether two messages resolve to the same thread key."""
    return resolve_thread_key(first) == resolve_thread_key(second)
