"""Helpers for parsing mail API list responses into internal models.

The mail API is not consistent about field names (``from`` vs ``sender``,
``_id`` vs ``id``, ``timestamp`` vs ``date``...) nor about date formats.
Everything is normalised here, once, into :class:`Message`. Nothing in this
module raises on bad data: unusable values fall back to defaults.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone, tzinfo
from email.utils import parsedate_to_datetime
from typing import Any

import structlog

from mail_threading.config import Settings
from mail_threading.models import Attachment, Folder, Message

logger = structlog.get_logger()

# "3/2/2026, 10:40:12 pm" or "3/2/2026, 22:40:12" (day first).
_DMY_TIME_RE = re.compile(
    r"^\s*(\d{1,2})/(\d{1,2})/(\d{4})(?:,\s*|\s+)(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([ap]\.?m\.?)?\s*$",
    re.IGNORECASE,
)
_DMY_RE = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{4})\s*$")
_NUMERIC_RE = re.compile(r"^\d+(?:\.\d+)?$")
_COMPACT_DATE_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")

# Digit strings shorter than this are not epoch values (1973-03-03 in seconds).
_EPOCH_MIN_DIGITS = 9

_TRUE_FLAGS = frozenset({"true", "1", "yes"})
_FALSE_FLAGS = frozenset({"false", "0", "no", ""})

# Epoch values above this are milliseconds (year 5138 in seconds).
_EPOCH_MS_THRESHOLD = 100_000_000_000


def _from_epoch(value: float) -> datetime | None:
    if value > _EPOCH_MS_THRESHOLD:
        value = value / 1000
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _from_day_first(text: str, tz: tzinfo) -> datetime | None:
    match = _DMY_TIME_RE.match(text)
    if match:
        day, month, year, hour, minute, second, meridiem = match.groups()
        hour24 = int(hour)
        if meridiem:
            pm = meridiem.lower().startswith("p")
            if pm and hour24 != 12:
                hour24 += 12
            elif not pm and hour24 == 12:
                hour24 = 0
        try:
            return datetime(
                int(year), int(month), int(day), hour24, int(minute), int(second or 0), tzinfo=tz
            )
        except ValueError:
            return None

    match = _DMY_RE.match(text)
    if match:
        day, month, year = match.groups()
        try:
            return datetime(int(year), int(month), int(day), tzinfo=tz)
        except ValueError:
            return None

    return None


def parse_timestamp(value: Any, tz: tzinfo = timezone.utc) -> datetime | None:
    """Tolerantly parse a message date.

    Accepts datetimes, dates, epoch seconds or milliseconds (numbers or
    digit strings of nine or more digits), compact ``YYYYMMDD`` dates,
    ISO-8601, the API's day-first ``D/M/YYYY, HH:MM:SS am`` form,
    day-first dates, and RFC 2822 Date headers.

    Args:
        value: Raw value from the payload.
        tz: Zone assumed for values without an offset.

    Returns:
        An aware datetime, or None when the value cannot be understood.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=tz)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=tz)
    if isinstance(value, (int, float)):
        return _from_epoch(float(value))
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if _NUMERIC_RE.match(text):
        digits = text.split(".", 1)[0]
        if len(digits) >= _EPOCH_MIN_DIGITS:
            return _from_epoch(float(text))
        match = _COMPACT_DATE_RE.match(text)
        if match:
            year, month, day = match.groups()
            try:
                return datetime(int(year), int(month), int(day), tzinfo=tz)
            except ValueError:
                return None
        return None

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    else:
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=tz)

    parsed = _from_day_first(text, tz)
    if parsed is not None:
        return parsed

    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=tz)


def _first(payload: dict[str, Any], *names: str) -> Any:
    for name in names:
        value = payload.get(name)
        if value is not None and value != "":
            return value
    return None


def _flag(value: Any) -> bool:
    """Read a boolean flag sent as a bool, a number or a string like ``"false"``."""
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_FLAGS:
            return True
        if text in _FALSE_FLAGS:
            return False
        logger.debug("payload_flag_unrecognised", value=value)
        return False
    return bool(value)


def _text(value: Any) -> str:
    """Render a header-ish value (string, address dict or list of them) as text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, dict):
        address = str(value.get("address") or value.get("email") or "").strip()
        name = str(value.get("name") or "").strip()
        if name and address:
            return f"{name} <{address}>"
        return address or name
    if isinstance(value, (list, tuple)):
        return ", ".join(part for part in (_text(v) for v in value) if part)
    return str(value).strip()


def _optional_text(value: Any) -> str | None:
    return _text(value) or None


def _references(value: Any) -> str | None:
    if isinstance(value, (list, tuple)):
        return " ".join(_text(ref) for ref in value if _text(ref)) or None
    return _optional_text(value)


def _folder(value: Any, default: Folder) -> Folder:
    if value is None or value == "":
        return default
    try:
        return Folder(str(value).strip().lower())
    except ValueError:
        return Folder.OTHER


def _size(value: Any) -> int | None:
    try:
        size = int(value)
    except (TypeError, ValueError):
        return None
    return size if size >= 0 else None


def _attachments(value: Any) -> list[Attachment]:
    if not isinstance(value, list):
        return []
    result: list[Attachment] = []
    for item in value:
        if isinstance(item, str):
            result.append(Attachment(filename=item))
        elif isinstance(item, dict):
            result.append(
                Attachment(
                    filename=_text(_first(item, "filename", "fileName", "name")),
                    size=_size(_first(item, "size", "length")),
                    content_type=_text(_first(item, "contentType", "content_type", "mimeType")),
                )
            )
    return result


def _identifier(payload: dict[str, Any], folder: Folder) -> str:
    raw = _first(payload, "uid", "_id", "id")
    if raw is not None and not isinstance(raw, bool):
        return str(raw).strip()
    # Composite key from the Message-ID; otherwise left for the threading
    # core to synthesize.
    message_id = _text(_first(payload, "messageId", "message_id", "Message-ID"))
    if message_id:
        return f"{folder.value}:{message_id}"
    return ""


def payload_to_message(
    payload: dict[str, Any],
    folder: Folder | None = None,
    tz: tzinfo = timezone.utc,
) -> Message:
    """Convert one mail API record into a Message.

    Args:
        payload: Record from a list response.
        folder: Folder the page was fetched from; overrides the record's own.
        tz: Zone assumed for dates without an offset.

    Returns:
        Message: Canonical message model.
    """
    resolved_folder = folder or _folder(payload.get("folder"), Folder.INBOX)

    raw_timestamp = _first(payload, "timestamp", "date", "createdAt")
    timestamp = parse_timestamp(raw_timestamp, tz)
    if timestamp is None and raw_timestamp is not None:
        logger.debug("payload_timestamp_unparsed", value=str(raw_timestamp))

    return Message(
        identifier=_identifier(payload, resolved_folder),
        folder=resolved_folder,
        subject=_text(payload.get("subject")),
        sender=_text(_first(payload, "from", "sender")),
        sender_name=_optional_text(_first(payload, "fromName", "senderName")),
        recipient=_text(_first(payload, "to", "recipient")),
        recipient_name=_optional_text(_first(payload, "toName", "recipientName")),
        message_id=_optional_text(_first(payload, "messageId", "message_id", "Message-ID")),
        in_reply_to=_optional_text(_first(payload, "inReplyTo", "in_reply_to", "In-Reply-To")),
        references=_references(_first(payload, "references", "References")),
        thread_id=_optional_text(_first(payload, "threadId", "thread_id")),
        timestamp=timestamp,
        attachments=_attachments(payload.get("attachments")),
        body=_text(_first(payload, "body", "text", "content", "contentPreview", "snippet")),
        is_read=_flag(_first(payload, "isRead", "read", "seen")),
        is_starred=_flag(_first(payload, "isStarred", "starred", "flagged")),
    )


def page_payloads(response: Any) -> list[dict[str, Any]]:
    """Extract the message records from a list response.

    Accepts a bare list, ``{"emails": [...]}``, ``{"data": {"emails": [...]}}``
    or ``{"data": [...]}``. Anything else yields no records.
    """
    records: Any = response
    if isinstance(response, dict):
        data = response.get("data")
        records = response.get("emails")
        if records is None and isinstance(data, dict):
            records = data.get("emails")
        if records is None and isinstance(data, list):
            records = data
    if not isinstance(records, list):
        return []
    return [r for r in records if isinstance(r, dict)]


def _sent_account(response: Any) -> dict[str, Any]:
    if not isinstance(response, dict):
        return {}
    account = response.get("emailAccount")
    if account is None and isinstance(response.get("data"), dict):
        account = response["data"].get("emailAccount")
    return account if isinstance(account, dict) else {}


def parse_page(
    response: Any,
    folder: Folder | None = None,
    settings: Settings | None = None,
) -> list[Message]:
    """Convert a whole list response into Messages, in response order.

    Sent-folder pages are stamped with the mailbox owner as sender, taken
    from the response's ``emailAccount`` when present.

    Args:
        response: Decoded JSON list response.
        folder: Folder the page was fetched from, if known.
        settings: Application settings. If None, uses default settings.

    Returns:
        list[Message]: One message per record.
    """
    from mail_threading.config import get_settings

    settings = settings or get_settings()
    tz = settings.timezone()
    messages = [payload_to_message(p, folder, tz) for p in page_payloads(response)]

    if folder == Folder.SENT:
        account = _sent_account(response)
        owner_address = _text(account.get("email"))
        owner_name = _text(account.get("displayName")) or settings.sent_display_name
        messages = [
            m.model_copy(
                update={"sender": owner_address or m.sender, "sender_name": owner_name}
            )
            for m in messages
        ]

    return messages
