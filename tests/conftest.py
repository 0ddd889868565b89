"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from mail_threading.config import Settings

    return Settings(
        page_size=3,
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def at():
    """Return a helper building timestamps N hours after a fixed base time."""

    def _at(hours: float) -> datetime:
        return BASE_TIME + timedelta(hours=hours)

    return _at


@pytest.fixture
def make_message(at):
    """Return a factory for Message instances with sensible defaults."""
    from mail_threading.models import Message

    def _make(identifier: str, hours: float | None = 0, **fields) -> "Message":
        fields.setdefault("subject", f"Subject {identifier}")
        fields.setdefault("sender", f"sender{identifier}@example.com")
        return Message(
            identifier=identifier,
            timestamp=at(hours) if hours is not None else None,
            **fields,
        )

    return _make


@pytest.fixture
def sample_inbox_response() -> dict:
    """Provide a mail API inbox list response."""
    return {
        "success": True,
        "emails": [
            {
                "uid": 101,
                "from": '"Jane Doe" <jane@example.com>',
                "to": "me@example.com",
                "subject": "Order #9",
                "messageId": "<1@mail>",
                "date": "1/3/2026, 9:15:00 am",
                "isRead": True,
                "attachments": [{"filename": "invoice.pdf", "size": 2048}],
            },
            {
                "uid": 102,
                "from": "jane@example.com",
                "fromName": "Jane Doe",
                "to": "me@example.com",
                "subject": "Re: Order #9",
                "messageId": "<3@mail>",
                "inReplyTo": "<2@mail>",
                "references": "<1@mail> <2@mail>",
                "timestamp": "2026-03-01T11:00:00Z",
                "isRead": False,
            },
            {
                "_id": "65f0c0ffee",
                "sender": "billing@vendor.example",
                "subject": "Your statement",
                "text": "Statement attached",
                "createdAt": "not-a-date",
            },
        ],
    }


@pytest.fixture
def sample_sent_response() -> dict:
    """Provide a mail API sent-folder list response."""
    return {
        "data": {
            "emailAccount": {"email": "me@example.com", "displayName": "Me Myself"},
            "emails": [
                {
                    "uid": 7,
                    "to": "Jane Doe <jane@example.com>",
                    "subject": "Re: Order #9",
                    "messageId": "<2@mail>",
                    "inReplyTo": "<1@mail>",
                    "references": "<1@mail>",
                    "date": "1/3/2026, 10:00:00 am",
                    "content": "Thanks, confirmed.",
                },
            ],
        }
    }
