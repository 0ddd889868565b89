"""Unit tests for mail API payload parsing helpers."""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from mail_threading.mailapi import page_payloads, parse_page, parse_timestamp, payload_to_message
from mail_threading.models import Folder


class TestParseTimestamp:
    """Test suite for tolerant timestamp parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("3/2/2026, 10:40:12 pm", datetime(2026, 2, 3, 22, 40, 12, tzinfo=timezone.utc)),
            ("3/2/2026, 10:40:12 PM", datetime(2026, 2, 3, 22, 40, 12, tzinfo=timezone.utc)),
            ("3/2/2026, 12:05:00 am", datetime(2026, 2, 3, 0, 5, 0, tzinfo=timezone.utc)),
            ("3/2/2026, 12:05:00 pm", datetime(2026, 2, 3, 12, 5, 0, tzinfo=timezone.utc)),
            ("3/2/2026, 22:40:12", datetime(2026, 2, 3, 22, 40, 12, tzinfo=timezone.utc)),
            ("3/2/2026,22:40", datetime(2026, 2, 3, 22, 40, 0, tzinfo=timezone.utc)),
            ("3/2/2026", datetime(2026, 2, 3, tzinfo=timezone.utc)),
            ("2026-03-02T10:00:00Z", datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)),
            ("2026-03-02T10:00:00+05:30", datetime(2026, 3, 2, 4, 30, tzinfo=timezone.utc)),
            ("Mon, 02 Mar 2026 10:40:12 +0000", datetime(2026, 3, 2, 10, 40, 12, tzinfo=timezone.utc)),
            (1_700_000_000, datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)),
            (1_700_000_000_000, datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)),
            ("1700000000000", datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)),
            ("170000000", datetime.fromtimestamp(170_000_000, tz=timezone.utc)),
            ("20260301", datetime(2026, 3, 1, tzinfo=timezone.utc)),
            (date(2026, 3, 2), datetime(2026, 3, 2, tzinfo=timezone.utc)),
            (datetime(2026, 3, 2, 8, 0), datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)),
        ],
    )
    def test_accepts_known_formats(self, value, expected) -> None:
        assert parse_timestamp(value) == expected

    @pytest.mark.parametrize(
        "value",
        [
            "not-a-date",
            "",
            "   ",
            None,
            True,
            "31/2/2026",
            "3/2/2026, 25:00:00",
            {"$date": 1},
            "20261399",
            "12345",
            "0",
        ],
    )
    def test_rejects_unusable_values(self, value) -> None:
        assert parse_timestamp(value) is None

    def test_naive_values_use_given_zone(self) -> None:
        parsed = parse_timestamp("3/2/2026, 10:40:12 am", ZoneInfo("Asia/Kolkata"))

        assert parsed is not None
        assert parsed.utcoffset() == timedelta(hours=5, minutes=30)
        assert parsed.hour == 10

    def test_compact_dates_use_given_zone(self) -> None:
        parsed = parse_timestamp("20260301", ZoneInfo("Asia/Kolkata"))

        assert parsed is not None
        assert parsed.utcoffset() == timedelta(hours=5, minutes=30)
        assert (parsed.year, parsed.month, parsed.day) == (2026, 3, 1)


class TestPayloadToMessage:
    """Test suite for payload_to_message."""

    def test_alternative_field_names(self) -> None:
        message = payload_to_message(
            {
                "_id": "65f0c0ffee",
                "sender": "ann@example.com",
                "senderName": "Ann",
                "recipient": "me@example.com",
                "text": "hello there",
                "read": True,
                "starred": True,
                "folder": "SENT",
                "message_id": "<x@mail>",
                "In-Reply-To": "<y@mail>",
                "threadId": "t-1",
            }
        )

        assert message.identifier == "65f0c0ffee"
        assert message.sender == "ann@example.com"
        assert message.sender_name == "Ann"
        assert message.recipient == "me@example.com"
        assert message.body == "hello there"
        assert message.is_read is True
        assert message.is_starred is True
        assert message.folder == Folder.SENT
        assert message.message_id == "<x@mail>"
        assert message.in_reply_to == "<y@mail>"
        assert message.thread_id == "t-1"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("false", False),
            ("False", False),
            ("0", False),
            ("no", False),
            ("true", True),
            ("TRUE", True),
            ("1", True),
            (1, True),
            (0, False),
            (True, True),
            ("maybe", False),
        ],
    )
    def test_string_flags(self, raw, expected) -> None:
        message = payload_to_message({"id": "1", "isRead": raw, "isStarred": raw})

        assert message.is_read is expected
        assert message.is_starred is expected

    def test_numeric_uid_wins_over_database_id(self) -> None:
        message = payload_to_message({"uid": 42, "_id": "abc", "id": 3})

        assert message.identifier == "42"

    def test_composite_identifier_from_message_id(self) -> None:
        message = payload_to_message({"messageId": "<m@mail>"}, folder=Folder.SENT)

        assert message.identifier == "sent:<m@mail>"

    def test_missing_everything_degrades_to_defaults(self) -> None:
        message = payload_to_message({})

        assert message.identifier == ""
        assert message.folder == Folder.INBOX
        assert message.subject == ""
        assert message.timestamp is None
        assert message.attachments == []
        assert message.is_read is False

    def test_unknown_folder_becomes_other(self) -> None:
        assert payload_to_message({"folder": "Archive"}).folder == Folder.OTHER

    def test_explicit_folder_overrides_record(self) -> None:
        assert payload_to_message({"folder": "inbox"}, folder=Folder.SENT).folder == Folder.SENT

    def test_references_list_is_joined(self) -> None:
        message = payload_to_message({"references": ["<a@mail>", "<b@mail>"]})

        assert message.references == "<a@mail> <b@mail>"

    def test_recipient_address_objects(self) -> None:
        message = payload_to_message(
            {"to": [{"name": "Jane Doe", "address": "jane@example.com"}, {"address": "bob@example.com"}]}
        )

        assert message.recipient == "Jane Doe <jane@example.com>, bob@example.com"

    def test_attachments_are_sniffed(self) -> None:
        message = payload_to_message(
            {
                "attachments": [
                    "report.pdf",
                    {"filename": "photo.png", "size": 10},
                    {"name": "blob.unknownext", "size": -1},
                    {"fileName": "notes", "contentType": "text/plain", "size": "12"},
                    42,
                ]
            }
        )

        kinds = [(a.filename, a.content_type, a.size) for a in message.attachments]
        assert kinds == [
            ("report.pdf", "application/pdf", None),
            ("photo.png", "image/png", 10),
            ("blob.unknownext", "application/octet-stream", None),
            ("notes", "text/plain", 12),
        ]
        assert [a.is_image for a in message.attachments] == [False, True, False, False]


class TestPagePayloads:
    """Test suite for list response envelope handling."""

    @pytest.mark.parametrize(
        "response",
        [
            [{"uid": 1}],
            {"emails": [{"uid": 1}]},
            {"data": {"emails": [{"uid": 1}]}},
            {"data": [{"uid": 1}]},
        ],
    )
    def test_supported_shapes(self, response) -> None:
        assert page_payloads(response) == [{"uid": 1}]

    @pytest.mark.parametrize("response", [None, "text", {"data": "x"}, {"emails": None}, 3])
    def test_unusable_shapes_yield_nothing(self, response) -> None:
        assert page_payloads(response) == []

    def test_non_dict_records_are_ignored(self) -> None:
        assert page_payloads([{"uid": 1}, "junk", None]) == [{"uid": 1}]


class TestParsePage:
    """Test suite for parse_page."""

    def test_inbox_page(self, sample_inbox_response, mock_settings) -> None:
        messages = parse_page(sample_inbox_response, settings=mock_settings)

        assert [m.identifier for m in messages] == ["101", "102", "65f0c0ffee"]
        assert messages[0].timestamp == datetime(2026, 3, 1, 9, 15, tzinfo=timezone.utc)
        assert messages[0].attachments[0].content_type == "application/pdf"
        assert messages[2].timestamp is None
        assert all(m.folder == Folder.INBOX for m in messages)

    def test_sent_page_is_stamped_with_account(self, sample_sent_response, mock_settings) -> None:
        (message,) = parse_page(sample_sent_response, folder=Folder.SENT, settings=mock_settings)

        assert message.folder == Folder.SENT
        assert message.sender == "me@example.com"
        assert message.sender_name == "Me Myself"
        assert message.body == "Thanks, confirmed."

    def test_sent_page_without_account_uses_default_name(self, mock_settings) -> None:
        (message,) = parse_page(
            [{"uid": 1, "from": "me@example.com"}], folder=Folder.SENT, settings=mock_settings
        )

        assert message.sender == "me@example.com"
        assert message.sender_name == "You"

    def test_default_timezone_applies(self) -> None:
        from mail_threading.config import Settings

        settings = Settings(default_timezone="Asia/Kolkata")
        (message,) = parse_page([{"uid": 1, "date": "1/3/2026, 9:15:00 am"}], settings=settings)

        assert message.timestamp == datetime(2026, 3, 1, 3, 45, tzinfo=timezone.utc)
