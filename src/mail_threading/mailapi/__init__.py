"""Adapters for the remote mail API's list responses."""

from .parsing import page_payloads, parse_page, parse_timestamp, payload_to_message

__all__ = ["page_payloads", "parse_page", "parse_timestamp", "payload_to_message"]
