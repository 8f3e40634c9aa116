"""Shared fixtures for Gmail Discord Relay tests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from gmail_discord_relay.core.models import MessageSummary

# 2024-01-15 10:30:00 UTC in epoch milliseconds
INVOICE_INTERNAL_DATE = "1705314600000"


def make_raw_message(
    message_id: str = "msg_001",
    *,
    subject: str | None = "Invoice",
    snippet: str = "Payment due",
    internal_date: str | None = INVOICE_INTERNAL_DATE,
    extra_headers: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    """Build a Gmail API message dict (format=full) with the given fields."""
    headers = [
        {"name": "From", "value": "Billing <billing@example.com>"},
        {"name": "To", "value": "me@example.com"},
    ]
    if subject is not None:
        headers.append({"name": "Subject", "value": subject})
    headers.extend(extra_headers or [])

    raw: dict[str, Any] = {
        "id": message_id,
        "threadId": f"thread_{message_id}",
        "labelIds": ["INBOX", "UNREAD"],
        "snippet": snippet,
        "payload": {"mimeType": "text/plain", "headers": headers},
    }
    if internal_date is not None:
        raw["internalDate"] = internal_date
    return raw


@pytest.fixture
def invoice_raw() -> dict[str, Any]:
    """Raw Gmail API response for the 'Invoice' email."""
    return make_raw_message()


@pytest.fixture
def invoice_summary() -> MessageSummary:
    """Summary of the 'Invoice' email."""
    return MessageSummary(
        message_id="msg_001",
        subject="Invoice",
        snippet="Payment due",
        received_at=datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc),
    )
