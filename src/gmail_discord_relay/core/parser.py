"""Gmail message parser: subject, snippet and received time extraction."""

from __future__ import annotations

import html
import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from gmail_discord_relay.core.exceptions import ParseError
from gmail_discord_relay.core.models import MessageSummary

logger = logging.getLogger(__name__)

NO_SUBJECT = "No Subject"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def summarize(raw_message: dict[str, Any]) -> MessageSummary:
    """Extract a MessageSummary from a raw Gmail API message dict.

    Args:
        raw_message: Message dict from Gmail API (format=full).

    Returns:
        Parsed MessageSummary.

    Raises:
        ParseError: If the message has no ID or an unusable structure.
    """
    try:
        message_id = raw_message["id"]
    except (KeyError, TypeError) as e:
        raise ParseError(f"Message has no id: {e}") from e

    try:
        headers = _header_map(raw_message.get("payload") or {})
        subject = headers.get("subject") or NO_SUBJECT
        snippet = html.unescape(raw_message.get("snippet") or "")
        received_at = _received_at(raw_message.get("internalDate"), headers.get("date", ""))
    except Exception as e:
        raise ParseError(f"Failed to parse message {message_id}: {e}") from e

    return MessageSummary(
        message_id=message_id,
        subject=subject,
        snippet=snippet,
        received_at=received_at,
    )


def _header_map(payload: dict[str, Any]) -> dict[str, str]:
    """Map lowercased header names to values, first occurrence wins."""
    headers: dict[str, str] = {}
    for h in payload.get("headers", []):
        name = h.get("name", "").lower()
        if name and name not in headers:
            headers[name] = h.get("value", "")
    return headers


def _received_at(internal_date: str | int | None, date_header: str) -> datetime:
    """Resolve when a message was received.

    Gmail's ``internalDate`` (epoch milliseconds) is preferred; the RFC 2822
    ``Date`` header is the fallback, then the epoch.
    """
    if internal_date not in (None, ""):
        try:
            return datetime.fromtimestamp(int(internal_date) / 1000, tz=timezone.utc)
        except (TypeError, ValueError, OverflowError, OSError):
            logger.warning("Invalid internalDate: %r", internal_date)

    if date_header:
        try:
            parsed = parsedate_to_datetime(date_header)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
        except (TypeError, ValueError):
            logger.warning("Failed to parse date: %s", date_header)

    return EPOCH
