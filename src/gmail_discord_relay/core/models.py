"""Dataclasses for the relay domain model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MessageStub:
    """Lightweight message reference from Gmail list API."""

    message_id: str
    thread_id: str


@dataclass(frozen=True)
class MessageSummary:
    """Fields extracted from one Gmail message for a notification."""

    message_id: str
    subject: str
    snippet: str
    received_at: datetime


@dataclass
class PollStats:
    """Mutable counters for poller status reporting."""

    ticks: int = 0
    messages_seen: int = 0
    forwarded: int = 0
    delivery_failures: int = 0
    errors: int = 0
    last_tick_at: datetime | None = None
