"""Gmail API client for finding unread messages from a sender, fetching and marking them read."""

from __future__ import annotations

import logging
import random
import time
from typing import Any

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from gmail_discord_relay.core.exceptions import GmailRelayError, RateLimitError
from gmail_discord_relay.core.models import MessageStub

logger = logging.getLogger(__name__)

UNREAD_LABEL = "UNREAD"


def _is_rate_limit_error(exc: Exception) -> bool:
    """Check whether an exception represents a Gmail API 429 rate limit."""
    if isinstance(exc, HttpError) and exc.status_code == 429:
        return True
    error_str = str(exc)
    return "429" in error_str or "rateLimitExceeded" in error_str


def build_sender_query(sender: str) -> str:
    """Build the Gmail search query for unread mail from one sender."""
    sender = sender.strip()
    if not sender:
        raise ValueError("sender must not be empty")
    return f"from:{sender} is:unread"


class GmailClient:
    """Thin wrapper around the Gmail messages API used by the relay."""

    def __init__(
        self,
        service: Resource,
        user_id: str = "me",
        *,
        max_retries: int = 3,
        initial_backoff_seconds: float = 1.0,
        max_backoff_seconds: float = 30.0,
        num_retries: int = 2,
    ) -> None:
        self._service = service
        self._user_id = user_id
        self._max_retries = max_retries
        self._initial_backoff = initial_backoff_seconds
        self._max_backoff = max_backoff_seconds
        self._num_retries = num_retries

    def _execute_with_retry(self, request: Any, context: str) -> Any:
        """Execute a single API request with exponential backoff on 429 errors.

        Args:
            request: A googleapiclient HttpRequest object.
            context: Description for log messages (e.g. "list unread messages").

        Returns:
            The API response dict.

        Raises:
            RateLimitError: When retries are exhausted on 429 errors.
            GmailRelayError: On non-rate-limit API errors.
        """
        backoff = self._initial_backoff

        for attempt in range(self._max_retries + 1):
            try:
                return request.execute(num_retries=self._num_retries)
            except Exception as e:
                if not _is_rate_limit_error(e):
                    raise GmailRelayError(f"Failed to {context}: {e}") from e
                if attempt >= self._max_retries:
                    raise RateLimitError(
                        f"Rate limited during {context} after "
                        f"{self._max_retries} retries: {e}"
                    ) from e
                sleep_time = random.uniform(0, min(backoff, self._max_backoff))
                logger.warning(
                    "Rate limited during %s (attempt %d/%d), sleeping %.2fs",
                    context, attempt + 1, self._max_retries, sleep_time,
                )
                time.sleep(sleep_time)
                backoff = min(backoff * 2, self._max_backoff)

        raise RateLimitError(f"Rate limited during {context} after {self._max_retries} retries")

    def list_unread_from(self, sender: str, max_results: int = 1) -> list[MessageStub]:
        """List unread messages from one sender, newest first.

        Args:
            sender: Email address (or any Gmail ``from:`` operand).
            max_results: Cap on returned stubs.

        Returns:
            MessageStub list, empty when nothing matches.
        """
        request = self._service.users().messages().list(
            userId=self._user_id,
            q=build_sender_query(sender),
            maxResults=max_results,
        )
        response = self._execute_with_retry(request, "list unread messages")
        messages = response.get("messages") or []
        stubs = [
            MessageStub(message_id=msg["id"], thread_id=msg.get("threadId", ""))
            for msg in messages
        ]
        logger.debug("Found %d unread message(s) from %s", len(stubs), sender)
        return stubs

    def get_message(self, message_id: str) -> dict[str, Any]:
        """Fetch a full message resource by ID."""
        request = self._service.users().messages().get(
            userId=self._user_id,
            id=message_id,
            format="full",
        )
        return self._execute_with_retry(request, f"get message {message_id}")

    def mark_read(self, message_id: str) -> None:
        """Remove the UNREAD label from a message."""
        request = self._service.users().messages().modify(
            userId=self._user_id,
            id=message_id,
            body={"removeLabelIds": [UNREAD_LABEL]},
        )
        self._execute_with_retry(request, f"mark message {message_id} read")
        logger.debug("Marked message %s read", message_id)
