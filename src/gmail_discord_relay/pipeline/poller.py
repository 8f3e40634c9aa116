"""Periodic poll-and-forward loop: unread Gmail messages → Discord embeds."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from gmail_discord_relay.core.gmail_client import GmailClient
from gmail_discord_relay.core.models import MessageStub, PollStats
from gmail_discord_relay.core.parser import summarize
from gmail_discord_relay.notify.discord_notifier import DiscordNotifier
from gmail_discord_relay.notify.formatter import DEFAULT_COLOR, DEFAULT_TIME_FORMAT, build_embed

logger = logging.getLogger(__name__)


class MailPoller:
    """Relays unread mail from one sender to Discord on a fixed period.

    Each tick lists unread messages from the sender, fetches and summarizes
    each one, awaits delivery, then removes the UNREAD label. Errors inside a
    tick are logged and the loop carries on. Ticks never overlap; the period
    is measured from the start of one tick to the start of the next.

    Usage:
        poller = MailPoller(gmail_client, notifier, sender="billing@example.com")
        poller.start()
        ...
        await poller.stop()
    """

    def __init__(
        self,
        gmail_client: GmailClient,
        notifier: DiscordNotifier,
        *,
        sender: str,
        interval_seconds: float = 10.0,
        max_results: int = 1,
        color: str = DEFAULT_COLOR,
        time_format: str = DEFAULT_TIME_FORMAT,
        mark_read_on_failure: bool = True,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._gmail = gmail_client
        self._notifier = notifier
        self._sender = sender
        self._interval = interval_seconds
        self._max_results = max_results
        self._color = color
        self._time_format = time_format
        self._mark_read_on_failure = mark_read_on_failure

        self._stats = PollStats()
        self._task: asyncio.Task[None] | None = None
        self._stop_event: asyncio.Event | None = None

    @property
    def stats(self) -> PollStats:
        return self._stats

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_once(self) -> int:
        """Run one tick.

        Returns the number of messages delivered to Discord.
        """
        self._stats.ticks += 1
        self._stats.last_tick_at = datetime.now(timezone.utc)

        stubs = await asyncio.to_thread(
            self._gmail.list_unread_from, self._sender, self._max_results
        )
        if not stubs:
            logger.debug("No unread messages from %s", self._sender)
            return 0

        forwarded = 0
        for stub in stubs:
            self._stats.messages_seen += 1
            try:
                if await self._relay(stub):
                    forwarded += 1
            except Exception as e:
                self._stats.errors += 1
                logger.error("Failed to relay message %s: %s", stub.message_id, e)

        return forwarded

    async def _relay(self, stub: MessageStub) -> bool:
        """Fetch, forward and mark one message read."""
        raw = await asyncio.to_thread(self._gmail.get_message, stub.message_id)
        summary = summarize(raw)
        embed = build_embed(summary, color=self._color, time_format=self._time_format)

        delivered = await self._notifier.send(embed)
        if delivered:
            self._stats.forwarded += 1
        else:
            self._stats.delivery_failures += 1
            if not self._mark_read_on_failure:
                logger.warning("Delivery failed, leaving message %s unread", stub.message_id)
                return False

        await asyncio.to_thread(self._gmail.mark_read, stub.message_id)
        logger.info("Marked message %s read: %s", stub.message_id, summary.subject)
        return delivered

    def start(self) -> asyncio.Task[None]:
        """Schedule the polling loop on the running event loop."""
        if self._task is not None and not self._task.done():
            return self._task
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run(self._stop_event), name="gmail-poller")
        logger.info(
            "Polling unread mail from %s every %.1fs", self._sender, self._interval
        )
        return self._task

    async def stop(self, timeout: float | None = None) -> None:
        """Signal the loop to finish and wait for it.

        An in-flight tick gets ``timeout`` seconds (default: one interval) to
        complete before the task is cancelled.
        """
        if self._task is None:
            return
        if self._stop_event is not None:
            self._stop_event.set()
        grace = self._interval if timeout is None else timeout
        try:
            await asyncio.wait_for(self._task, timeout=grace)
        except asyncio.TimeoutError:
            logger.warning("Poller did not finish its tick in time, cancelled")
        except asyncio.CancelledError:
            # Re-raise unless it was the poll task itself that got cancelled
            if not self._task.cancelled():
                raise
        finally:
            self._task = None
            self._stop_event = None
        logger.info(
            "Poller stopped after %d ticks (%d forwarded, %d delivery failures, %d errors)",
            self._stats.ticks,
            self._stats.forwarded,
            self._stats.delivery_failures,
            self._stats.errors,
        )

    async def _run(self, stop: asyncio.Event) -> None:
        loop = asyncio.get_running_loop()

        while not stop.is_set():
            started = loop.time()
            try:
                await self.poll_once()
            except Exception:
                self._stats.errors += 1
                logger.exception("Error checking emails")

            remaining = self._interval - (loop.time() - started)
            if remaining <= 0:
                continue
            try:
                await asyncio.wait_for(stop.wait(), timeout=remaining)
            except asyncio.TimeoutError:
                pass
