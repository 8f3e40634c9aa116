"""Gmail Discord Relay - Forward unread Gmail messages from one sender to a Discord channel."""

from gmail_discord_relay.bot import RelayBot, create_bot
from gmail_discord_relay.core.models import MessageStub, MessageSummary, PollStats
from gmail_discord_relay.pipeline.poller import MailPoller

__all__ = [
    "MailPoller",
    "MessageStub",
    "MessageSummary",
    "PollStats",
    "RelayBot",
    "create_bot",
]
