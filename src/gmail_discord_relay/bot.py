"""Discord client that owns the relay's collaborators and lifecycle."""

from __future__ import annotations

import logging

import discord

from gmail_discord_relay.config.settings import RelaySettings
from gmail_discord_relay.core.auth import CredentialStore, build_gmail_service
from gmail_discord_relay.core.gmail_client import GmailClient
from gmail_discord_relay.notify.discord_notifier import DiscordNotifier
from gmail_discord_relay.pipeline.poller import MailPoller

logger = logging.getLogger(__name__)


class RelayBot(discord.Client):
    """Discord client that runs the mail poller for the lifetime of its session.

    The poller starts in ``setup_hook`` (after login, before the gateway
    connects) and is stopped before the session closes.
    """

    def __init__(self, *, intents: discord.Intents | None = None) -> None:
        super().__init__(intents=intents or discord.Intents(guilds=True))
        self._poller: MailPoller | None = None

    @property
    def poller(self) -> MailPoller | None:
        return self._poller

    def attach_poller(self, poller: MailPoller) -> None:
        if self._poller is not None and self._poller.is_running:
            raise RuntimeError("Poller already running")
        self._poller = poller

    async def setup_hook(self) -> None:
        if self._poller is None:
            logger.warning("No poller attached, nothing will be relayed")
            return
        self._poller.start()

    async def on_ready(self) -> None:
        if self.user is None:
            return
        logger.info("Logged in as %s (id=%s)", self.user, self.user.id)

    async def close(self) -> None:
        if self._poller is not None:
            await self._poller.stop()
        await super().close()


def create_bot(
    settings: RelaySettings,
    credential_store: CredentialStore | None = None,
) -> RelayBot:
    """Authorize Gmail access and wire the poller, notifier and bot together.

    Raises:
        ConfigurationError: If the channel or sender is not configured.
        AuthenticationError: If no credentials can be obtained.
    """
    settings.require("channel_id", "email_sender")
    settings.ensure_directories()
    store = credential_store or CredentialStore(
        settings.credentials_path,
        settings.token_path,
        oauth_port=settings.oauth_port,
    )
    creds = store.authorize()

    gmail = GmailClient(
        build_gmail_service(creds),
        max_retries=settings.max_retries,
        initial_backoff_seconds=settings.initial_backoff_seconds,
        max_backoff_seconds=settings.max_backoff_seconds,
        num_retries=settings.num_retries,
    )
    bot = RelayBot()
    notifier = DiscordNotifier(bot, settings.channel_id)
    bot.attach_poller(
        MailPoller(
            gmail,
            notifier,
            sender=settings.email_sender,
            interval_seconds=settings.poll_interval_seconds,
            max_results=settings.max_results_per_poll,
            color=settings.embed_color,
            time_format=settings.time_format,
            mark_read_on_failure=settings.mark_read_on_failure,
        )
    )
    return bot
