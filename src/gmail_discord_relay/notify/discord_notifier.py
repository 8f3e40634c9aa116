"""Deliver embeds to a fixed Discord channel."""

from __future__ import annotations

import asyncio
import logging

import aiohttp
import discord

from gmail_discord_relay.core.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class DiscordNotifier:
    """Sends embeds to one channel through an already logged-in client."""

    def __init__(self, client: discord.Client, channel_id: int) -> None:
        self._client = client
        self._channel_id = channel_id

    @property
    def channel_id(self) -> int:
        return self._channel_id

    async def _resolve_channel(self) -> discord.abc.Messageable:
        """Look the channel up in the client cache, then through the API."""
        channel = self._client.get_channel(self._channel_id)
        if channel is None:
            channel = await self._client.fetch_channel(self._channel_id)
        if not isinstance(channel, discord.abc.Messageable):
            raise DeliveryError(f"Channel {self._channel_id} cannot receive messages")
        return channel

    async def send(self, embed: discord.Embed) -> bool:
        """Deliver one embed.

        Failures are logged and reported through the return value, never raised.

        Returns:
            True if Discord accepted the message.
        """
        try:
            channel = await self._resolve_channel()
            await channel.send(embeds=[embed])
        except (
            discord.DiscordException,
            DeliveryError,
            aiohttp.ClientError,
            OSError,
            asyncio.TimeoutError,
        ) as e:
            logger.error("Failed to send to Discord channel %s: %s", self._channel_id, e)
            return False

        logger.info("Email sent to Discord!")
        return True
