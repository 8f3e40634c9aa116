"""Build Discord embeds from message summaries."""

from __future__ import annotations

from datetime import tzinfo

import discord

from gmail_discord_relay.core.models import MessageSummary

# Discord rejects embeds over these lengths
TITLE_LIMIT = 256
DESCRIPTION_LIMIT = 4096

DEFAULT_COLOR = "#34d399"
DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def format_received_time(
    summary: MessageSummary,
    time_format: str = DEFAULT_TIME_FORMAT,
    tz: tzinfo | None = None,
) -> str:
    """Render the received time in ``tz``, or the host's local timezone when None."""
    return summary.received_at.astimezone(tz).strftime(time_format)


def build_embed(
    summary: MessageSummary,
    *,
    color: str = DEFAULT_COLOR,
    time_format: str = DEFAULT_TIME_FORMAT,
    tz: tzinfo | None = None,
) -> discord.Embed:
    """Format a message summary as a Discord embed.

    Title is the subject, description the snippet and the footer carries the
    received time.
    """
    embed = discord.Embed(
        title=_truncate(summary.subject, TITLE_LIMIT),
        description=_truncate(summary.snippet, DESCRIPTION_LIMIT) or None,
        colour=discord.Colour.from_str(color),
    )
    embed.set_footer(text=f"Received at {format_received_time(summary, time_format, tz)}")
    return embed
