"""CLI entry point for the Gmail Discord Relay."""

from __future__ import annotations

import argparse
import logging
import sys

from gmail_discord_relay.bot import create_bot
from gmail_discord_relay.config.settings import RelaySettings
from gmail_discord_relay.core.auth import CredentialStore, build_gmail_service
from gmail_discord_relay.core.gmail_client import GmailClient
from gmail_discord_relay.core.parser import summarize
from gmail_discord_relay.notify.formatter import format_received_time

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    """Configure logging with timestamp and module info."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gmail-discord-relay",
        description="Relay unread Gmail messages from one sender to a Discord channel",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Start polling and relaying")
    run_parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Override the polling period in seconds",
    )

    subparsers.add_parser("authorize", help="Authorize Gmail access and cache the token")

    check_parser = subparsers.add_parser(
        "check", help="Show unread messages from the sender without relaying them"
    )
    check_parser.add_argument(
        "--max-results",
        type=int,
        default=None,
        dest="max_results",
        help="Override how many unread messages to list",
    )

    return parser


def _validate_args(args: argparse.Namespace) -> None:
    """Reject non-positive overrides."""
    if getattr(args, "interval", None) is not None and args.interval <= 0:
        print("Error: --interval must be positive", file=sys.stderr)
        sys.exit(1)
    if getattr(args, "max_results", None) is not None and args.max_results <= 0:
        print("Error: --max-results must be positive", file=sys.stderr)
        sys.exit(1)


def _credential_store(settings: RelaySettings) -> CredentialStore:
    return CredentialStore(
        settings.credentials_path,
        settings.token_path,
        oauth_port=settings.oauth_port,
    )


def cmd_run(settings: RelaySettings, args: argparse.Namespace) -> None:
    settings.require("bot_token", "channel_id", "email_sender")
    if args.interval is not None:
        settings.poll_interval_seconds = args.interval

    bot = create_bot(settings, _credential_store(settings))
    # Logging is already configured; stop discord.py from installing its own handler
    bot.run(settings.bot_token.get_secret_value(), log_handler=None)


def cmd_authorize(settings: RelaySettings, args: argparse.Namespace) -> None:
    store = _credential_store(settings)
    store.authorize()
    print(f"Authorized. Token cached at {store.token_path}")


def cmd_check(settings: RelaySettings, args: argparse.Namespace) -> None:
    settings.require("email_sender")
    creds = _credential_store(settings).authorize()
    client = GmailClient(
        build_gmail_service(creds),
        max_retries=settings.max_retries,
        initial_backoff_seconds=settings.initial_backoff_seconds,
        max_backoff_seconds=settings.max_backoff_seconds,
        num_retries=settings.num_retries,
    )

    stubs = client.list_unread_from(
        settings.email_sender, args.max_results or settings.max_results_per_poll
    )
    print(f"\nFound {len(stubs)} unread message(s) from {settings.email_sender}:\n")
    for stub in stubs:
        summary = summarize(client.get_message(stub.message_id))
        received = format_received_time(summary, settings.time_format)
        print(f"  {stub.message_id}  {received}  {summary.subject}")
        if summary.snippet:
            print(f"      {summary.snippet}")


COMMANDS = {
    "run": cmd_run,
    "authorize": cmd_authorize,
    "check": cmd_check,
}


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    _validate_args(args)

    try:
        settings = RelaySettings()
        setup_logging(settings.log_level)
        COMMANDS[args.command](settings, args)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
