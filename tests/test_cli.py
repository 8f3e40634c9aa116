"""Tests for CLI argument parsing and command dispatch."""

from __future__ import annotations

import argparse
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from gmail_discord_relay import cli
from gmail_discord_relay.config.settings import RelaySettings
from gmail_discord_relay.core.models import MessageStub

from conftest import make_raw_message


@pytest.fixture
def settings(tmp_path: Path) -> RelaySettings:
    return RelaySettings(
        _env_file=None,
        bot_token="discord-token",
        channel_id=42,
        email_sender="billing@example.com",
        credentials_path=tmp_path / "credentials.json",
        token_path=tmp_path / "token.json",
    )


def _run_main(settings: RelaySettings, argv: list[str]) -> None:
    with patch("gmail_discord_relay.cli.RelaySettings", return_value=settings):
        cli.main(argv)


class TestParser:
    """Tests for build_parser()."""

    def test_run_defaults(self) -> None:
        args = cli.build_parser().parse_args(["run"])
        assert args.command == "run"
        assert args.interval is None

    def test_run_interval(self) -> None:
        args = cli.build_parser().parse_args(["run", "--interval", "60"])
        assert args.interval == 60.0

    def test_check_max_results(self) -> None:
        args = cli.build_parser().parse_args(["check", "--max-results", "5"])
        assert args.max_results == 5


class TestValidation:
    """Tests for _validate_args()."""

    def test_zero_interval_exits(self) -> None:
        with pytest.raises(SystemExit):
            cli._validate_args(argparse.Namespace(command="run", interval=0.0))

    def test_negative_max_results_exits(self) -> None:
        with pytest.raises(SystemExit):
            cli._validate_args(argparse.Namespace(command="check", max_results=-1))

    def test_valid_args_pass(self) -> None:
        cli._validate_args(argparse.Namespace(command="run", interval=5.0))


class TestMain:
    """Tests for main() dispatch and exit codes."""

    def test_no_command_exits_1(self) -> None:
        with pytest.raises(SystemExit) as excinfo:
            cli.main([])
        assert excinfo.value.code == 1

    def test_run_builds_bot_and_runs_with_token(self, settings: RelaySettings) -> None:
        with patch("gmail_discord_relay.cli.create_bot") as mock_create:
            _run_main(settings, ["run", "--interval", "30"])

        assert settings.poll_interval_seconds == 30
        mock_create.return_value.run.assert_called_once_with("discord-token", log_handler=None)

    def test_run_without_token_exits_1(
        self, settings: RelaySettings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        settings.bot_token = None

        with patch("gmail_discord_relay.cli.create_bot") as mock_create:
            with pytest.raises(SystemExit) as excinfo:
                _run_main(settings, ["run"])

        assert excinfo.value.code == 1
        assert "BOT_TOKEN" in capsys.readouterr().err
        mock_create.assert_not_called()

    def test_run_interrupted_exits_130(self, settings: RelaySettings) -> None:
        with patch("gmail_discord_relay.cli.create_bot") as mock_create:
            mock_create.return_value.run.side_effect = KeyboardInterrupt
            with pytest.raises(SystemExit) as excinfo:
                _run_main(settings, ["run"])

        assert excinfo.value.code == 130

    def test_authorize_reports_token_path(
        self, settings: RelaySettings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("gmail_discord_relay.cli.CredentialStore") as mock_store_cls:
            mock_store_cls.return_value.token_path = settings.token_path
            _run_main(settings, ["authorize"])

        mock_store_cls.return_value.authorize.assert_called_once_with()
        assert str(settings.token_path) in capsys.readouterr().out

    def test_check_lists_without_relaying(
        self, settings: RelaySettings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with (
            patch("gmail_discord_relay.cli.CredentialStore"),
            patch("gmail_discord_relay.cli.build_gmail_service"),
            patch("gmail_discord_relay.cli.GmailClient") as mock_client_cls,
        ):
            gmail = mock_client_cls.return_value
            gmail.list_unread_from.return_value = [MessageStub("msg_001", "t1")]
            gmail.get_message.return_value = make_raw_message("msg_001")
            _run_main(settings, ["check"])

        gmail.list_unread_from.assert_called_once_with("billing@example.com", 1)
        gmail.mark_read.assert_not_called()
        out = capsys.readouterr().out
        assert "Invoice" in out
        assert "Payment due" in out

    def test_malformed_settings_exit_1(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Invalid environment values take the normal error path."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("CHANNEL_ID", "not-a-number")

        with pytest.raises(SystemExit) as excinfo:
            cli.main(["authorize"])

        assert excinfo.value.code == 1
        err = capsys.readouterr().err
        assert err.lstrip().startswith("Error:")
        assert "channel_id" in err
