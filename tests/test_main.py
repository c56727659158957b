"""Tests for the command line entry point."""

from pathlib import Path

import pytest

from twch import main as cli
from twch.core import credential_store


def test_parser_defaults():
    args = cli.build_parser().parse_args([])
    assert args.command is None
    assert args.verbose is False


def test_parser_search():
    args = cli.build_parser().parse_args(["search", "speedrun", "-n", "5"])
    assert (args.command, args.query, args.n) == ("search", "speedrun", 5)


def test_parser_auth_requires_token_or_clear():
    parser = cli.build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["auth"])
    assert parser.parse_args(["auth", "--clear"]).clear is True


def test_missing_credentials_exit_code(monkeypatch):
    monkeypatch.setenv("CLIENT_ID", "")
    monkeypatch.setenv("OAUTH_TOKEN", "")
    monkeypatch.setattr(credential_store, "get_secret", lambda key: None)
    monkeypatch.setattr("twch.core.settings.get_config_dir", lambda: Path("/nonexistent/twch"))
    assert cli.main(["list"]) == 1


def test_interrupt_exit_code(monkeypatch):
    async def interrupted(channel):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli, "view_channel", interrupted)
    assert cli.main(["view", "ronni"]) == 130


def test_auth_stores_stripped_token(monkeypatch):
    stored = {}
    monkeypatch.setattr(credential_store, "is_available", lambda: True)
    monkeypatch.setattr(
        credential_store, "store_secret", lambda key, value: stored.update({key: value}) or True
    )
    assert cli.main(["auth", "oauth:abc"]) == 0
    assert stored == {credential_store.KEY_OAUTH_TOKEN: "abc"}


def test_auth_without_keyring(monkeypatch):
    monkeypatch.setattr(credential_store, "is_available", lambda: False)
    assert cli.main(["auth", "abc"]) == 1
