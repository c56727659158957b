#!/usr/bin/env python3
"""Main entry point for the twch command line client."""

import argparse
import asyncio
import logging
import sys

import aiohttp

DEFAULT_LIMIT = 10


def setup_logging(level: int = logging.INFO) -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
        ],
    )

    # Suppress noisy third-party loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="twch", description="Browse Twitch streams and chat.")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    list_parser = subparsers.add_parser("list", help="list top live streams (default)")
    list_parser.add_argument("-n", type=int, default=DEFAULT_LIMIT, help="number of streams")

    search_parser = subparsers.add_parser("search", help="search live channels")
    search_parser.add_argument("query")
    search_parser.add_argument("-n", type=int, default=DEFAULT_LIMIT, help="number of results")

    view_parser = subparsers.add_parser("view", help="print a channel's chat")
    view_parser.add_argument("channel")

    auth_parser = subparsers.add_parser("auth", help="store the OAuth token in the system keyring")
    auth_group = auth_parser.add_mutually_exclusive_group(required=True)
    auth_group.add_argument("token", nargs="?")
    auth_group.add_argument("--clear", action="store_true", help="remove the stored token")

    return parser


async def list_streams(limit: int) -> None:
    from .api.twitch import TwitchApiClient
    from .core.models import format_streams
    from .core.settings import Settings

    async with TwitchApiClient.from_settings(Settings.load()) as client:
        print(format_streams(await client.get_streams(limit)))


async def search_channels(query: str, limit: int) -> None:
    from .api.twitch import TwitchApiClient
    from .core.models import format_streams
    from .core.settings import Settings

    async with TwitchApiClient.from_settings(Settings.load()) as client:
        print(format_streams(await client.search_channels(query, limit)))


async def view_channel(channel: str) -> None:
    from .chat.connection import open_channel_stream
    from .chat.render import format_message

    stream = await open_channel_stream(channel)
    try:
        async for message in stream:
            print(format_message(message), flush=True)
    finally:
        await stream.aclose()


def store_token(token: str | None, clear: bool) -> int:
    from .core.credential_store import KEY_OAUTH_TOKEN, delete_secret, is_available, store_secret
    from .core.settings import strip_oauth_prefix

    if clear:
        delete_secret(KEY_OAUTH_TOKEN)
        logging.info("OAuth token removed from keyring")
        return 0

    if not is_available() or not store_secret(KEY_OAUTH_TOKEN, strip_oauth_prefix(token or "")):
        logging.error("No usable system keyring; set OAUTH_TOKEN in the environment instead")
        return 1
    logging.info("OAuth token stored in keyring")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    from .api.base import ApiError
    from .core.settings import ConfigError

    command = args.command or "list"
    try:
        if command == "list":
            asyncio.run(list_streams(getattr(args, "n", DEFAULT_LIMIT)))
        elif command == "search":
            asyncio.run(search_channels(args.query, args.n))
        elif command == "view":
            asyncio.run(view_channel(args.channel))
        elif command == "auth":
            return store_token(args.token, args.clear)
    except KeyboardInterrupt:
        return 130
    except (ApiError, ConfigError, aiohttp.ClientError, OSError) as e:
        logging.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
