"""Twitch chat: frame parsing, message streams and rendering."""
