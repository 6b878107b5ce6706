"""Hotsapi Uploader desktop client - application lifecycle coordinator."""

__version__ = "1.4.2"
