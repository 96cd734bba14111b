"""Asyncio actor building blocks: mailboxes, signals, errors and a local registry."""

__version__ = "0.19.2"

__all__ = ["channel", "errors", "mailbox", "registry", "remote_errors"]