"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for storage, messaging and video adapters
so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from core.models import Channel, FeedItem, InboundMessage, Moderator, ResolvedChannel


class StoragePort(Protocol):
    """Durable channel list; indices are dense and never reused."""

    def load_channels(self) -> List[Channel]:
        ...

    def insert_channel(self, index: int, channel: Channel) -> None:
        ...

    def save_channel(self, index: int, channel: Channel) -> None:
        ...


class MessagingPort(Protocol):
    """Discussion platform operations required by the core."""

    async def fetch_unread(self) -> Sequence[InboundMessage]:
        ...

    async def reply(self, to: str, subject: str, body: str) -> None:
        ...

    async def mark_read(self, message_id: str) -> None:
        ...

    async def publish(self, destination: str, title: str, url: str) -> None:
        ...

    async def list_moderators(self, destination: str) -> Sequence[Moderator]:
        ...


class VideoPort(Protocol):
    """Video platform operations required by the core."""

    async def resolve_channel(self, identifier: str, by_id: bool) -> Optional[ResolvedChannel]:
        ...

    async def fetch_items(self, feed_cursor: str) -> Sequence[FeedItem]:
        ...
