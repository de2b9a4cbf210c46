"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to Reddit or YouTube specific payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Channel:
    """One watched feed + destination pair, as owned by the registry."""

    channel_id: str
    display_name: str
    destination: str
    owner: str
    registered_at: int
    feed_cursor: str
    last_polled_at: Optional[int] = None
    seen_item_ids: Tuple[str, ...] = ()

    def key(self) -> Tuple[str, str]:
        """Return the uniqueness key; destinations compare case-insensitively."""

        return self.channel_id, self.destination.lower()


@dataclass(frozen=True)
class InboundMessage:
    """Private message (or comment reply) delivered to the bot's inbox."""

    id: str
    author: str
    subject: str
    body: str
    is_reply: bool = False


@dataclass(frozen=True)
class FeedItem:
    """A single upload as returned by the video platform."""

    item_id: str
    published_at: int
    title: str


@dataclass(frozen=True)
class ResolvedChannel:
    """Canonical channel identity returned by a channel lookup."""

    channel_id: str
    display_name: str
    feed_cursor: str


@dataclass(frozen=True)
class Moderator:
    name: str
    permissions: Tuple[str, ...]
