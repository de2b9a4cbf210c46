"""Deduplication helpers (core domain)."""

from __future__ import annotations

from enum import Enum
from typing import AbstractSet, Sequence, Set, Tuple

from core.models import Channel, FeedItem


class ItemDecision(str, Enum):
    SKIP = "skip"
    BACKFILL = "backfill"
    ANNOUNCE = "announce"


def classify_item(channel: Channel, item: FeedItem, seen: Set[str]) -> ItemDecision:
    """Decide what to do with one feed item.

    ``seen`` is the membership view of the channel's current window; it is
    passed separately so callers can keep it in sync while iterating.
    """

    if item.item_id in seen:
        return ItemDecision.SKIP
    if item.published_at < channel.registered_at:
        return ItemDecision.BACKFILL
    return ItemDecision.ANNOUNCE


def trim_window(
    item_ids: Sequence[str], limit: int, keep: AbstractSet[str] = frozenset()
) -> Tuple[str, ...]:
    """Drop the oldest ids until at most ``limit`` remain; 0 disables the cap.

    ``item_ids`` is ordered oldest first. Ids in ``keep`` (the current feed
    page) are never dropped, so the window may exceed ``limit`` when the page
    alone is larger.
    """

    if limit <= 0 or len(item_ids) <= limit:
        return tuple(item_ids)
    excess = len(item_ids) - limit
    kept = []
    for item_id in item_ids:
        if excess > 0 and item_id not in keep:
            excess -= 1
            continue
        kept.append(item_id)
    return tuple(kept)


class HandledMessages:
    """Process-wide record of inbox message ids already admitted.

    Append-only: ids are never forgotten while the process runs, so a
    redelivered message is a no-op.
    """

    def __init__(self) -> None:
        self._ids: Set[str] = set()

    def __len__(self) -> int:
        return len(self._ids)

    def seen(self, message_id: str) -> bool:
        return message_id in self._ids

    def mark(self, message_id: str) -> None:
        self._ids.add(message_id)
