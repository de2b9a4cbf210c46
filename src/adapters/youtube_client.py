"""YouTube Data API adapter.

Uses google-api-python-client for channel lookups and uploads playlists and
satisfies the core VideoPort.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from googleapiclient.discovery import build

from core.models import FeedItem, ResolvedChannel


def parse_published_at(value: str) -> int:
    """Convert an RFC 3339 timestamp (``2024-01-01T12:00:00Z``) to epoch seconds."""

    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def channel_from_response(response: Mapping[str, Any]) -> Optional[ResolvedChannel]:
    """Return the first channel of a ``channels.list`` response, if usable."""

    items = response.get("items") or []
    if not items:
        return None
    item = items[0]
    uploads = item.get("contentDetails", {}).get("relatedPlaylists", {}).get("uploads")
    if not item.get("id") or not uploads:
        return None
    return ResolvedChannel(
        channel_id=item["id"],
        display_name=item.get("snippet", {}).get("title") or item["id"],
        feed_cursor=uploads,
    )


def items_from_response(response: Mapping[str, Any]) -> List[FeedItem]:
    """Map a ``playlistItems.list`` response to feed items in source order."""

    items: List[FeedItem] = []
    for entry in response.get("items") or []:
        snippet = entry.get("snippet", {})
        details = entry.get("contentDetails", {})
        video_id = details.get("videoId") or snippet.get("resourceId", {}).get("videoId")
        published = details.get("videoPublishedAt") or snippet.get("publishedAt")
        if not video_id or not published:
            continue
        items.append(
            FeedItem(
                item_id=video_id,
                published_at=parse_published_at(published),
                title=snippet.get("title") or video_id,
            )
        )
    return items


class YouTubeVideoSource:
    """VideoPort implementation backed by the YouTube Data API v3."""

    def __init__(self, api_key: str, page_size: int = 50, service: Any = None) -> None:
        self._youtube = service or build("youtube", "v3", developerKey=api_key, static_discovery=False)
        self._page_size = page_size

    def _resolve(self, identifier: str, by_id: bool) -> Optional[ResolvedChannel]:
        params = {"part": "id,snippet,contentDetails"}
        if by_id:
            params["id"] = identifier
        else:
            params["forUsername"] = identifier
        response = self._youtube.channels().list(**params).execute()
        return channel_from_response(response)

    def _items(self, feed_cursor: str) -> List[FeedItem]:
        response = (
            self._youtube.playlistItems()
            .list(part="snippet,contentDetails", playlistId=feed_cursor, maxResults=self._page_size)
            .execute()
        )
        return items_from_response(response)

    async def resolve_channel(self, identifier: str, by_id: bool) -> Optional[ResolvedChannel]:
        return await asyncio.to_thread(self._resolve, identifier, by_id)

    async def fetch_items(self, feed_cursor: str) -> List[FeedItem]:
        return await asyncio.to_thread(self._items, feed_cursor)
