"""Feed polling pipeline.

This module is integration-agnostic. It only relies on ports for the video
platform and announcements, plus the registry for persistence.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, List, Set

from core.config import MonitorConfig
from core.dedup import ItemDecision, classify_item, trim_window
from core.models import Channel, FeedItem
from core.ports import MessagingPort, VideoPort
from core.registry import ChannelRegistry

LOGGER = logging.getLogger(__name__)


@dataclass
class PollReport:
    """Counters for one feed cycle."""

    polled: int = 0
    skipped: int = 0
    announced: int = 0
    backfilled: int = 0
    failed: int = 0


class FeedMonitor:
    """Detects new uploads per channel and announces each one."""

    def __init__(
        self,
        registry: ChannelRegistry,
        video: VideoPort,
        messaging: MessagingPort,
        config: MonitorConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._registry = registry
        self._video = video
        self._messaging = messaging
        self._config = config
        self._clock = clock

    def _link(self, item_id: str) -> str:
        return f"{self._config.link_prefix}{item_id}"

    async def poll_all(self) -> PollReport:
        """Run one cycle over every registered channel, sequentially."""

        report = PollReport()
        # Snapshot of indices: channels appended mid-cycle wait for the next one.
        for index in range(len(self._registry)):
            await self.poll_channel(index, report)
        return report

    async def poll_channel(self, index: int, report: PollReport) -> None:
        channel = self._registry.get(index)
        try:
            items = await self._video.fetch_items(channel.feed_cursor)
        except Exception:
            LOGGER.exception(
                "Failed to get uploads for channel '%s' (%s)", channel.display_name, channel.channel_id
            )
            report.skipped += 1
            return

        window: List[str] = list(channel.seen_item_ids)
        seen = set(window)
        # Feeds list newest first; the window is kept oldest first.
        fresh: List[FeedItem] = []
        for item in items:
            decision = classify_item(channel, item, seen)
            if decision is ItemDecision.SKIP:
                continue
            if decision is ItemDecision.ANNOUNCE:
                try:
                    await self._messaging.publish(channel.destination, item.title, self._link(item.item_id))
                except Exception as exc:
                    # Left unseen so the next cycle retries the announcement.
                    LOGGER.warning("Failed to submit \"%s\", trying again later: %s", item.title, exc)
                    report.failed += 1
                    continue
                LOGGER.info(
                    "Submitted \"%s\" from \"%s\" to /r/%s",
                    item.title,
                    channel.display_name,
                    channel.destination,
                )
                report.announced += 1
            else:
                report.backfilled += 1
            fresh.append(item)
            seen.add(item.item_id)

        window.extend(item.item_id for item in sorted(fresh, key=lambda item: item.published_at))
        page = {item.item_id for item in items}
        updated = self._advance(channel, window, page)
        try:
            self._registry.update(index, updated)
        except Exception:
            # Unsaved ids stay unseen; the next cycle may announce them again.
            LOGGER.exception(
                "Failed to save poll state for channel '%s' (%s)", channel.display_name, channel.channel_id
            )
            report.skipped += 1
            return
        report.polled += 1

    def _advance(self, channel: Channel, window: List[str], page: Set[str]) -> Channel:
        return replace(
            channel,
            seen_item_ids=trim_window(window, self._config.seen_window, keep=page),
            last_polled_at=int(self._clock()),
        )
