"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_LINK_PREFIX = "https://www.youtube.com/watch?v="
DEFAULT_DOCS_URL = "https://www.reddit.com/r/ChannelBot/wiki/api"


@dataclass(frozen=True)
class MonitorConfig:
    """Feed monitor settings.

    seen_window caps the per-channel history of item ids (0 = unbounded).
    """

    link_prefix: str = DEFAULT_LINK_PREFIX
    seen_window: int = 200


@dataclass(frozen=True)
class PollingConfig:
    """Intervals (seconds) of the two periodic tasks."""

    inbox_interval: float = 30.0
    feed_interval: float = 300.0


@dataclass(frozen=True)
class ReplyConfig:
    """Settings consumed by reply formatting."""

    docs_url: str = DEFAULT_DOCS_URL
