"""Application entry point for the channelbot watcher."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv

import settings
from adapters.reply_formatting import ReplyFormatter
from adapters.sqlite_storage import SQLiteStorage
from client import build_reddit_client, build_youtube_client
from core.config import MonitorConfig, PollingConfig, ReplyConfig
from core.dedup import HandledMessages
from core.dispatcher import CommandDispatcher
from core.inbox import InboxProcessor
from core.monitor import FeedMonitor
from core.registry import ChannelRegistry
from core.scheduler import run_periodic

NAME = "CHANNELBOT"
FONT = "small"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/channelbot.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _open_registry() -> ChannelRegistry:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    return ChannelRegistry(storage)


async def _serve(registry: ChannelRegistry) -> None:
    logger = logging.getLogger(__name__)

    messaging = build_reddit_client()
    video = build_youtube_client()
    polling = PollingConfig(inbox_interval=settings.INBOX_INTERVAL, feed_interval=settings.FEED_INTERVAL)

    formatter = ReplyFormatter(ReplyConfig(docs_url=settings.DOCS_URL))
    dispatcher = CommandDispatcher(registry, messaging, video, formatter.render)
    inbox = InboxProcessor(messaging, dispatcher, HandledMessages())
    monitor = FeedMonitor(
        registry,
        video,
        messaging,
        MonitorConfig(link_prefix=settings.LINK_PREFIX, seen_window=settings.SEEN_WINDOW),
    )

    async def _feed_cycle() -> None:
        report = await monitor.poll_all()
        logger.info(
            "Feed cycle complete: polled=%s, skipped=%s, announced=%s, backfilled=%s, failed=%s",
            report.polled,
            report.skipped,
            report.announced,
            report.backfilled,
            report.failed,
        )

    logger.info(
        "Polling inbox every %ss and %s channels every %ss",
        polling.inbox_interval,
        len(registry),
        polling.feed_interval,
    )
    # Independent tasks: a hung call in one only stalls that task's cycle.
    await asyncio.gather(
        run_periodic("inbox", polling.inbox_interval, inbox.poll),
        run_periodic("feed", polling.feed_interval, _feed_cycle),
    )


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting channelbot")
    registry = _open_registry()
    try:
        asyncio.run(_serve(registry))
    except KeyboardInterrupt:
        logger.info("Shutting down")


def _format_timestamp(value: Optional[int]) -> str:
    if value is None:
        return "never"
    return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def _list_channels() -> None:
    registry = _open_registry()
    channels = registry.list()
    if not channels:
        print("No channels registered yet.")
        return

    for index, channel in enumerate(channels):
        print(
            f"{index}. {channel.display_name} ({channel.channel_id}) -> /r/{channel.destination}"
            f" | by {channel.owner} | registered {_format_timestamp(channel.registered_at)}"
            f" | last poll {_format_timestamp(channel.last_polled_at)}"
            f" | {len(channel.seen_item_ids)} seen"
        )


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="channelbot")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the inbox and feed watchers")
    subparsers.add_parser("channels", help="List registered channels")

    args = parser.parse_args(argv)
    if args.command == "channels":
        _list_channels()
        return
    _run()


if __name__ == "__main__":
    main()
