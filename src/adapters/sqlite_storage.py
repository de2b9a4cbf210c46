"""SQLite storage adapter.

Implements the core StoragePort using a simple SQLite database.
"""

from __future__ import annotations

import json
import sqlite3
from typing import List

from core.models import Channel


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the StoragePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the channels table if it does not exist."""

        with self._connect() as conn:
            # One row per watched channel + subreddit pair.
            # Fields:
            # - idx: dense registry index (PRIMARY KEY), assigned on append
            # - channel_id: YouTube channel id
            # - display_name: channel title at registration time
            # - destination: subreddit announcements go to
            # - owner: reddit user who registered the pair
            # - registered_at: epoch seconds; older uploads are never announced
            # - last_polled_at: epoch seconds of the last successful poll
            # - seen_item_ids: JSON array of video ids already handled
            # - feed_cursor: uploads playlist id
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS channels (
                    idx INTEGER PRIMARY KEY,
                    channel_id TEXT NOT NULL,
                    display_name TEXT NOT NULL,
                    destination TEXT NOT NULL,
                    owner TEXT NOT NULL,
                    registered_at INTEGER NOT NULL,
                    last_polled_at INTEGER,
                    seen_item_ids TEXT NOT NULL DEFAULT '[]',
                    feed_cursor TEXT NOT NULL
                )
                """
            )

    def load_channels(self) -> List[Channel]:
        """Return every channel ordered by registry index."""

        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM channels ORDER BY idx").fetchall()
        return [_row_to_channel(row) for row in rows]

    def insert_channel(self, index: int, channel: Channel) -> None:
        """Insert a new row; fails if the index is already taken."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO channels (
                    idx,
                    channel_id,
                    display_name,
                    destination,
                    owner,
                    registered_at,
                    last_polled_at,
                    seen_item_ids,
                    feed_cursor
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (index, *_channel_values(channel)),
            )

    def save_channel(self, index: int, channel: Channel) -> None:
        """Overwrite the mutable columns of an existing row."""

        with self._connect() as conn:
            cur = conn.execute(
                """
                UPDATE channels SET
                    channel_id = ?,
                    display_name = ?,
                    destination = ?,
                    owner = ?,
                    registered_at = ?,
                    last_polled_at = ?,
                    seen_item_ids = ?,
                    feed_cursor = ?
                WHERE idx = ?
                """,
                (*_channel_values(channel), index),
            )
            if cur.rowcount == 0:
                raise IndexError(f"No channel stored at index {index}")


def _channel_values(channel: Channel) -> tuple:
    return (
        channel.channel_id,
        channel.display_name,
        channel.destination,
        channel.owner,
        channel.registered_at,
        channel.last_polled_at,
        json.dumps(list(channel.seen_item_ids)),
        channel.feed_cursor,
    )


def _row_to_channel(row: sqlite3.Row) -> Channel:
    return Channel(
        channel_id=row["channel_id"],
        display_name=row["display_name"],
        destination=row["destination"],
        owner=row["owner"],
        registered_at=int(row["registered_at"]),
        feed_cursor=row["feed_cursor"],
        last_polled_at=row["last_polled_at"],
        seen_item_ids=tuple(json.loads(row["seen_item_ids"] or "[]")),
    )
