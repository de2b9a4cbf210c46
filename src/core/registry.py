"""Channel registry: in-memory working copy over a storage port."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple

from core.models import Channel
from core.ports import StoragePort

LOGGER = logging.getLogger(__name__)


class ChannelRegistry:
    """Owns every Channel record.

    Reads return immutable copies. Mutations go through ``append``/``update``,
    which write through to storage under a single global lock so the inbox and
    feed tasks never interleave a partial write.
    """

    def __init__(self, storage: StoragePort) -> None:
        self._storage = storage
        self._lock = threading.Lock()
        self._channels: List[Channel] = list(storage.load_channels())
        LOGGER.info("Registry loaded %s channels", len(self._channels))

    def __len__(self) -> int:
        return len(self._channels)

    def list(self) -> List[Channel]:
        return list(self._channels)

    def get(self, index: int) -> Channel:
        if not 0 <= index < len(self._channels):
            raise IndexError(f"No channel at index {index}")
        return self._channels[index]

    def find(self, channel_id: str, destination: str) -> Optional[Tuple[int, Channel]]:
        """Return (index, channel) for an existing pair, if registered."""

        key = (channel_id, destination.lower())
        for index, channel in enumerate(self._channels):
            if channel.key() == key:
                return index, channel
        return None

    def append(self, channel: Channel) -> int:
        with self._lock:
            index = len(self._channels)
            # Storage first: a failed write must not leave a phantom row in memory.
            self._storage.insert_channel(index, channel)
            self._channels.append(channel)
        return index

    def update(self, index: int, channel: Channel) -> None:
        with self._lock:
            if not 0 <= index < len(self._channels):
                raise IndexError(f"No channel at index {index}")
            self._storage.save_channel(index, channel)
            self._channels[index] = channel
